"""
OrderIntake - Flask Application Entry Point.

This is a slim app factory that:
1. Loads configuration (config.Config, which reads .env once at import)
2. Resolves the relay settings once (RelayConfig)
3. Creates the relay service and the submission orchestrator
4. Registers route blueprints
5. Sets up error handlers

ARCHITECTURE:
    Browser
    └── Order form (server-rendered, session state)
        └── SubmissionOrchestrator
            └── transport
                ├── LocalRelayClient -> RelayService   (RELAY_URL empty)
                └── HttpRelayClient  -> RELAY_URL      (relay runs elsewhere)

    RelayService (/api/orders)
    └── one POST per submission to the destination webhook, no retries

Request handlers never read the environment; everything they need is in
app.config.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx
from flask import Flask, flash, jsonify, redirect, request, url_for
from werkzeug.exceptions import RequestEntityTooLarge

from config import RelayConfig
from core.relay_client import HttpRelayClient, LocalRelayClient
from modules.image_checker import ImageConstraints
from modules.qr_codes import QRCodeLinkBuilder
from services.relay_service import RelayService
from services.submission_service import SubmissionOrchestrator
from routes import register_blueprints
from logging_config import setup_logging, get_logger


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def _wants_json() -> bool:
    return request.path.startswith("/api/")


def create_app(
    config_object: str | type = "config.Config",
    config_overrides: Optional[Mapping[str, Any]] = None,
    http_client: Optional[httpx.Client] = None,
) -> Flask:
    """
    Application factory - creates and configures Flask app.

    Args:
        config_object: Import path or class passed to app.config.from_object
        config_overrides: Values applied on top of config_object
        http_client: Optional httpx client shared by the relay service and
                     the HTTP relay transport (tests pass one with a mock
                     transport)

    Returns:
        Configured Flask application
    """
    # Create Flask app
    app = Flask(__name__)
    app.config.from_object(config_object)
    if config_overrides:
        app.config.update(config_overrides)

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(
        app_name="order_intake",
        log_level=log_level,
        enable_file_logging=enable_file_logging
    )

    # Set Flask's logger to use our configured logger
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting OrderIntake in {app.config.get('ENVIRONMENT')} mode")

    # Ensure upload folder exists
    upload_folder = Path(app.config["UPLOAD_FOLDER"])
    upload_folder.mkdir(parents=True, exist_ok=True)

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    relay_config = RelayConfig.from_mapping(app.config)
    relay_service = RelayService(relay_config, http_client=http_client)
    app.config["RELAY_SERVICE"] = relay_service

    relay_url = (app.config.get("RELAY_URL") or "").strip()
    if relay_url:
        transport = HttpRelayClient(
            relay_url,
            timeout_seconds=relay_config.timeout_seconds,
            http_client=http_client,
            logger=get_logger("core.relay_client"),
        )
        logger.info(f"Order form submits to relay at {relay_url}")
    else:
        transport = LocalRelayClient(relay_service, logger=get_logger("core.relay_client"))
        logger.info("Order form submits to the in-process relay")

    orchestrator = SubmissionOrchestrator(
        transport,
        constraints=ImageConstraints.from_config(app.config),
        qr_builder=QRCodeLinkBuilder.from_config(app.config),
    )
    app.config["ORCHESTRATOR"] = orchestrator

    # =========================================================================
    # REGISTER BLUEPRINTS
    # =========================================================================

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(RequestEntityTooLarge)
    def handle_file_too_large(e):
        max_mb = app.config.get("MAX_CONTENT_LENGTH", 16 * 1024 * 1024) / (1024 * 1024)
        message = f"Upload too large. Maximum request size is {max_mb:.0f} MB."
        if _wants_json():
            return jsonify({"error": message}), 413
        flash(message, "error")
        return redirect(url_for("order.form"))

    @app.errorhandler(404)
    def handle_not_found(e):
        if _wants_json():
            return jsonify({"error": "Not found"}), 404
        flash("Page not found.", "warning")
        return redirect(url_for("order.form"))

    @app.errorhandler(500)
    def handle_server_error(e):
        logger.error(f"500 error: {e}", exc_info=True)
        if _wants_json():
            return jsonify({"error": "Internal server error"}), 500
        flash("An unexpected error occurred. Please try again.", "error")
        return redirect(url_for("order.form"))

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(debug=debug_mode)
