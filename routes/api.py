"""
API routes (JSON endpoints).

Handles:
- /api/orders          - Webhook relay (multipart in, JSON out)
- /api/images/validate - Check a single image as soon as it is attached
- /health              - Health check endpoint

Every response from these routes is JSON, including failures.
"""

from pathlib import Path
import tempfile

from flask import (
    Blueprint,
    current_app,
    jsonify,
    request,
)

from models.relay import RelayRequest, RelayResponse
from modules.image_checker import validate_image
from modules.upload_store import discard, store_upload
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

api_bp = Blueprint("api", __name__)

INTERNAL_ERROR = "Internal server error"


def _json_response(response: RelayResponse):
    return jsonify(response.body), response.status_code


@api_bp.route(
    "/api/orders",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    provide_automatic_options=False,
)
def relay_order():
    """
    Relay an order submission to the destination webhook.

    OPTIONS -> 204 (preflight)
    POST    -> relayed; see RelayService for the status mapping
    other   -> 405
    """
    if request.method == "OPTIONS":
        return "", 204

    if request.method != "POST":
        return jsonify({"error": "Method not allowed"}), 405

    relay_service = current_app.config["RELAY_SERVICE"]
    try:
        relay_request = RelayRequest.from_form(request.form, request.files)
        response = relay_service.relay(relay_request)
    except Exception as e:
        logger.error(f"Relay failed unexpectedly: {e}", exc_info=True)
        return jsonify({"error": INTERNAL_ERROR}), 500

    return _json_response(response)


@api_bp.route("/api/images/validate", methods=["POST"])
def validate_single_image():
    """
    Check one image against the upload rules.

    Expects a multipart file part named "image". Nothing is kept.

    Returns:
        {"valid": true, "width": w, "height": h}
        {"valid": false, "reason": "...", "message": "..."}
    """
    file_storage = request.files.get("image")
    if not file_storage or file_storage.filename == "":
        return jsonify({"error": "No image provided"}), 400

    orchestrator = current_app.config["ORCHESTRATOR"]
    scratch_dir = Path(current_app.config.get("UPLOAD_FOLDER") or tempfile.gettempdir())

    asset = None
    try:
        asset = store_upload(file_storage, scratch_dir)
        result = validate_image(asset, orchestrator.constraints)
    except OSError as e:
        logger.error(f"Image validation failed: {e}", exc_info=True)
        return jsonify({"error": INTERNAL_ERROR}), 500
    finally:
        discard(asset)

    if result.valid:
        return jsonify({"valid": True, "width": result.asset.width, "height": result.asset.height})

    return jsonify({"valid": False, "reason": result.reason, "message": result.message})


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check; reports whether the relay has a destination."""
    relay_service = current_app.config.get("RELAY_SERVICE")
    configured = bool(relay_service and relay_service.config.webhook_url)
    return jsonify({
        "status": "healthy",
        "service": "order-intake",
        "webhook_configured": configured,
    })
