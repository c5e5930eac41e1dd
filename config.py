"""
Configuration for OrderIntake.

The relay needs a destination webhook URL. Without it the relay endpoint
answers every request with a generic 500 and never calls out.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
# This must happen before the Config class is defined
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


def _webhook_url_from_env() -> str:
    return (
        os.environ.get("APPSCRIPT_WEBAPP_URL")
        or os.environ.get("APPSCRIPT_URL")
        or ""
    ).strip()


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    UPLOAD_FOLDER = os.environ.get(
        "UPLOAD_FOLDER", str(BASE_DIR / "static" / "uploads")
    )
    SESSION_COOKIE_NAME = "order_intake_session"
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")

    # Debug mode
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"

    # ==========================================================================
    # Image uploads
    # ==========================================================================
    # Five images of up to MAX_IMAGE_SIZE_MB each, plus a little room for the
    # text fields, must fit in one request.
    # ==========================================================================
    MAX_IMAGE_SIZE_MB = int(os.environ.get("MAX_IMAGE_SIZE_MB", "100"))
    MAX_CONTENT_LENGTH = (5 * MAX_IMAGE_SIZE_MB + 10) * 1024 * 1024

    # ==========================================================================
    # Webhook relay
    # ==========================================================================
    # APPSCRIPT_WEBAPP_URL: destination webhook (required by the relay)
    #   APPSCRIPT_URL is accepted as an older name for the same setting.
    # APPSCRIPT_SECRET: optional shared secret, forwarded as "secret"
    # WEBHOOK_TIMEOUT_SECONDS: single attempt, no retries
    # RELAY_URL: where the order form posts submissions. Empty means the
    #   form hands submissions to the relay in-process.
    # ==========================================================================
    WEBHOOK_URL = _webhook_url_from_env()
    WEBHOOK_SECRET = os.environ.get("APPSCRIPT_SECRET", "").strip()
    WEBHOOK_TIMEOUT_SECONDS = float(os.environ.get("WEBHOOK_TIMEOUT_SECONDS", "60"))
    RELAY_URL = os.environ.get("RELAY_URL", "").strip()

    # QR code image service
    QR_API_BASE = os.environ.get("QR_API_BASE", "https://api.qrserver.com/v1/create-qr-code/")
    QR_SIZE = os.environ.get("QR_SIZE", "200x200")


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 3600  # 1 hour


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    WEBHOOK_URL = ""
    WEBHOOK_SECRET = ""
    RELAY_URL = ""


@dataclass(frozen=True)
class RelayConfig:
    """
    Settings the relay needs, resolved once at startup.

    Request handlers receive this object; they never read the environment.
    """

    webhook_url: str = ""
    secret: Optional[str] = None
    timeout_seconds: float = 60.0

    @classmethod
    def from_mapping(cls, config) -> "RelayConfig":
        """Build from a Flask config (or any mapping with the same keys)."""
        return cls(
            webhook_url=(config.get("WEBHOOK_URL") or "").strip(),
            secret=(config.get("WEBHOOK_SECRET") or "").strip() or None,
            timeout_seconds=float(config.get("WEBHOOK_TIMEOUT_SECONDS", 60.0)),
        )
