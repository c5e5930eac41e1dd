"""
Flask route blueprints for OrderIntake.

This module contains all route handlers organized by functionality:
- order: Order form (prefill, image attach, submit)
- resubmit: Replacement images for an existing order
- api: JSON endpoints (webhook relay, single-image check, health)

Each blueprint is registered with the Flask app in create_app().
"""

from .order import order_bp
from .resubmit import resubmit_bp
from .api import api_bp

__all__ = [
    "order_bp",
    "resubmit_bp",
    "api_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(order_bp)
    app.register_blueprint(resubmit_bp)
    app.register_blueprint(api_bp)
