"""
Flask route blueprints for the label dispatch service.

- main: Health check
- packaging_slips: Scan form and "mark shipped" action

Each blueprint is registered with the Flask app in create_app().
"""

from .main import main_bp
from .packaging_slips import packaging_slips_bp

__all__ = [
    "main_bp",
    "packaging_slips_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(main_bp)
    app.register_blueprint(packaging_slips_bp)
