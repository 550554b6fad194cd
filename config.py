"""
Configuration for the label dispatch service.

Carrier and SMTP settings come from the environment (or a .env file).
Setting LABEL_FIXED_RECIPIENT switches the dispatcher to the fixed-recipient
variant, which always mails a PDF to that address.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    SESSION_COOKIE_NAME = "label_dispatch_session"
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"

    # Seed data for shipping methods and packaging slips. data/ is not part of
    # the installed distribution; outside a source checkout point
    # SHIPPING_DATA_FILE at your own file. A missing file gives empty lookups.
    SHIPPING_DATA_FILE = os.environ.get(
        "SHIPPING_DATA_FILE", str(BASE_DIR / "data" / "shipping.json")
    )

    # ==========================================================================
    # Carrier API
    # ==========================================================================
    # CARRIER_SHIPPING_TYPE: shipping method type handled by this service.
    #   Packaging slips with any other shipping method are ignored.
    # ==========================================================================
    CARRIER_API_URL = os.environ.get("CARRIER_API_URL", "https://api-gw.dhlparcel.nl")
    CARRIER_API_TOKEN = os.environ.get("CARRIER_API_TOKEN", "")
    CARRIER_TIMEOUT_SECONDS = float(os.environ.get("CARRIER_TIMEOUT_SECONDS", "30"))
    CARRIER_PARCEL_TYPE = os.environ.get("CARRIER_PARCEL_TYPE", "SMALL")
    CARRIER_SHIPPING_TYPE = os.environ.get("CARRIER_SHIPPING_TYPE", "carrier_dhl")

    # ==========================================================================
    # Label email
    # ==========================================================================
    # LABEL_FIXED_RECIPIENT: when set, every label is mailed as PDF to this
    #   address and the form fields are not added.
    # LABEL_STRICT_ERRORS: fail the request when the carrier call fails.
    #   Defaults to on for the configurable variant, off for the fixed one.
    # ==========================================================================
    LABEL_EMAIL_SUBJECT = os.environ.get("LABEL_EMAIL_SUBJECT", "PDF DHL Barcode")
    LABEL_EMAIL_PLACEHOLDER = os.environ.get("LABEL_EMAIL_PLACEHOLDER", "See attachment")
    LABEL_FIXED_RECIPIENT = os.environ.get("LABEL_FIXED_RECIPIENT", "")
    LABEL_STRICT_ERRORS = os.environ.get("LABEL_STRICT_ERRORS", "")

    # ==========================================================================
    # SMTP
    # ==========================================================================
    SMTP_HOST = os.environ.get("SMTP_HOST", "")
    SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
    SMTP_USE_TLS = _env_flag("SMTP_USE_TLS", "1")
    SMTP_USERNAME = os.environ.get("SMTP_USERNAME", "")
    SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")
    SMTP_SENDER = os.environ.get("SMTP_SENDER", "labels@localhost")
    MAIL_SUPPRESS_SEND = _env_flag("MAIL_SUPPRESS_SEND", "0")


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
    MAIL_SUPPRESS_SEND = True


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    SECRET_KEY = "testing-secret-key"
    SHIPPING_DATA_FILE = ""
    CARRIER_API_URL = "https://carrier.test"
    CARRIER_API_TOKEN = "test-token"
    CARRIER_SHIPPING_TYPE = "carrier_dhl"
    LABEL_FIXED_RECIPIENT = ""
    LABEL_STRICT_ERRORS = ""
    MAIL_SUPPRESS_SEND = True
