"""
Label Dispatch - Flask Application Entry Point.

This is a slim app factory that:
1. Loads configuration and sets up logging
2. Builds the carrier client and mailer (fail-fast on missing settings)
3. Builds the label dispatcher with the configured policy
4. Registers the dispatcher's events with the event dispatcher
5. Registers route blueprints and error handlers

REQUEST FLOW:
    POST /packaging-slips/<id>/shipped
    └── EventDispatcher.dispatch(EVENT_STATUS_SHIPPED, event, session)
        └── ShipmentLabelDispatcher.handle_status_shipped
            ├── CarrierClient.create_parcel (once per slip)
            ├── CarrierClient.fetch_label
            └── Mailer.send
"""

from __future__ import annotations

import atexit
import logging
import os
from typing import Union

from flask import Flask, jsonify

from logging_config import setup_logging, get_logger
from core.carrier_client import CarrierClient
from core.events import EventDispatcher
from core.exceptions import ConfigurationError, LabelDispatchError
from core.mailer import Mailer
from services.label_dispatcher import DispatchPolicy, ShipmentLabelDispatcher
from services.repositories import load_repositories
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def _strict_errors(app: Flask) -> bool:
    """LABEL_STRICT_ERRORS if set, otherwise strict only for the configurable variant."""
    value = str(app.config.get("LABEL_STRICT_ERRORS", "")).strip().lower()
    if value:
        return value in ("1", "true", "yes", "on")
    return not app.config.get("LABEL_FIXED_RECIPIENT")


def build_policy(app: Flask) -> DispatchPolicy:
    fixed_recipient = app.config.get("LABEL_FIXED_RECIPIENT")
    if fixed_recipient:
        return DispatchPolicy.fixed(fixed_recipient, strict_errors=_strict_errors(app))
    return DispatchPolicy.configurable(strict_errors=_strict_errors(app))


def create_app(config_object: Union[str, object] = "config.Config") -> Flask:
    """
    Application factory - creates and configures Flask app.

    Args:
        config_object: Import path or class of the configuration to load

    Returns:
        Configured Flask application

    Raises:
        ConfigurationError: If carrier or SMTP settings are missing
    """
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(
        log_level=log_level,
        enable_file_logging=enable_file_logging and not app.config.get("TESTING")
    )
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting label dispatch in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # CORE INITIALIZATION (FAIL-FAST)
    # =========================================================================

    try:
        carrier_client = CarrierClient(
            base_url=app.config.get("CARRIER_API_URL", ""),
            api_token=app.config.get("CARRIER_API_TOKEN", ""),
            timeout_seconds=app.config.get("CARRIER_TIMEOUT_SECONDS", 30.0),
            parcel_type=app.config.get("CARRIER_PARCEL_TYPE", "SMALL"),
        )
        mailer = Mailer(
            sender=app.config.get("SMTP_SENDER", "labels@localhost"),
            host=app.config.get("SMTP_HOST", ""),
            port=app.config.get("SMTP_PORT", 587),
            use_tls=app.config.get("SMTP_USE_TLS", True),
            username=app.config.get("SMTP_USERNAME", ""),
            password=app.config.get("SMTP_PASSWORD", ""),
            suppress_send=app.config.get("MAIL_SUPPRESS_SEND", False),
        )
    except ConfigurationError as e:
        logger.error(f"FATAL: Cannot start application - {e}")
        raise

    if not app.config.get("CARRIER_API_TOKEN"):
        logger.warning("CARRIER_API_TOKEN is empty; carrier calls will be rejected")

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    shipping_methods, packaging_slips = load_repositories(app.config.get("SHIPPING_DATA_FILE"))

    policy = build_policy(app)
    label_dispatcher = ShipmentLabelDispatcher(
        shipping_methods=shipping_methods,
        carrier_client=carrier_client,
        mailer=mailer,
        policy=policy,
        carrier_type=app.config.get("CARRIER_SHIPPING_TYPE", "carrier_dhl"),
        subject=app.config.get("LABEL_EMAIL_SUBJECT", "PDF DHL Barcode"),
        placeholder_body=app.config.get("LABEL_EMAIL_PLACEHOLDER", "See attachment"),
    )

    event_dispatcher = EventDispatcher()
    event_dispatcher.subscribe_all(label_dispatcher.subscribed_events())

    if policy.configurable_recipient:
        logger.info(f"Label dispatcher: configurable recipient (strict errors: {policy.strict_errors})")
    else:
        logger.info(
            f"Label dispatcher: fixed recipient {policy.fixed_recipient} "
            f"(strict errors: {policy.strict_errors})"
        )

    # Store in app config for access by routes
    app.config["CARRIER_CLIENT"] = carrier_client
    app.config["MAILER"] = mailer
    app.config["SHIPPING_METHODS"] = shipping_methods
    app.config["PACKAGING_SLIPS"] = packaging_slips
    app.config["LABEL_DISPATCHER"] = label_dispatcher
    app.config["EVENT_DISPATCHER"] = event_dispatcher

    # =========================================================================
    # CLEANUP REGISTRATION
    # =========================================================================

    def cleanup():
        """Close the carrier HTTP session on shutdown."""
        carrier_client.close()
        logger.info("Shutdown complete")

    # Test runs build many apps; their handlers are closed before exit
    if not app.config.get("TESTING"):
        atexit.register(cleanup)

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(LabelDispatchError)
    def handle_dispatch_error(e: LabelDispatchError):
        logger.error(f"Label dispatch failed: {e}", exc_info=True)
        return jsonify({"success": False, "error": e.message, "details": e.details}), 502

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify({"success": False, "error": "Not found"}), 404

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(debug=debug_mode)
