"""
Centralized logging configuration for the label dispatch service.

Every log record carries the id and path of the web request it belongs to,
so the carrier and mail calls of one scan can be followed in the log.

Features:
    - Request id and path in all log messages ("-" outside a request)
    - Console output (always enabled)
    - Rotating file logs (optional, for production)
    - Separate error log for ERROR/CRITICAL messages

Log Format:
    2026-10-19 10:15:30 [INFO    ] [-] label_dispatch.app - Starting application
    2026-10-19 10:15:31 [INFO    ] [3f2a9c1e POST /packaging-slips/10/shipped] label_dispatch.services.label_dispatcher - Sent PDF label for PS-0010 to ops@example.com

Usage:
    # At application startup
    from logging_config import setup_logging, get_logger

    setup_logging(log_level=logging.INFO, enable_file_logging=True)

    # In modules
    logger = get_logger(__name__)
"""

import logging
import sys
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from flask import g, has_request_context, request


APP_LOGGER_NAME = "label_dispatch"


# =============================================================================
# REQUEST CONTEXT FILTER
# =============================================================================

class RequestContextFilter(logging.Filter):
    """
    Logging filter that adds request context to all log records.

    Adds `request_context` to each record: a short request id followed by the
    method and path, or "-" when logging outside a request.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            if "request_id" not in g:
                g.request_id = uuid.uuid4().hex[:8]
            record.request_context = f"{g.request_id} {request.method} {request.path}"
        else:
            record.request_context = "-"

        # Never drop the record, only annotate it
        return True


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(
    app_name: str = APP_LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """
    Configure application logging with request context.

    Args:
        app_name: Name of the root logger (default: "label_dispatch")
        log_level: Minimum log level (default: INFO)
        log_dir: Directory for log files (default: ./logs relative to this file)
        enable_file_logging: Whether to write to log files (default: True)

    Returns:
        Configured root logger instance
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False  # Prevent duplicate logs to root logger

    # Remove any existing handlers (allows re-configuration)
    logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)-8s] [%(request_context)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    context_filter = RequestContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    logger.addHandler(console_handler)

    if enable_file_logging:
        if log_dir is None:
            log_dir = Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        app_log_file = log_dir / f"{app_name}.log"
        file_handler = RotatingFileHandler(
            filename=app_log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB per file
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        logger.addHandler(file_handler)

        error_log_file = log_dir / f"{app_name}_error.log"
        error_handler = RotatingFileHandler(
            filename=error_log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        error_handler.addFilter(context_filter)
        logger.addHandler(error_handler)

        logger.info(f"File logging enabled: {app_log_file}")

    logger.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger under the application namespace.

    Example:
        # In services/label_dispatcher.py
        logger = get_logger(__name__)
        # Logger name: "label_dispatch.services.label_dispatcher"
    """
    if not name.startswith(APP_LOGGER_NAME):
        name = f"{APP_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
