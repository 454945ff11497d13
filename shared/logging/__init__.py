"""
Logging Module
==============

Structured logging using structlog with JSON output for production
and colored console output for development.

Usage:
    from shared.logging import get_logger, setup_logging

    # Setup at application start
    setup_logging()

    # Get logger for a module
    logger = get_logger(__name__)

    # Log with context
    logger.info("device_registered", device_id="65f0c1", imei="123456789012345")
    logger.error("email_send_failed", error=str(e), to=address)
"""

from shared.logging.logger import (
    bind_context,
    censor_dict,
    clear_context,
    get_logger,
    setup_logging,
)


__all__ = [
    "get_logger",
    "setup_logging",
    "bind_context",
    "clear_context",
    "censor_dict",
]
