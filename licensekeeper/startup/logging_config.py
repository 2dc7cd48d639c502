"""
Logging configuration module for the licensekeeper server.

This module provides functions to configure logging with UTC timestamp formatting
and proper file/console handlers.
"""

import logging
import os
import sys

from licensekeeper.config.config import get_log_file
from licensekeeper.utils.logging_formatter import UTCTimestampFormatter
from licensekeeper.utils.verbosity_logger import get_logger

logger = get_logger("licensekeeper.startup.logging")


def configure_logging():
    """Configure logging with UTC timestamp formatter and file/console handlers."""
    logger.info("=== CONFIGURING LOGGING ===")

    handlers = [logging.StreamHandler()]

    # LICENSEKEEPER_LOG_FILE wins over the config file setting
    log_file = os.environ.get("LICENSEKEEPER_LOG_FILE") or get_log_file()
    if log_file:
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
            logger.info("Logging to file: %s", log_file)
        except PermissionError as e:
            logger.error("Permission denied for log file: %s", e)
            print(
                f"WARNING: Cannot write to {log_file} due to permissions. "
                "Logging to console only.",
                file=sys.stderr,
            )
        except OSError as e:
            logger.error("Failed to create file handler: %s", e)

    logging.basicConfig(
        level=logging.INFO,
        handlers=handlers,
    )

    utc_formatter = UTCTimestampFormatter("%(levelname)s: %(name)s: %(message)s")
    for handler in logging.root.handlers:
        handler.setFormatter(utc_formatter)
    logger.info("Logging configuration complete")
