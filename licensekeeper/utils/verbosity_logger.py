"""
Logging helpers for licensekeeper.

Loggers are filtered by an explicit set of levels read from the pipe-separated
``logging.level`` setting, e.g. "INFO|ERROR" logs info and error messages but
not warnings.  License keys must never reach the logs in clear text; pass them
through mask_key first.
"""

import logging
import re
from typing import FrozenSet, Iterable, Optional

from licensekeeper.config.config import get_log_format, get_log_levels
from licensekeeper.utils.logging_formatter import UTCTimestampFormatter

# Matches control characters that can cause log injection (CWE-117)
_CONTROL_CHAR_RE = re.compile(r"[\r\n]")

LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

DEFAULT_LEVELS = frozenset(
    {logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL}
)


def sanitize_log(value) -> str:
    """Sanitize a value for safe logging by removing newline characters (CWE-117)."""
    return _CONTROL_CHAR_RE.sub("", str(value))


def mask_key(key) -> str:
    """Mask all but the last four characters of a license key for logging."""
    if not key:
        return ""
    key = sanitize_log(key)
    if len(key) <= 4:
        return "*" * len(key)
    return "*" * (len(key) - 4) + key[-4:]


def parse_levels(level_config: str) -> FrozenSet[int]:
    """
    Turn "INFO|ERROR" into {logging.INFO, logging.ERROR}.

    Unknown names are ignored.  A setting naming no known level gives
    DEFAULT_LEVELS so a typo cannot silence the service.
    """
    levels = {
        LEVEL_NAMES[name.strip().upper()]
        for name in level_config.split("|")
        if name.strip().upper() in LEVEL_NAMES
    }
    return frozenset(levels) if levels else DEFAULT_LEVELS


def _configured_levels() -> FrozenSet[int]:
    try:
        return parse_levels(get_log_levels())
    except (KeyError, AttributeError, TypeError):
        return DEFAULT_LEVELS


class FlexibleLogger:
    """
    Wrapper around a stdlib logger that only emits the configured levels.
    """

    def __init__(self, name: str, levels: Optional[Iterable[int]] = None):
        self.logger = logging.getLogger(name)
        self.name = name
        self.enabled_levels = (
            frozenset(levels) if levels is not None else _configured_levels()
        )

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(UTCTimestampFormatter(get_log_format()))
            self.logger.addHandler(handler)
            # Filtering happens in log()
            self.logger.setLevel(logging.DEBUG)

    def is_enabled_for(self, level: int) -> bool:
        return level in self.enabled_levels

    def log(self, level: int, msg: str, *args, **kwargs):
        """Log msg at level if that level is enabled."""
        if self.is_enabled_for(level):
            # Attribute the record to our caller, not this wrapper
            kwargs.setdefault("stacklevel", 2)
            self.logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        kwargs.setdefault("stacklevel", 3)
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        kwargs.setdefault("stacklevel", 3)
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        kwargs.setdefault("stacklevel", 3)
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        kwargs.setdefault("stacklevel", 3)
        self.log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs):
        kwargs.setdefault("stacklevel", 3)
        self.log(logging.CRITICAL, msg, *args, **kwargs)


def get_logger(name: str) -> FlexibleLogger:
    """Get a logger filtered by the configured levels."""
    return FlexibleLogger(name)
