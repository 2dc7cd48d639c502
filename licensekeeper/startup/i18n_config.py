"""
Translation setup for the licensekeeper server.
"""

from licensekeeper.config.config import get_language
from licensekeeper.i18n import set_language
from licensekeeper.utils.verbosity_logger import get_logger, sanitize_log

logger = get_logger("licensekeeper.startup.i18n")


def configure_translations():
    """Activate the message catalog for the configured language."""
    language = get_language()
    set_language(language)
    logger.info("Messages will be shown in language: %s", sanitize_log(language))
