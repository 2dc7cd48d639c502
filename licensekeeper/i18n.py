"""
Translation support for licensekeeper.

Message catalogs live in licensekeeper/locales/<lang>/LC_MESSAGES/licensekeeper.mo.
A catalog that has not been compiled is read from its .po file instead.
When no catalog is available the original (English) strings are returned.
"""

import gettext
import os

from licensekeeper.utils.po_catalog import parse_po
from licensekeeper.utils.verbosity_logger import get_logger

logger = get_logger("licensekeeper.i18n")

LOCALE_DIR = os.path.join(os.path.dirname(__file__), "locales")
DOMAIN = "licensekeeper"

_translations = {"current": gettext.NullTranslations()}


class POTranslations(gettext.NullTranslations):
    """Translations served from an uncompiled .po catalog."""

    def __init__(self, catalog: dict):
        super().__init__()
        self._catalog = catalog

    def gettext(self, message):
        return self._catalog.get(message) or message


def _load(language: str) -> gettext.NullTranslations:
    try:
        return gettext.translation(DOMAIN, localedir=LOCALE_DIR, languages=[language])
    except OSError:
        pass

    po_file = os.path.join(LOCALE_DIR, language, "LC_MESSAGES", f"{DOMAIN}.po")
    if os.path.exists(po_file):
        return POTranslations(parse_po(po_file))

    logger.debug("No catalog for language %s, using English", language)
    return gettext.NullTranslations()


def set_language(language: str) -> None:
    """Switch the active translation catalog."""
    _translations["current"] = _load(language)


def _(message: str) -> str:
    """Translate a message using the active catalog."""
    return _translations["current"].gettext(message)
