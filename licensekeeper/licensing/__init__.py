"""
licensekeeper licensing package.

Components:
- records: LicenseStatus, KeySource, LicenseRecord, LicenseResult and Addon
- remote_api: aiohttp client for the licensing (updater) API
- notices: admin notice collection and rendering
- license_manager: verify/validate/deactivate workflow, caching and notices

Note: The manager is imported lazily so that importing the value types does
not pull in the database layer.
Use: from licensekeeper.licensing.license_manager import LicenseManager
"""

from licensekeeper.licensing.records import (
    Addon,
    KeySource,
    LicenseRecord,
    LicenseResult,
    LicenseStatus,
)

__all__ = [
    "Addon",
    "KeySource",
    "LicenseRecord",
    "LicenseResult",
    "LicenseStatus",
]


def __getattr__(name):
    """Lazy import to avoid circular dependencies."""
    if name == "LicenseManager":
        from licensekeeper.licensing.license_manager import LicenseManager

        return LicenseManager
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
