"""
Value types for license state: the persisted license record, the result of a
license operation, and the addon descriptors returned by the licensing API.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional


class LicenseStatus(str, Enum):
    """Status of the stored license after the last remote check."""

    VALID = "valid"
    EXPIRED = "expired"
    DISABLED = "disabled"
    INVALID = "invalid"
    UNKNOWN = "unknown"  # the licensing API could not be reached


class KeySource(str, Enum):
    """Where the active license key comes from."""

    CONSTANT = "constant"
    OPTION = "option"
    MISSING = "missing"


@dataclass
class LicenseRecord:
    """
    The persisted license option.

    ``status`` is the source of truth.  The legacy ``is_expired``,
    ``is_disabled`` and ``is_invalid`` flags are written alongside it and only
    read back for records stored without a status.
    """

    key: str = ""
    license_type: str = ""
    status: LicenseStatus = LicenseStatus.VALID

    @property
    def is_expired(self) -> bool:
        return self.status == LicenseStatus.EXPIRED

    @property
    def is_disabled(self) -> bool:
        return self.status == LicenseStatus.DISABLED

    @property
    def is_invalid(self) -> bool:
        return self.status == LicenseStatus.INVALID

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "type": self.license_type,
            "status": self.status.value,
            "is_expired": self.is_expired,
            "is_disabled": self.is_disabled,
            "is_invalid": self.is_invalid,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["LicenseRecord"]:
        """
        Build a record from its stored form.

        Returns None for an empty or malformed option.
        """
        if not data or not isinstance(data, dict):
            return None

        try:
            status = LicenseStatus(data.get("status"))
        except ValueError:
            # Legacy shape: several flags may be set, keep the strongest one
            if data.get("is_invalid"):
                status = LicenseStatus.INVALID
            elif data.get("is_expired"):
                status = LicenseStatus.EXPIRED
            elif data.get("is_disabled"):
                status = LicenseStatus.DISABLED
            else:
                status = LicenseStatus.VALID

        return cls(
            key=data.get("key") or "",
            license_type=data.get("type") or "",
            status=status,
        )


@dataclass
class LicenseResult:
    """Result of a license operation."""

    success: bool
    message: Optional[str] = None
    status: Optional[LicenseStatus] = None
    license_type: Optional[str] = None


@dataclass
class Addon:
    """An optional feature module listed by the licensing API."""

    slug: str
    title: str = ""
    version: str = ""
    image: str = ""
    excerpt: str = ""
    id: Optional[int] = None
    categories: List[str] = field(default_factory=list)
    types: List[str] = field(default_factory=list)
    url: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Addon":
        return cls(
            slug=data.get("slug") or "",
            title=data.get("title") or "",
            version=data.get("version") or "",
            image=data.get("image") or "",
            excerpt=data.get("excerpt") or "",
            id=data.get("id"),
            categories=list(data.get("categories") or []),
            types=list(data.get("types") or []),
            url=data.get("url") or "",
        )

    def available_for(self, license_type: str) -> bool:
        """Whether the given license tier includes this addon."""
        return bool(license_type) and license_type.lower() in self.types
