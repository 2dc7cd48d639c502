"""
Persistence models for licensekeeper.

The option and transient tables are the key-value and TTL-cache stores the
license manager works against.  The validation log keeps an audit trail of
calls to the remote licensing API.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from licensekeeper.persistence.db import Base


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Option(Base):
    """
    Named persistent setting.  Values are stored as JSON.
    """

    __tablename__ = "option"

    name = Column(String(191), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def __repr__(self):
        return f"<Option(name='{self.name}')>"


class Transient(Base):
    """
    Named cached value with an absolute expiry time.
    """

    __tablename__ = "transient"

    name = Column(String(191), primary_key=True)
    value = Column(JSON, nullable=True)
    expires_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Transient(name='{self.name}', expires_at={self.expires_at})>"


class LicenseValidationLog(Base):
    """
    Log of calls to the licensing API for audit purposes.
    """

    __tablename__ = "license_validation_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(50), nullable=False)  # "verify-key", "validate-key", ...
    result = Column(String(20), nullable=False)  # "success", "failure", "error"
    status = Column(String(20), nullable=True)  # license status after the call
    error_message = Column(Text, nullable=True)
    validated_at = Column(
        DateTime,
        nullable=False,
        default=_utcnow,
        index=True,
    )

    def __repr__(self):
        return (
            f"<LicenseValidationLog(id={self.id}, action='{self.action}', "
            f"result='{self.result}')>"
        )
