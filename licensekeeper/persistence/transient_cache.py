"""
TTL cache backed by the transient table.

A stored value of None or False is a cache hit; callers test for a miss
against the MISS sentinel.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from licensekeeper.persistence.models import Transient
from licensekeeper.utils.verbosity_logger import get_logger, sanitize_log

logger = get_logger("licensekeeper.persistence.transient_cache")

MISS = object()

MINUTE_IN_SECONDS = 60
HOUR_IN_SECONDS = 60 * MINUTE_IN_SECONDS
DAY_IN_SECONDS = 24 * HOUR_IN_SECONDS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TransientCache:
    """
    Named values that expire after a number of seconds.
    """

    def __init__(self, session: Session, clock: Optional[Callable[[], datetime]] = None):
        self._session = session
        self._clock = clock or _utcnow

    def get(self, name: str) -> Any:
        """Return the cached value, or MISS when absent or expired."""
        try:
            transient = self._session.get(Transient, name)
            if transient is None:
                return MISS
            if transient.expires_at <= self._clock():
                logger.debug("Transient %s expired", sanitize_log(name))
                self._session.delete(transient)
                self._session.commit()
                return MISS
            return transient.value
        except SQLAlchemyError as e:
            logger.error("Failed to read transient %s: %s", sanitize_log(name), e)
            self._session.rollback()
            return MISS

    def set(self, name: str, value: Any, ttl_seconds: int) -> bool:
        """Store a value for ttl_seconds."""
        expires_at = self._clock() + timedelta(seconds=ttl_seconds)
        try:
            transient = self._session.get(Transient, name)
            if transient is None:
                self._session.add(
                    Transient(name=name, value=value, expires_at=expires_at)
                )
            else:
                transient.value = value
                transient.expires_at = expires_at
            self._session.commit()
            return True
        except SQLAlchemyError as e:
            logger.error("Failed to save transient %s: %s", sanitize_log(name), e)
            self._session.rollback()
            return False

    def delete(self, name: str) -> bool:
        """Drop a cached value.  Deleting a missing entry is not an error."""
        try:
            transient = self._session.get(Transient, name)
            if transient is not None:
                self._session.delete(transient)
                self._session.commit()
            return True
        except SQLAlchemyError as e:
            logger.error("Failed to delete transient %s: %s", sanitize_log(name), e)
            self._session.rollback()
            return False
