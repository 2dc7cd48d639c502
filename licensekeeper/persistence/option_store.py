"""
Persistent key-value option storage backed by the option table.
"""

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from licensekeeper.persistence.models import Option
from licensekeeper.utils.verbosity_logger import get_logger, sanitize_log

logger = get_logger("licensekeeper.persistence.option_store")


class OptionStore:
    """
    Named settings stored as JSON values.

    Reads never raise; a failed write is logged, rolled back and reported
    through the return value.
    """

    def __init__(self, session: Session):
        self._session = session

    def get(self, name: str, default: Any = None) -> Any:
        """Return the stored value, or default when the option does not exist."""
        try:
            option = self._session.get(Option, name)
        except SQLAlchemyError as e:
            logger.error("Failed to read option %s: %s", sanitize_log(name), e)
            return default
        if option is None:
            return default
        return option.value

    def set(self, name: str, value: Any) -> bool:
        """Create or replace an option."""
        try:
            option = self._session.get(Option, name)
            if option is None:
                self._session.add(Option(name=name, value=value))
            else:
                option.value = value
            self._session.commit()
            return True
        except SQLAlchemyError as e:
            logger.error("Failed to save option %s: %s", sanitize_log(name), e)
            self._session.rollback()
            return False

    def delete(self, name: str) -> bool:
        """Remove an option.  Deleting a missing option is not an error."""
        try:
            option = self._session.get(Option, name)
            if option is not None:
                self._session.delete(option)
                self._session.commit()
            return True
        except SQLAlchemyError as e:
            logger.error("Failed to delete option %s: %s", sanitize_log(name), e)
            self._session.rollback()
            return False
