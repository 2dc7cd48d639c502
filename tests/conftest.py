"""
Pytest configuration and shared fixtures for licensekeeper tests.
"""

import os
import tempfile
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from licensekeeper.licensing.license_manager import LicenseManager
from licensekeeper.persistence.db import Base, enter_test_mode, exit_test_mode
from licensekeeper.persistence.option_store import OptionStore
from licensekeeper.persistence.transient_cache import TransientCache


class FakeClock:
    """Controllable clock shared by the manager and the transient cache."""

    def __init__(self, timestamp: float = 1_700_000_000.0):
        self.timestamp = timestamp

    def time(self) -> float:
        return self.timestamp

    def utcnow(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc).replace(
            tzinfo=None
        )

    def advance(self, seconds: float) -> None:
        self.timestamp += seconds


@pytest.fixture(scope="function")
def engine():
    """Create test database engine with fresh schema for each test."""
    test_db_fd, test_db_file = tempfile.mkstemp(suffix=f"_{uuid.uuid4().hex}.db")
    os.close(test_db_fd)  # Close the file descriptor, we only need the path
    test_db_url = f"sqlite:///{test_db_file}"

    test_engine = create_engine(test_db_url, connect_args={"check_same_thread": False})

    # Enter test mode to prevent production database access
    enter_test_mode(test_engine)

    # Import models to ensure metadata registration
    from licensekeeper.persistence import models  # noqa: F401

    Base.metadata.create_all(bind=test_engine)

    yield test_engine

    test_engine.dispose()
    exit_test_mode()

    try:
        if os.path.exists(test_db_file):
            os.unlink(test_db_file)
    except OSError:
        pass


@pytest.fixture(scope="function")
def db_session(engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock():
    """A clock that only moves when told to."""
    return FakeClock()


@pytest.fixture
def options(db_session):
    return OptionStore(db_session)


@pytest.fixture
def cache(db_session, clock):
    return TransientCache(db_session, clock=clock.utcnow)


@pytest.fixture
def mock_client():
    """Licensing API client whose responses are set per test."""
    client = MagicMock()
    client.perform_remote_request = AsyncMock(return_value=None)
    return client


@pytest.fixture
def manager(options, cache, mock_client, clock):
    """License manager wired to the test database, a mock API and the fake clock."""
    return LicenseManager(
        options,
        cache,
        client=mock_client,
        key_override=None,
        time_func=clock.time,
        check_interval_hours=24,
    )
