"""
This module manages the "db" object which is the gateway into the SQLAlchemy
ORM used by licensekeeper.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from licensekeeper.config import config

# Database context - determines whether we're in production or test mode
IS_TEST_MODE = False
TEST_ENGINE = None
TEST_SESSION_LOCAL = None

# Production database components
PROD_ENGINE = None
PROD_SESSION_LOCAL = None


def _init_production_database():
    """Initialize production database connection using configuration."""
    global PROD_ENGINE, PROD_SESSION_LOCAL  # pylint: disable=global-statement

    if PROD_ENGINE is not None:
        return

    database_url = config.get_database_url()
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    PROD_ENGINE = create_engine(database_url, connect_args=connect_args, echo=False)
    PROD_SESSION_LOCAL = sessionmaker(
        autocommit=False, autoflush=False, bind=PROD_ENGINE
    )


# Get the base model class - we can use this to extend any models
Base = declarative_base()


def enter_test_mode(test_engine):
    """
    Enter test mode with the provided test engine.
    This prevents any production database access during tests.
    """
    global IS_TEST_MODE, TEST_ENGINE, TEST_SESSION_LOCAL  # pylint: disable=global-statement
    IS_TEST_MODE = True
    TEST_ENGINE = test_engine
    TEST_SESSION_LOCAL = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine
    )


def exit_test_mode():
    """Exit test mode and return to production database access."""
    global IS_TEST_MODE, TEST_ENGINE, TEST_SESSION_LOCAL  # pylint: disable=global-statement
    IS_TEST_MODE = False
    TEST_ENGINE = None
    TEST_SESSION_LOCAL = None


def get_engine():
    """
    Provide a mechanism to retrieve the engine from within the rest of the application.
    Returns test engine if in test mode, production engine otherwise.
    """
    if IS_TEST_MODE:
        if TEST_ENGINE is None:
            raise RuntimeError("Test mode is active but no test engine is configured")
        return TEST_ENGINE

    _init_production_database()
    return PROD_ENGINE


def get_session_local():
    """Get the appropriate session factory based on current mode."""
    if IS_TEST_MODE:
        return TEST_SESSION_LOCAL
    _init_production_database()
    return PROD_SESSION_LOCAL


def get_db():
    """
    Provide a mechanism to retrieve the database from within the rest of the application.
    Returns test session if in test mode, production session otherwise.
    """
    if IS_TEST_MODE:
        if TEST_SESSION_LOCAL is None:
            raise RuntimeError("Test mode is active but no test session is configured")
        db = TEST_SESSION_LOCAL()
    else:
        _init_production_database()
        db = PROD_SESSION_LOCAL()

    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Create any missing tables for the registered models."""
    # Imported for its side effect of registering the models on Base
    from licensekeeper.persistence import models  # noqa: F401  pylint: disable=import-outside-toplevel

    Base.metadata.create_all(bind=get_engine())
