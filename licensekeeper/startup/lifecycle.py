"""
Application lifecycle management module for the licensekeeper server.

This module provides the FastAPI lifespan context manager that prepares the
database and runs the periodic license check once at startup.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from licensekeeper.licensing.license_manager import LicenseManager
from licensekeeper.persistence import db as db_module
from licensekeeper.persistence.option_store import OptionStore
from licensekeeper.persistence.transient_cache import TransientCache
from licensekeeper.utils.verbosity_logger import get_logger

logger = get_logger("licensekeeper.startup.lifecycle")


async def run_startup_license_check() -> None:
    """Run the periodic license check with a dedicated session."""
    session_local = db_module.get_session_local()
    with session_local() as session:
        manager = LicenseManager(OptionStore(session), TransientCache(session))
        result = await manager.maybe_validate()
        if result is None:
            logger.info("License check not due")
        else:
            logger.info(
                "Startup license check: status=%s",
                result.status.value if result.status else "unknown",
            )


@asynccontextmanager
async def lifespan(_fastapi_app: FastAPI):  # NOSONAR
    """
    Application lifespan manager to handle startup and shutdown events.
    """
    logger.info("=== FASTAPI LIFESPAN STARTUP BEGIN ===")

    logger.info("Creating database tables")
    db_module.create_tables()

    logger.info("=== LICENSE CHECK ===")
    try:
        await run_startup_license_check()
    except SQLAlchemyError as e:
        logger.error("Startup license check failed (non-fatal): %s", e)

    logger.info("=== FASTAPI LIFESPAN STARTUP COMPLETE ===")
    yield
    logger.info("=== FASTAPI LIFESPAN SHUTDOWN ===")
