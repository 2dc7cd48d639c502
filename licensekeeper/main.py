"""
This module provides the FastAPI application for the licensekeeper server.
It reads the licensekeeper.yaml configuration, configures logging and
translations, and mounts the license management routes.
"""

from fastapi import FastAPI

from licensekeeper import __version__
from licensekeeper.api import license_management
from licensekeeper.startup.i18n_config import configure_translations
from licensekeeper.startup.lifecycle import lifespan
from licensekeeper.startup.logging_config import configure_logging
from licensekeeper.utils.verbosity_logger import get_logger

startup_logger = get_logger("licensekeeper.startup")

configure_logging()
configure_translations()

app = FastAPI(title="licensekeeper", version=__version__, lifespan=lifespan)
app.include_router(license_management.router, prefix="/api", tags=["license"])
startup_logger.info("License management routes registered")


@app.get("/")
async def root():
    """
    This function provides the HTTP response to calls to the root path of
    the service.
    """
    return {"message": "licensekeeper", "version": __version__}
