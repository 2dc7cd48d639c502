"""
API routes for license key management in the admin UI.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, validator
from sqlalchemy.orm import Session

from licensekeeper.i18n import _
from licensekeeper.licensing.license_manager import LicenseManager
from licensekeeper.persistence.db import get_db
from licensekeeper.persistence.option_store import OptionStore
from licensekeeper.persistence.transient_cache import TransientCache
from licensekeeper.utils.verbosity_logger import get_logger

logger = get_logger("licensekeeper.api.license_management")

router = APIRouter()


# Request/Response Models


class LicenseInstallRequest(BaseModel):
    """Request model for activating a license key."""

    license_key: str

    @validator("license_key")
    def strip_license_key(cls, value):  # pylint: disable=no-self-argument
        """Ignore surrounding whitespace pasted along with the key."""
        return value.strip()


class LicenseActionResponse(BaseModel):
    """Response model for verify, refresh and deactivate."""

    success: bool
    message: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None


class NoticeResponse(BaseModel):
    """A single admin notice."""

    level: str
    message: str
    css_class: str
    autop: bool


class LicenseInfoResponse(BaseModel):
    """Response model for the license overview."""

    key_source: str
    type: str
    status: Optional[str] = None
    active: bool
    expired: bool
    disabled: bool
    invalid: bool
    notices: List[NoticeResponse]
    notices_html: str


class AddonResponse(BaseModel):
    """An addon available from the licensing API."""

    slug: str
    title: str
    version: str
    image: str
    excerpt: str
    id: Optional[int] = None
    categories: List[str]
    types: List[str]
    url: str
    available: bool


class AddonsResponse(BaseModel):
    """Response model for the addon listing; addons is null when unavailable."""

    addons: Optional[List[AddonResponse]] = None


def get_license_manager(db: Session = Depends(get_db)) -> LicenseManager:
    """Build a license manager scoped to the current request."""
    return LicenseManager(OptionStore(db), TransientCache(db))


def _action_response(result) -> LicenseActionResponse:
    return LicenseActionResponse(
        success=result.success,
        message=result.message,
        type=result.license_type,
        status=result.status.value if result.status else None,
    )


@router.get("/license", response_model=LicenseInfoResponse)
async def get_license_info(manager: LicenseManager = Depends(get_license_manager)):
    """
    Get the license state and the notices to show in the admin UI.

    Runs the periodic license check when it is due.
    """
    await manager.maybe_validate()

    status = manager.status()
    renderer = manager.notices()
    return LicenseInfoResponse(
        key_source=manager.key_source().value,
        type=manager.license_type(),
        status=status.value if status else None,
        active=manager.is_active(),
        expired=manager.is_expired(),
        disabled=manager.is_disabled(),
        invalid=manager.is_invalid(),
        notices=[
            NoticeResponse(
                level=notice.level,
                message=notice.message,
                css_class=notice.css_class,
                autop=notice.autop,
            )
            for notice in renderer.notices
        ],
        notices_html=renderer.render_html(),
    )


@router.post("/license", response_model=LicenseActionResponse)
async def install_license(
    request: LicenseInstallRequest,
    manager: LicenseManager = Depends(get_license_manager),
):
    """
    Verify and store a new license key.
    """
    if not request.license_key:
        raise HTTPException(status_code=400, detail=_("Please enter a license key."))

    result = await manager.verify(request.license_key, interactive=True)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)

    logger.info("License key installed via API")
    return _action_response(result)


@router.post("/license/refresh", response_model=LicenseActionResponse)
async def refresh_license(manager: LicenseManager = Depends(get_license_manager)):
    """
    Re-validate the current license key immediately.
    """
    key = manager.get_key()
    if not key:
        raise HTTPException(status_code=400, detail=_("No license key is set."))

    result = await manager.validate(key, forced=True, interactive=True)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)

    return _action_response(result)


@router.delete("/license", response_model=LicenseActionResponse)
async def deactivate_license(manager: LicenseManager = Depends(get_license_manager)):
    """
    Deactivate the license key on this site.
    """
    if not manager.get_key():
        raise HTTPException(status_code=400, detail=_("No license key is set."))

    result = await manager.deactivate(interactive=True)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.message)

    logger.info("License key deactivated via API")
    return _action_response(result)


@router.get("/license/addons", response_model=AddonsResponse)
async def list_addons(
    force: bool = False, manager: LicenseManager = Depends(get_license_manager)
):
    """
    List the addons available from the licensing API.
    """
    addons = await manager.addons(force=force)
    if addons is None:
        return AddonsResponse(addons=None)

    license_type = manager.license_type()
    return AddonsResponse(
        addons=[
            AddonResponse(
                slug=addon.slug,
                title=addon.title,
                version=addon.version,
                image=addon.image,
                excerpt=addon.excerpt,
                id=addon.id,
                categories=addon.categories,
                types=addon.types,
                url=addon.url,
                available=addon.available_for(license_type),
            )
            for addon in addons
        ]
    )
