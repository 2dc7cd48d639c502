"""
License manager for the plugin license key.

Handles:
- Reading the license key from the option store or the configured override
- Verifying, validating and deactivating the key against the licensing API
- Caching the license status and the addon listing
- Periodic re-validation, evaluated lazily once per request
- Building the admin notices that describe the license state

Remote operations return a LicenseResult.  In interactive mode (an admin API
call) messages are only returned to the caller; otherwise they are collected
on the manager and shown by notices() at the end of the request.
"""

import html
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional
from urllib.parse import urlencode

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from licensekeeper.config.config import (
    get_check_interval_hours,
    get_license_config,
    get_license_key_override,
)
from licensekeeper.i18n import _
from licensekeeper.licensing.notices import NoticeRenderer
from licensekeeper.licensing.records import (
    Addon,
    KeySource,
    LicenseRecord,
    LicenseResult,
    LicenseStatus,
)
from licensekeeper.licensing.remote_api import (
    DEACTIVATE_KEY,
    GET_ADDONS_DATA,
    KEY_PARAM,
    VALIDATE_KEY,
    VERIFY_KEY,
    LicenseApiClient,
)
from licensekeeper.persistence import db as db_module
from licensekeeper.persistence.models import LicenseValidationLog
from licensekeeper.persistence.option_store import OptionStore
from licensekeeper.persistence.transient_cache import (
    DAY_IN_SECONDS,
    HOUR_IN_SECONDS,
    MINUTE_IN_SECONDS,
    MISS,
    TransientCache,
)
from licensekeeper.utils.verbosity_logger import get_logger, mask_key, sanitize_log

logger = get_logger("licensekeeper.licensing.license_manager")

# Option names
LICENSE_OPTION = "license"
NEXT_CHECK_OPTION = "license_updates"

# Transient names
ADDONS_TRANSIENT = "addons"
ADDONS_URLS_TRANSIENT = "addons_urls"

# Addon cache lifetimes
ADDONS_TTL = DAY_IN_SECONDS
ADDONS_FAILURE_TTL = 10 * MINUTE_IN_SECONDS

NOTICE_CLASS = "license-notice"

# Marks "read the override from configuration"
_FROM_CONFIG = object()


def _connection_error() -> str:
    return _(
        "There was an error connecting to the remote key API. "
        "Please try again later."
    )


def _invalid_message() -> str:
    return _(
        "Your license key is invalid. The key no longer exists or the user "
        "associated with the key has been deleted. Please use a different key "
        "to continue receiving automatic updates."
    )


def _expired_message() -> str:
    return _(
        "Your license key has expired. Please renew your license key to "
        "continue receiving automatic updates."
    )


def _disabled_message() -> str:
    return _(
        "Your license key has been disabled. Please use a different key to "
        "continue receiving automatic updates."
    )


def _isset(response: dict, field: str) -> bool:
    return response.get(field) is not None


class LicenseManager:
    """
    Manages the license key lifecycle for one request.
    """

    def __init__(
        self,
        options: OptionStore,
        cache: TransientCache,
        client: Optional[LicenseApiClient] = None,
        key_override=_FROM_CONFIG,
        time_func: Callable[[], float] = time.time,
        check_interval_hours: Optional[int] = None,
    ):
        self._options = options
        self._cache = cache
        self._client = client or LicenseApiClient()
        self._key_override = (
            get_license_key_override() if key_override is _FROM_CONFIG else key_override
        )
        self._time = time_func
        if check_interval_hours is None:
            check_interval_hours = get_check_interval_hours()
        self._check_interval_hours = check_interval_hours

        # Messages collected for the notices of the current request
        self.errors: List[str] = []
        self.success: List[str] = []

    # =========================================================================
    # Key and record access
    # =========================================================================

    def _load_record(self) -> Optional[LicenseRecord]:
        return LicenseRecord.from_dict(self._options.get(LICENSE_OPTION))

    def _save_record(self, record: LicenseRecord) -> None:
        self._options.set(LICENSE_OPTION, record.to_dict())

    def get_key(self) -> str:
        """Return the stored key, or the override when nothing is stored."""
        record = self._load_record()
        key = record.key if record else ""
        if not key and self._key_override:
            key = self._key_override
        return key

    def key_source(self) -> KeySource:
        """Report where the active key comes from.  The override wins."""
        if self._key_override is not None:
            return KeySource.CONSTANT
        record = self._load_record()
        return KeySource.OPTION if record and record.key else KeySource.MISSING

    def license_type(self) -> str:
        """Return the license tier, e.g. "elite"."""
        record = self._load_record()
        return record.license_type if record else ""

    # =========================================================================
    # Result helpers
    # =========================================================================

    def _fail(self, message: str, interactive: bool, **kwargs) -> LicenseResult:
        if not interactive:
            self.errors.append(message)
        return LicenseResult(success=False, message=message, **kwargs)

    def _succeed(self, message: str, interactive: bool, **kwargs) -> LicenseResult:
        if not interactive:
            self.success.append(message)
        return LicenseResult(success=True, message=message, **kwargs)

    def _log_validation(
        self,
        action: str,
        result: str,
        status: Optional[LicenseStatus] = None,
        error_message: Optional[str] = None,
    ) -> None:
        """Log a licensing API call to the database."""
        session_local = sessionmaker(
            autocommit=False, autoflush=False, bind=db_module.get_engine()
        )

        with session_local() as session:
            try:
                session.add(
                    LicenseValidationLog(
                        action=action,
                        result=result,
                        status=status.value if status else None,
                        error_message=error_message,
                        validated_at=datetime.now(timezone.utc).replace(tzinfo=None),
                    )
                )
                session.commit()
            except SQLAlchemyError as e:
                logger.error("Failed to log license validation: %s", e)
                session.rollback()

    # =========================================================================
    # Remote operations
    # =========================================================================

    async def verify(self, key: str, interactive: bool = False) -> LicenseResult:
        """
        Activate a license key on this site.

        Args:
            key: The license key entered by the user
            interactive: Return messages to the caller instead of collecting them

        Returns:
            LicenseResult with the tier and message on success
        """
        if not key:
            return LicenseResult(success=False)

        logger.info("Verifying license key %s", mask_key(key))
        response = await self._client.perform_remote_request(
            VERIFY_KEY, {KEY_PARAM: key}
        )

        if not isinstance(response, dict):
            self._log_validation(VERIFY_KEY, "error", error_message="connection")
            return self._fail(_connection_error(), interactive)

        if response.get("error"):
            error = str(response["error"])
            logger.warning("License key verification refused: %s", sanitize_log(error))
            self._log_validation(VERIFY_KEY, "failure", error_message=error)
            return self._fail(error, interactive)

        message = response.get("success")
        if not isinstance(message, str) or not message:
            message = _("Congratulations! This site is now receiving automatic updates.")

        record = self._load_record() or LicenseRecord()
        record.key = key
        record.license_type = response.get("type") or record.license_type
        record.status = LicenseStatus.VALID
        self._save_record(record)
        self.clear_cache()

        self._log_validation(VERIFY_KEY, "success", LicenseStatus.VALID)
        logger.info("License key verified: type=%s", sanitize_log(record.license_type))

        return self._succeed(
            message,
            interactive,
            status=LicenseStatus.VALID,
            license_type=record.license_type,
        )

    async def validate(
        self, key: str, forced: bool = False, interactive: bool = False
    ) -> LicenseResult:
        """
        Re-check a stored license key.

        Args:
            key: The license key to check
            forced: Report connection problems and successful refreshes
            interactive: Return messages to the caller instead of collecting them

        Returns:
            LicenseResult whose status is VALID, EXPIRED, DISABLED, INVALID, or
            UNKNOWN when the licensing API could not be reached
        """
        response = await self._client.perform_remote_request(
            VALIDATE_KEY, {KEY_PARAM: key}
        )

        if not isinstance(response, dict):
            self._log_validation(VALIDATE_KEY, "error", error_message="connection")
            if forced:
                return self._fail(
                    _connection_error(), interactive, status=LicenseStatus.UNKNOWN
                )
            return LicenseResult(success=False, status=LicenseStatus.UNKNOWN)

        record = self._load_record() or LicenseRecord()

        # First match wins: key/author, expired, disabled
        if _isset(response, "key") or _isset(response, "author"):
            status, message = LicenseStatus.INVALID, _invalid_message()
        elif _isset(response, "expired"):
            status, message = LicenseStatus.EXPIRED, _expired_message()
        elif _isset(response, "disabled"):
            status, message = LicenseStatus.DISABLED, _disabled_message()
        else:
            status, message = LicenseStatus.VALID, None

        if status != LicenseStatus.VALID:
            record.status = status
            self._save_record(record)
            self._log_validation(VALIDATE_KEY, "failure", status)
            logger.warning("License key is %s", status.value)
            # The license callouts in notices() report this outside interactive mode
            return LicenseResult(
                success=False,
                message=message,
                status=status,
                license_type=record.license_type,
            )

        record.license_type = response.get("type") or record.license_type
        record.status = LicenseStatus.VALID
        self._save_record(record)
        self._log_validation(VALIDATE_KEY, "success", LicenseStatus.VALID)
        logger.debug("License key validated: type=%s", sanitize_log(record.license_type))

        if forced:
            return self._succeed(
                _("Your key has been refreshed successfully."),
                interactive,
                status=LicenseStatus.VALID,
                license_type=record.license_type,
            )
        return LicenseResult(
            success=True, status=LicenseStatus.VALID, license_type=record.license_type
        )

    def _next_check(self) -> Optional[int]:
        """The scheduled check time, or None when unset or unreadable."""
        value = self._options.get(NEXT_CHECK_OPTION)
        if not value:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(
                "Ignoring malformed %s option: %s",
                NEXT_CHECK_OPTION,
                sanitize_log(value),
            )
            return None

    async def maybe_validate(self) -> Optional[LicenseResult]:
        """
        Validate the key when the next scheduled check is due.

        The first call schedules the next check and validates immediately.
        Returns None when no check was performed.
        """
        key = self.get_key()
        if not key:
            return None

        now = int(self._time())
        next_check = self._next_check()
        if next_check is not None and now < next_check:
            return None

        self._options.set(
            NEXT_CHECK_OPTION, now + self._check_interval_hours * HOUR_IN_SECONDS
        )
        logger.debug("Running periodic license check")
        return await self.validate(key)

    async def deactivate(self, interactive: bool = False) -> LicenseResult:
        """
        Release this site's claim on the license key.
        """
        key = self.get_key()
        if not key:
            return LicenseResult(success=False)

        logger.info("Deactivating license key %s", mask_key(key))
        response = await self._client.perform_remote_request(
            DEACTIVATE_KEY, {KEY_PARAM: key}
        )

        if not isinstance(response, dict):
            self._log_validation(DEACTIVATE_KEY, "error", error_message="connection")
            return self._fail(_connection_error(), interactive)

        if response.get("error"):
            error = str(response["error"])
            logger.warning("License key deactivation refused: %s", sanitize_log(error))
            self._log_validation(DEACTIVATE_KEY, "failure", error_message=error)
            return self._fail(error, interactive)

        message = response.get("success")
        if not isinstance(message, str) or not message:
            message = _("You have deactivated the key from this site successfully.")

        self._options.delete(LICENSE_OPTION)
        self.clear_cache()
        self._log_validation(DEACTIVATE_KEY, "success")
        logger.info("License key deactivated")

        return self._succeed(message, interactive)

    def clear_cache(self) -> None:
        """Drop the cached addon data."""
        self._cache.delete(ADDONS_TRANSIENT)
        self._cache.delete(ADDONS_URLS_TRANSIENT)

    async def addons(self, force: bool = False) -> Optional[List[Addon]]:
        """
        Return the addons listing, from cache unless forced or missing.

        Returns None when there is no key or the listing is unavailable.
        """
        if not self.get_key():
            return None

        cached = self._cache.get(ADDONS_TRANSIENT)
        if force or cached is MISS:
            return await self.get_addons()

        if not isinstance(cached, list):
            return None
        return [Addon.from_dict(item) for item in cached if isinstance(item, dict)]

    async def get_addons(self) -> Optional[List[Addon]]:
        """
        Fetch the addons listing from the licensing API and cache it.

        Failures are cached as False for ten minutes so the API is not asked
        again on every request.
        """
        response = await self._client.perform_remote_request(
            GET_ADDONS_DATA, {KEY_PARAM: self.get_key()}
        )

        if not isinstance(response, list):
            if isinstance(response, dict) and response.get("error"):
                logger.warning(
                    "Addons request refused: %s", sanitize_log(response["error"])
                )
            self._cache.set(ADDONS_TRANSIENT, False, ADDONS_FAILURE_TTL)
            return None

        self._cache.set(ADDONS_TRANSIENT, response, ADDONS_TTL)
        logger.debug("Cached %d addons", len(response))
        return [Addon.from_dict(item) for item in response if isinstance(item, dict)]

    # =========================================================================
    # Status queries
    # =========================================================================

    def status(self) -> Optional[LicenseStatus]:
        """Status of the stored license, or None without one."""
        record = self._load_record()
        return record.status if record else None

    def is_active(self) -> bool:
        return self.status() == LicenseStatus.VALID

    def is_expired(self) -> bool:
        return self.status() == LicenseStatus.EXPIRED

    def is_disabled(self) -> bool:
        return self.status() == LicenseStatus.DISABLED

    def is_invalid(self) -> bool:
        return self.status() == LicenseStatus.INVALID

    def has_errors(self) -> bool:
        """Whether the stored license is expired, disabled or invalid."""
        return self.status() in (
            LicenseStatus.EXPIRED,
            LicenseStatus.DISABLED,
            LicenseStatus.INVALID,
        )

    # =========================================================================
    # Notices
    # =========================================================================

    def _expired_notice(self) -> str:
        license_config = get_license_config()
        renew_now_url = self._tracked_url(license_config["renew_url"], "Renew Now")
        learn_more_url = self._tracked_url(
            license_config["learn_more_url"], "Learn More"
        )
        return (
            '<h3 style="margin: .75em 0 0 0;">'
            '<img src="{icon}" style="vertical-align: text-top; width: 20px; '
            'margin-right: 7px;">{heading}</h3>'
            "<p>{body}</p>"
            '<p><a href="{renew_url}" class="button-primary">{renew}</a> &nbsp '
            '<a href="{learn_url}" class="button-secondary">{learn}</a></p>'
        ).format(
            icon=html.escape(license_config["icon_url"], quote=True),
            heading=html.escape(_("Heads up! Your license has expired.")),
            body=html.escape(
                _(
                    "An active license is needed to create new forms and edit "
                    "existing forms. It also provides access to new features & "
                    "addons, plugin updates (including security improvements), "
                    "and our world class support!"
                )
            ),
            renew_url=html.escape(renew_now_url, quote=True),
            renew=html.escape(_("Renew Now")),
            learn_url=html.escape(learn_more_url, quote=True),
            learn=html.escape(_("Learn More")),
        )

    @staticmethod
    def _tracked_url(url: str, content: str) -> str:
        query = urlencode(
            {
                "utm_source": "LicenseKeeper",
                "utm_medium": "Admin Notice",
                "utm_campaign": "plugin",
                "utm_content": content,
            }
        )
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}{query}"

    def notices(
        self, below_h2: bool = False, renderer: Optional[NoticeRenderer] = None
    ) -> NoticeRenderer:
        """
        Build the license notices for the admin UI.

        Order: missing key prompt, expired, disabled and invalid callouts,
        then the errors and success messages collected during this request.
        """
        renderer = renderer or NoticeRenderer()
        css_class = ("below-h2 " if below_h2 else "") + NOTICE_CLASS
        status = self.status()

        if not self.get_key():
            settings_url = html.escape(get_license_config()["settings_url"], quote=True)
            renderer.info(
                _(
                    'Please <a href="%s">enter and activate</a> your license key '
                    "to enable automatic updates."
                )
                % settings_url,
                css_class=css_class,
            )

        if status == LicenseStatus.EXPIRED:
            renderer.error(self._expired_notice(), css_class=css_class, autop=False)

        if status == LicenseStatus.DISABLED:
            renderer.error(html.escape(_disabled_message()), css_class=css_class)

        if status == LicenseStatus.INVALID:
            renderer.error(html.escape(_invalid_message()), css_class=css_class)

        if self.errors:
            renderer.error(
                "<br>".join(html.escape(error) for error in self.errors),
                css_class=css_class,
            )

        if self.success:
            renderer.info(
                "<br>".join(html.escape(message) for message in self.success),
                css_class=css_class,
            )

        return renderer
