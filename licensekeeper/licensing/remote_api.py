"""
Client for the remote licensing (updater) API.

Every call is an HTTP GET against the configured updater URL with the action,
license key, platform version, Python version and site URL passed as query
parameters.  The response body is JSON.
"""

import asyncio
import json
import platform
from typing import Any, Dict, Optional

import aiohttp

from licensekeeper import __version__
from licensekeeper.config.config import (
    get_request_timeout,
    get_site_url,
    get_updater_url,
)
from licensekeeper.utils.verbosity_logger import get_logger, sanitize_log

logger = get_logger("licensekeeper.licensing.remote_api")

# Query parameter names understood by the updater API
ACTION_PARAM = "tgm-updater-action"
KEY_PARAM = "tgm-updater-key"
PLATFORM_VERSION_PARAM = "tgm-updater-wp-version"
RUNTIME_VERSION_PARAM = "tgm-updater-php-version"
REFERER_PARAM = "tgm-updater-referer"

# Remote actions
VERIFY_KEY = "verify-key"
VALIDATE_KEY = "validate-key"
DEACTIVATE_KEY = "deactivate-key"
GET_ADDONS_DATA = "get-addons-data"


class LicenseApiError(Exception):
    """The licensing API could not be reached or did not answer with HTTP 200."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LicenseApiClient:
    """
    Thin aiohttp wrapper around the licensing API.
    """

    def __init__(
        self,
        updater_url: Optional[str] = None,
        site_url: Optional[str] = None,
        timeout: Optional[int] = None,
        platform_version: str = __version__,
    ):
        self.updater_url = updater_url or get_updater_url()
        self.site_url = site_url or get_site_url()
        self.timeout = timeout or get_request_timeout()
        self.platform_version = platform_version

    def build_query(self, action: str, params: Optional[Dict[str, Any]] = None) -> dict:
        """
        Merge the caller's parameters over the standard query parameters.
        """
        params = params or {}
        query = {
            ACTION_PARAM: action,
            KEY_PARAM: params.get(KEY_PARAM, ""),
            PLATFORM_VERSION_PARAM: self.platform_version,
            RUNTIME_VERSION_PARAM: platform.python_version(),
            REFERER_PARAM: self.site_url,
        }
        query.update(params)
        return query

    async def _fetch(self, query: dict, headers: Optional[dict] = None) -> bytes:
        """Issue the GET request and return the raw body."""
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    self.updater_url,
                    params=query,
                    headers=headers or {},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        raise LicenseApiError(
                            f"HTTP status {response.status}", response.status
                        )
                    return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise LicenseApiError(f"Network error: {e}") from e

    async def perform_remote_request(
        self,
        action: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[dict] = None,
    ) -> Optional[Any]:
        """
        Call a licensing API action.

        Args:
            action: The remote action name, e.g. "validate-key"
            params: Extra query parameters, normally the license key
            headers: Extra request headers

        Returns:
            The decoded JSON response, or None when the request failed or the
            body was not valid UTF-8 JSON
        """
        query = self.build_query(action, params)

        try:
            body = await self._fetch(query, headers)
        except LicenseApiError as e:
            logger.warning("Licensing API %s failed: %s", action, sanitize_log(e))
            return None

        try:
            return json.loads(body.decode("utf-8"))
        except ValueError:
            # UnicodeDecodeError is a ValueError
            logger.warning("Licensing API %s returned a non-JSON body", action)
            return None
