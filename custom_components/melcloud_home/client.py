"""Async client for the MELCloud Home cloud API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from . import const
from .models import AirUnit

LOGGER = logging.getLogger(__name__)


class MELCloudHomeError(Exception):
    """Base exception for MELCloud Home API errors."""


class MELCloudHomeAuthError(MELCloudHomeError):
    """The access token was rejected."""


class MELCloudHomeConnectionError(MELCloudHomeError):
    """The API could not be reached or returned an error status."""


class MELCloudHomeClient:
    """Async client for MELCloud Home account and unit control."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        access_token: str,
        base_url: str = const.API_BASE_URL,
    ) -> None:
        """Initialize the client."""
        self._session = session
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=const.REQUEST_TIMEOUT)

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Accept": "application/json",
        }

    async def async_get_context(self) -> Dict[str, Any]:
        """Fetch the account context holding buildings and their units."""
        data = await self._request("GET", const.API_CONTEXT_PATH)
        if not isinstance(data, dict):
            raise MELCloudHomeConnectionError("Unexpected context response")
        return data

    async def async_get_units(self) -> Dict[str, AirUnit]:
        """Return every air-to-air unit in the account, keyed by unit id."""
        context = await self.async_get_context()
        units: Dict[str, AirUnit] = {}
        buildings: List[Dict[str, Any]] = [
            *(context.get("buildings") or []),
            *(context.get("guestBuildings") or []),
        ]
        for building in buildings:
            for raw_unit in building.get("airToAirUnits") or []:
                try:
                    unit = AirUnit.from_api(raw_unit)
                except KeyError:
                    LOGGER.warning("Skipping unit without id in building %s", building.get("name"))
                    continue
                units[unit.id] = unit
        LOGGER.debug("Fetched %d air-to-air units", len(units))
        return units

    async def async_control_device(self, device_id: str, payload: Dict[str, Any]) -> Optional[Any]:
        """Send a complete control command to a unit."""
        LOGGER.debug("Control %s: %s", device_id, payload)
        return await self._request(
            "PUT", const.API_CONTROL_PATH.format(device_id=device_id), json=payload
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Optional[Any]:
        """Perform a request and return the decoded JSON body, if any."""
        url = f"{self._base_url}{path}"
        try:
            async with self._session.request(
                method, url, headers=self._headers, timeout=self._timeout, **kwargs
            ) as resp:
                if resp.status in (401, 403):
                    raise MELCloudHomeAuthError(f"{method} {path} rejected: {resp.status}")
                if resp.status >= 400:
                    text = await resp.text()
                    raise MELCloudHomeConnectionError(
                        f"{method} {path} failed: {resp.status} {text}"
                    )
                if resp.content_type != "application/json":
                    return None
                try:
                    return await resp.json()
                except ValueError as err:
                    raise MELCloudHomeConnectionError(
                        f"{method} {path} returned an undecodable body"
                    ) from err
        except asyncio.TimeoutError as err:
            raise MELCloudHomeConnectionError(f"Timeout during {method} {path}") from err
        except aiohttp.ClientError as err:
            raise MELCloudHomeConnectionError(f"Communication error: {err}") from err
