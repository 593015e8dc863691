"""Data update coordinator for MELCloud Home."""

from __future__ import annotations

from datetime import datetime, timedelta
import logging
from typing import Callable, Dict, Optional

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import ConfigEntryAuthFailed
from homeassistant.helpers.event import async_call_later
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .client import MELCloudHomeAuthError, MELCloudHomeClient, MELCloudHomeError
from .const import DEFAULT_SCAN_INTERVAL, REFRESH_DELAY_SECONDS
from .models import AirUnit

LOGGER = logging.getLogger(__name__)


class MELCloudHomeCoordinator(DataUpdateCoordinator[Dict[str, AirUnit]]):
    """Coordinator polling the account context for unit settings."""

    def __init__(
        self,
        hass: HomeAssistant,
        client: MELCloudHomeClient,
        name: str,
        update_interval: timedelta | None = None,
        config_entry: ConfigEntry | None = None,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            LOGGER,
            name=name,
            config_entry=config_entry,
            update_interval=update_interval or timedelta(seconds=DEFAULT_SCAN_INTERVAL),
        )
        self.client = client
        self._unsub_scheduled_refresh: Optional[Callable[[], None]] = None

    async def _async_update_data(self) -> Dict[str, AirUnit]:
        """Fetch the latest settings of every unit."""
        try:
            return await self.client.async_get_units()
        except MELCloudHomeAuthError as err:
            raise ConfigEntryAuthFailed(str(err)) from err
        except MELCloudHomeError as err:
            raise UpdateFailed(f"Communication error: {err}") from err

    @callback
    def schedule_refresh(self) -> None:
        """Request an authoritative refresh shortly after a control command.

        Repeated requests within the delay collapse into one refresh.
        """
        if self._unsub_scheduled_refresh is not None:
            self._unsub_scheduled_refresh()
        self._unsub_scheduled_refresh = async_call_later(
            self.hass, REFRESH_DELAY_SECONDS, self._async_scheduled_refresh
        )

    async def _async_scheduled_refresh(self, _now: datetime) -> None:
        self._unsub_scheduled_refresh = None
        await self.async_request_refresh()

    async def async_shutdown(self) -> None:
        """Cancel a pending scheduled refresh on unload."""
        if self._unsub_scheduled_refresh is not None:
            self._unsub_scheduled_refresh()
            self._unsub_scheduled_refresh = None
        await super().async_shutdown()
