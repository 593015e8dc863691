"""MELCloud Home fan controls integration setup."""

from __future__ import annotations

from datetime import timedelta
import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_ACCESS_TOKEN, CONF_SCAN_INTERVAL, Platform
from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .client import MELCloudHomeClient
from .const import DEFAULT_SCAN_INTERVAL, DOMAIN
from .coordinator import MELCloudHomeCoordinator

PLATFORMS: list[Platform] = [Platform.FAN]
LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up MELCloud Home from a config entry."""
    hass.data.setdefault(DOMAIN, {})

    client = MELCloudHomeClient(async_get_clientsession(hass), entry.data[CONF_ACCESS_TOKEN])
    scan_interval = entry.options.get(CONF_SCAN_INTERVAL, DEFAULT_SCAN_INTERVAL)

    coordinator = MELCloudHomeCoordinator(
        hass,
        client,
        name=f"MELCloud Home ({entry.title})",
        update_interval=timedelta(seconds=scan_interval),
        config_entry=entry,
    )

    await coordinator.async_config_entry_first_refresh()
    LOGGER.debug("Found %d units for %s", len(coordinator.data), entry.title)

    hass.data[DOMAIN][entry.entry_id] = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_options_updated))
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    coordinator: MELCloudHomeCoordinator = hass.data[DOMAIN][entry.entry_id]

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        await coordinator.async_shutdown()
        hass.data[DOMAIN].pop(entry.entry_id, None)
    return unload_ok


async def async_options_updated(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle options update by reloading entry."""
    await hass.config_entries.async_reload(entry.entry_id)
