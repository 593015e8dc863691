"""Virtual fan entities for MELCloud Home units."""

from __future__ import annotations

from typing import Any, Awaitable

from homeassistant.components.fan import FanEntity, FanEntityFeature
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    CONF_INCLUDE_FAN_SPEED,
    CONF_INCLUDE_SWING,
    DEFAULT_INCLUDE_FAN_SPEED,
    DEFAULT_INCLUDE_SWING,
    DOMAIN,
    MANUFACTURER,
    MODEL_FAN_CONTROL,
    MODEL_SWING_CONTROL,
)
from .coordinator import MELCloudHomeCoordinator
from .models import AirUnit, SpeedLevel
from .projection import (
    ActiveState,
    Characteristic,
    CommandDispatcher,
    FanSpeedProjection,
    ServiceCommunicationError,
    StateProjection,
    SwingProjection,
)

async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up fan entities."""
    coordinator: MELCloudHomeCoordinator = hass.data[DOMAIN][entry.entry_id]
    dispatcher = CommandDispatcher(coordinator.client, coordinator)
    include_fan_speed = entry.options.get(CONF_INCLUDE_FAN_SPEED, DEFAULT_INCLUDE_FAN_SPEED)
    include_swing = entry.options.get(CONF_INCLUDE_SWING, DEFAULT_INCLUDE_SWING)
    entities: list[FanEntity] = []

    for unit in coordinator.data.values():
        if include_fan_speed:
            entities.append(MELCloudHomeFanSpeedFan(coordinator, dispatcher, unit))
        if include_swing:
            entities.append(MELCloudHomeSwingFan(coordinator, dispatcher, unit))

    async_add_entities(entities)


class MELCloudHomeVirtualFan(CoordinatorEntity[MELCloudHomeCoordinator], FanEntity):
    """Fan entity backed by a state projection over one unit."""

    _attr_has_entity_name = False
    _enable_turn_on_off_backwards_compatibility = False

    projection_class: type[StateProjection]
    model: str
    key: str

    def __init__(
        self,
        coordinator: MELCloudHomeCoordinator,
        dispatcher: CommandDispatcher,
        unit: AirUnit,
    ) -> None:
        """Initialize the entity from the unit's current snapshot."""
        super().__init__(coordinator)
        self.unit_id = unit.id
        self._last_available: bool | None = None
        self.projection = self.projection_class(unit, dispatcher)
        # Seed the published state so the first refresh only reports real changes
        self.projection.update_from_unit(unit)
        self._attr_name = f"{unit.given_display_name} {self.projection.name_suffix}"
        self._attr_unique_id = f"{unit.id}_{self.key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, self._attr_unique_id)},
            name=self._attr_name,
            manufacturer=MANUFACTURER,
            model=self.model,
            serial_number=f"{unit.connected_interface_identifier}-{self.key.replace('_', '-')}",
        )

    async def async_added_to_hass(self) -> None:
        """Record the availability written when the entity is added."""
        self._last_available = self.available
        await super().async_added_to_hass()

    @property
    def available(self) -> bool:
        """Return True while the unit is still reported by the account."""
        return super().available and self.unit_id in self.coordinator.data

    @property
    def is_on(self) -> bool:
        """Return True if the projection is active."""
        return self.projection.get_active() is ActiveState.ACTIVE

    @callback
    def _handle_coordinator_update(self) -> None:
        """Re-project from the refreshed unit and write state only on change.

        A change in availability is written even when no value changed, so
        failed polls and recoveries reach the state machine.
        """
        unit = self.coordinator.data.get(self.unit_id)
        changed = unit is not None and bool(self.projection.update_from_unit(unit))
        if changed or self.available != self._last_available:
            self._write_state()

    @callback
    def _write_state(self) -> None:
        self._last_available = self.available
        self.async_write_ha_state()

    async def async_turn_on(
        self,
        percentage: int | None = None,
        preset_mode: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Turn the control on."""
        await self._async_call(self.projection.async_set_active(True))

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Turn the control off."""
        await self._async_call(self.projection.async_set_active(False))

    async def _async_call(self, command: Awaitable[list[Characteristic]]) -> None:
        """Await a projection command and write state if it changed anything."""
        try:
            changed = await command
        except ServiceCommunicationError as err:
            raise HomeAssistantError(str(err)) from err
        if changed:
            self._write_state()


class MELCloudHomeFanSpeedFan(MELCloudHomeVirtualFan):
    """Fan speed of a unit as a fan with five speeds."""

    _attr_supported_features = (
        FanEntityFeature.SET_SPEED | FanEntityFeature.TURN_ON | FanEntityFeature.TURN_OFF
    )
    _attr_speed_count = int(SpeedLevel.FIVE)

    projection_class = FanSpeedProjection
    model = MODEL_FAN_CONTROL
    key = "fan_control"

    projection: FanSpeedProjection

    @property
    def percentage(self) -> int | None:
        """Return the fan speed as a percentage."""
        return self.projection.get_rotation_speed()

    async def async_turn_on(
        self,
        percentage: int | None = None,
        preset_mode: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Turn the fan on, at the given speed if one is passed."""
        if percentage is None:
            await super().async_turn_on(percentage, preset_mode, **kwargs)
            return
        await self.async_set_percentage(percentage)

    async def async_set_percentage(self, percentage: int) -> None:
        """Set the fan speed."""
        await self._async_call(self.projection.async_set_rotation_speed(percentage))


class MELCloudHomeSwingFan(MELCloudHomeVirtualFan):
    """Vertical vane swing of a unit as an on/off fan."""

    _attr_supported_features = FanEntityFeature.TURN_ON | FanEntityFeature.TURN_OFF

    projection_class = SwingProjection
    model = MODEL_SWING_CONTROL
    key = "swing_control"
