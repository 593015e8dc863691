"""State projection and command dispatch for virtual fan controls.

A projection turns a unit's settings snapshot into the values a fan entity
shows (active, rotation speed) and turns writes to those values into
complete control commands. Nothing here depends on Home Assistant; the
entities in ``fan.py`` wire a projection to the entity state machine
through a ``Publisher`` callback.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from enum import Enum, IntEnum
import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

import aiohttp

from .client import MELCloudHomeError
from .const import POWER_ON, VANE_AUTO, VANE_SWING
from .mapping import level_to_percentage, parse_level, percentage_to_level, vane_mode
from .models import AirUnit, ControlCommand, SettingsSnapshot, SpeedLevel, VaneMode

LOGGER = logging.getLogger(__name__)


class Characteristic(str, Enum):
    """Values a projection publishes."""

    ACTIVE = "active"
    ROTATION_SPEED = "rotation_speed"


class ActiveState(IntEnum):
    """Two-valued active state."""

    INACTIVE = 0
    ACTIVE = 1


class ServiceCommunicationError(Exception):
    """A control command could not be delivered to the unit."""


class ControlClient(Protocol):
    """Remote side of a control command."""

    async def async_control_device(self, device_id: str, payload: Dict[str, Any]) -> Any:
        ...


class RefreshScheduler(Protocol):
    """Requests an authoritative resync of all units."""

    def schedule_refresh(self) -> None:
        ...


Publisher = Callable[[Characteristic, Any], None]


class CharacteristicSync:
    """Publishes projected values only when they differ from the last publish."""

    def __init__(self, label: str, publisher: Optional[Publisher] = None) -> None:
        self.label = label
        self.publisher = publisher
        # Last published value per characteristic, kept for the entity lifetime
        self.published: Dict[Characteristic, Any] = {}

    def sync(self, values: Mapping[Characteristic, Any]) -> List[Characteristic]:
        """Publish changed values and return the characteristics that changed."""
        changed: List[Characteristic] = []
        for characteristic, target in values.items():
            current = self.published.get(characteristic)
            if characteristic in self.published and current == target:
                continue
            LOGGER.debug(
                "%s Update %s: %s -> %s", self.label, characteristic.value, current, target
            )
            if self.publisher is not None:
                self.publisher(characteristic, target)
            self.published[characteristic] = target
            changed.append(characteristic)
        return changed


class CommandDispatcher:
    """Sends complete control commands and applies confirmed changes locally."""

    def __init__(self, client: ControlClient, scheduler: RefreshScheduler) -> None:
        self.client = client
        self.scheduler = scheduler

    @staticmethod
    def build_command(settings: SettingsSnapshot, power: bool) -> ControlCommand:
        """Build the full command for a snapshot."""
        temperature: Optional[float]
        try:
            temperature = float(settings.set_temperature)
        except ValueError:
            temperature = None
        if temperature is None or not math.isfinite(temperature):
            # TODO: decide between failing the command and reusing the last numeric setpoint
            LOGGER.warning("Unparseable SetTemperature %r", settings.set_temperature)
            temperature = None
        return ControlCommand(
            power=power,
            operation_mode=settings.operation_mode,
            set_fan_speed=settings.set_fan_speed,
            vane_horizontal_direction=settings.vane_horizontal_direction,
            vane_vertical_direction=settings.vane_vertical_direction,
            set_temperature=temperature,
        )

    async def async_dispatch(
        self, projection: StateProjection, **changes: str
    ) -> List[Characteristic]:
        """Send ``changes`` on top of the projection's current snapshot.

        The local snapshot is only replaced after the unit accepted the
        command, and a full refresh is requested afterwards to confirm it.
        """
        unit = projection.unit
        settings = unit.settings
        power = True if projection.forces_power else settings.is_power_on
        command = self.build_command(settings.replace(**changes), power)

        try:
            await self.client.async_control_device(unit.id, command.as_payload())
        except (MELCloudHomeError, aiohttp.ClientError, asyncio.TimeoutError) as err:
            LOGGER.error("%s Failed to send %s: %s", projection.label, changes, err)
            raise ServiceCommunicationError(
                f"Failed to control {unit.given_display_name}"
            ) from err

        if projection.forces_power:
            changes = {**changes, "power": POWER_ON}
        published = projection.apply_settings(settings.replace(**changes))
        self.scheduler.schedule_refresh()
        return published


class StateProjection(ABC):
    """Base class for a virtual control over one unit."""

    name_suffix = ""
    # When set, every command turns the unit on
    forces_power = False

    def __init__(
        self,
        unit: AirUnit,
        dispatcher: CommandDispatcher,
        publisher: Optional[Publisher] = None,
    ) -> None:
        self._unit = unit
        self.dispatcher = dispatcher
        self.label = f"[{unit.given_display_name} {self.name_suffix}]"
        self.characteristic_sync = CharacteristicSync(self.label, publisher)

    @property
    def unit(self) -> AirUnit:
        return self._unit

    @property
    def settings(self) -> SettingsSnapshot:
        return self._unit.settings

    @property
    @abstractmethod
    def is_active(self) -> bool:
        """Return True if the control is on for the current snapshot."""

    def values(self) -> Dict[Characteristic, Any]:
        """Project the current snapshot into characteristic values."""
        return {
            Characteristic.ACTIVE: ActiveState.ACTIVE if self.is_active else ActiveState.INACTIVE
        }

    def get_active(self) -> ActiveState:
        """Read handler for the active characteristic."""
        value = ActiveState.ACTIVE if self.is_active else ActiveState.INACTIVE
        LOGGER.debug("%s Get Active: %s (%s)", self.label, bool(value), self._describe())
        return value

    @abstractmethod
    async def async_set_active(self, active: bool) -> List[Characteristic]:
        """Write handler for the active characteristic."""

    def update_from_unit(self, unit: AirUnit) -> List[Characteristic]:
        """Replace the snapshot with a refreshed unit and publish changes."""
        self._unit = unit
        return self.characteristic_sync.sync(self.values())

    def apply_settings(self, settings: SettingsSnapshot) -> List[Characteristic]:
        """Store a confirmed snapshot and publish changes."""
        return self.update_from_unit(self._unit.with_settings(settings))

    def _describe(self) -> str:
        return f"power={self.settings.is_power_on}"


class FanSpeedProjection(StateProjection):
    """Fan speed as a virtual fan.

    Active while the unit is on and the fan speed is not Auto. Speeds One
    to Five map onto 20% steps, and turning the fan on selects the highest
    speed.
    """

    name_suffix = "Fan"
    forces_power = True

    @property
    def level(self) -> SpeedLevel:
        return parse_level(self.settings.set_fan_speed)

    @property
    def is_active(self) -> bool:
        return self.settings.is_power_on and self.level is not SpeedLevel.AUTO

    @property
    def rotation_speed(self) -> int:
        return level_to_percentage(self.settings.set_fan_speed)

    def values(self) -> Dict[Characteristic, Any]:
        values = super().values()
        values[Characteristic.ROTATION_SPEED] = self.rotation_speed
        return values

    def get_rotation_speed(self) -> int:
        """Read handler for the rotation speed characteristic."""
        percentage = self.rotation_speed
        LOGGER.debug(
            "%s Get RotationSpeed: %s%% (fanSpeed=%s)",
            self.label,
            percentage,
            self.settings.set_fan_speed,
        )
        return percentage

    async def async_set_active(self, active: bool) -> List[Characteristic]:
        LOGGER.info("%s Set Active: %s", self.label, active)
        level = SpeedLevel.FIVE if active else SpeedLevel.AUTO
        return await self.async_set_level(level)

    async def async_set_rotation_speed(self, percentage: float) -> List[Characteristic]:
        level = percentage_to_level(percentage)
        LOGGER.info(
            "%s Set RotationSpeed: %s%% (fanSpeed=%s)", self.label, percentage, level.api_name
        )
        return await self.async_set_level(level)

    async def async_set_level(self, level: SpeedLevel) -> List[Characteristic]:
        LOGGER.debug(
            "%s Setting fan=%s, preserving vane=%s",
            self.label,
            level.api_name,
            self.settings.vane_vertical_direction,
        )
        return await self.dispatcher.async_dispatch(self, set_fan_speed=level.api_name)

    def _describe(self) -> str:
        return f"{super()._describe()}, fanSpeed={self.settings.set_fan_speed}"


class SwingProjection(StateProjection):
    """Vertical vane swing as a virtual on/off fan.

    Active while the unit is on and the vane swings. Commands keep the
    unit's power as it is.
    """

    name_suffix = "Swing"

    @property
    def current_vane_mode(self) -> VaneMode:
        return vane_mode(self.settings.vane_vertical_direction)

    @property
    def is_active(self) -> bool:
        return self.settings.is_power_on and self.current_vane_mode is VaneMode.SWING

    async def async_set_active(self, active: bool) -> List[Characteristic]:
        LOGGER.info("%s Set Active: %s", self.label, active)
        return await self.async_set_vane(VANE_SWING if active else VANE_AUTO)

    async def async_set_vane(self, direction: str) -> List[Characteristic]:
        LOGGER.info("%s Setting vaneVerticalDirection=%s", self.label, direction)
        return await self.dispatcher.async_dispatch(self, vane_vertical_direction=direction)

    def _describe(self) -> str:
        return f"{super()._describe()}, vane={self.settings.vane_vertical_direction}"
