"""Typed data models for MELCloud Home air-to-air units."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Tuple

from .const import (
    POWER_ON,
    SETTING_OPERATION_MODE,
    SETTING_POWER,
    SETTING_SET_FAN_SPEED,
    SETTING_SET_TEMPERATURE,
    SETTING_VANE_HORIZONTAL,
    SETTING_VANE_VERTICAL,
)


class SpeedLevel(IntEnum):
    """Fan speed levels, ordered from Auto to the highest speed."""

    AUTO = 0
    ONE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5

    @property
    def api_name(self) -> str:
        """Return the name the cloud API uses for this level."""
        return self.name.capitalize()


class VaneMode(str, Enum):
    """Canonical vertical vane modes."""

    AUTO = "auto"
    SWING = "swing"
    OTHER = "other"


# Maps settings record names to SettingsSnapshot attributes
SETTING_FIELDS: Dict[str, str] = {
    SETTING_POWER: "power",
    SETTING_OPERATION_MODE: "operation_mode",
    SETTING_SET_FAN_SPEED: "set_fan_speed",
    SETTING_VANE_HORIZONTAL: "vane_horizontal_direction",
    SETTING_VANE_VERTICAL: "vane_vertical_direction",
    SETTING_SET_TEMPERATURE: "set_temperature",
}


@dataclass(frozen=True)
class SettingsSnapshot:
    """Point-in-time settings record for one unit.

    Values are kept as the raw strings the API reports. Entries the
    integration does not manage are carried in ``extra`` so that
    ``to_settings`` reproduces the original record.
    """

    power: str = ""
    operation_mode: str = ""
    set_fan_speed: str = ""
    vane_horizontal_direction: str = ""
    vane_vertical_direction: str = ""
    set_temperature: str = ""
    extra: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def from_settings(cls, settings: Optional[List[Dict[str, Any]]]) -> SettingsSnapshot:
        """Parse a ``[{"name": ..., "value": ...}]`` settings record."""
        values: Dict[str, str] = {}
        extra: List[Tuple[str, str]] = []
        for entry in settings or []:
            name = entry.get("name")
            if name is None:
                continue
            value = entry.get("value")
            value = "" if value is None else str(value)
            attr = SETTING_FIELDS.get(name)
            if attr is None:
                extra.append((name, value))
            else:
                values[attr] = value
        return cls(**values, extra=tuple(extra))

    def to_settings(self) -> List[Dict[str, str]]:
        """Serialize back into the API's settings record form."""
        record = [
            {"name": name, "value": getattr(self, attr)}
            for name, attr in SETTING_FIELDS.items()
        ]
        record.extend({"name": name, "value": value} for name, value in self.extra)
        return record

    @property
    def is_power_on(self) -> bool:
        return self.power == POWER_ON

    def replace(self, **changes: str) -> SettingsSnapshot:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


@dataclass(frozen=True)
class AirUnit:
    """A single air-to-air unit and its last known settings."""

    id: str
    given_display_name: str
    connected_interface_identifier: str
    settings: SettingsSnapshot = field(default_factory=SettingsSnapshot)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> AirUnit:
        """Build a unit from one ``airToAirUnits`` entry."""
        unit_id = str(data["id"])
        return cls(
            id=unit_id,
            given_display_name=data.get("givenDisplayName") or unit_id,
            connected_interface_identifier=data.get("connectedInterfaceIdentifier") or unit_id,
            settings=SettingsSnapshot.from_settings(data.get("settings")),
        )

    def with_settings(self, settings: SettingsSnapshot) -> AirUnit:
        """Return a copy of this unit carrying a new snapshot."""
        return replace(self, settings=settings)


@dataclass(frozen=True)
class ControlCommand:
    """Complete control command for a unit.

    The API does not accept partial updates: every field must be sent, or
    the unit resets the missing ones to defaults.
    """

    power: bool
    operation_mode: str
    set_fan_speed: str
    vane_horizontal_direction: str
    vane_vertical_direction: str
    set_temperature: Optional[float]

    def as_payload(self) -> Dict[str, Any]:
        """Return the JSON body for the control endpoint."""
        return {
            "power": self.power,
            "operationMode": self.operation_mode,
            "setFanSpeed": self.set_fan_speed,
            "vaneHorizontalDirection": self.vane_horizontal_direction,
            "vaneVerticalDirection": self.vane_vertical_direction,
            "setTemperature": self.set_temperature,
            "temperatureIncrementOverride": None,
            "inStandbyMode": None,
        }
