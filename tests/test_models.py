"""Tests for the settings record codec and unit models."""

from custom_components.melcloud_home.models import (
    AirUnit,
    ControlCommand,
    SettingsSnapshot,
    SpeedLevel,
)


RAW_SETTINGS = [
    {"name": "Power", "value": "True"},
    {"name": "OperationMode", "value": "Cool"},
    {"name": "SetFanSpeed", "value": "Three"},
    {"name": "VaneHorizontalDirection", "value": "Centre"},
    {"name": "VaneVerticalDirection", "value": "Swing"},
    {"name": "SetTemperature", "value": "22.5"},
    {"name": "RoomTemperature", "value": "24"},
]


class TestSettingsSnapshot:

    def test_from_settings(self):
        snap = SettingsSnapshot.from_settings(RAW_SETTINGS)
        assert snap.power == "True"
        assert snap.operation_mode == "Cool"
        assert snap.set_fan_speed == "Three"
        assert snap.vane_horizontal_direction == "Centre"
        assert snap.vane_vertical_direction == "Swing"
        assert snap.set_temperature == "22.5"
        assert snap.extra == (("RoomTemperature", "24"),)
        assert snap.is_power_on

    def test_to_settings_reproduces_record(self):
        snap = SettingsSnapshot.from_settings(RAW_SETTINGS)
        assert snap.to_settings() == RAW_SETTINGS

    def test_missing_fields_are_empty(self):
        snap = SettingsSnapshot.from_settings([{"name": "Power", "value": "False"}])
        assert snap.set_fan_speed == ""
        assert snap.set_temperature == ""
        assert not snap.is_power_on

    def test_none_and_malformed_entries(self):
        snap = SettingsSnapshot.from_settings([{"value": "x"}, {"name": "Power", "value": None}])
        assert snap == SettingsSnapshot()
        assert SettingsSnapshot.from_settings(None) == SettingsSnapshot()

    def test_replace_touches_only_named_field(self):
        snap = SettingsSnapshot.from_settings(RAW_SETTINGS)
        changed = snap.replace(set_fan_speed="Five")
        assert changed.set_fan_speed == "Five"
        assert snap.set_fan_speed == "Three"
        assert changed.replace(set_fan_speed="Three") == snap


class TestAirUnit:

    def test_from_api(self):
        unit = AirUnit.from_api(
            {
                "id": "abc-123",
                "givenDisplayName": "Bedroom",
                "connectedInterfaceIdentifier": "IF01",
                "settings": RAW_SETTINGS,
            }
        )
        assert unit.id == "abc-123"
        assert unit.given_display_name == "Bedroom"
        assert unit.connected_interface_identifier == "IF01"
        assert unit.settings.set_fan_speed == "Three"

    def test_with_settings_returns_copy(self):
        unit = AirUnit("1", "Living", "IF", SettingsSnapshot(power="False"))
        updated = unit.with_settings(SettingsSnapshot(power="True"))
        assert unit.settings.power == "False"
        assert updated.settings.power == "True"
        assert updated.id == unit.id


class TestControlCommand:

    def test_payload_carries_every_field(self):
        command = ControlCommand(
            power=True,
            operation_mode="Heat",
            set_fan_speed="Two",
            vane_horizontal_direction="Left",
            vane_vertical_direction="Auto",
            set_temperature=21.0,
        )
        assert command.as_payload() == {
            "power": True,
            "operationMode": "Heat",
            "setFanSpeed": "Two",
            "vaneHorizontalDirection": "Left",
            "vaneVerticalDirection": "Auto",
            "setTemperature": 21.0,
            "temperatureIncrementOverride": None,
            "inStandbyMode": None,
        }

    def test_missing_temperature_is_null(self):
        command = ControlCommand(True, "Cool", "Auto", "Auto", "Auto", None)
        assert command.as_payload()["setTemperature"] is None


class TestSpeedLevel:

    def test_api_names(self):
        assert [level.api_name for level in SpeedLevel] == [
            "Auto", "One", "Two", "Three", "Four", "Five",
        ]
