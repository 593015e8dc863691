"""Constants for the MELCloud Home integration."""

DOMAIN = "melcloud_home"

MANUFACTURER = "Mitsubishi Electric"
MODEL_FAN_CONTROL = "MELCloud Fan Control"
MODEL_SWING_CONTROL = "MELCloud Swing Control"

API_BASE_URL = "https://melcloudhome.com"
API_CONTEXT_PATH = "/api/user/context"
API_CONTROL_PATH = "/api/ataunit/{device_id}"
REQUEST_TIMEOUT = 15  # seconds

CONF_INCLUDE_FAN_SPEED = "include_fan_speed"
CONF_INCLUDE_SWING = "include_swing"

DEFAULT_SCAN_INTERVAL = 60  # seconds
MIN_SCAN_INTERVAL = 15
MAX_SCAN_INTERVAL = 3600
DEFAULT_INCLUDE_FAN_SPEED = True
DEFAULT_INCLUDE_SWING = True

# Delay before the authoritative refresh that follows a control command
REFRESH_DELAY_SECONDS = 2.0

# Settings record field names
SETTING_POWER = "Power"
SETTING_OPERATION_MODE = "OperationMode"
SETTING_SET_FAN_SPEED = "SetFanSpeed"
SETTING_VANE_HORIZONTAL = "VaneHorizontalDirection"
SETTING_VANE_VERTICAL = "VaneVerticalDirection"
SETTING_SET_TEMPERATURE = "SetTemperature"

POWER_ON = "True"
POWER_OFF = "False"

VANE_SWING = "Swing"
VANE_AUTO = "Auto"

PERCENTAGE_STEP = 20
