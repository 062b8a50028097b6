"""Constants for Timelight."""

# Scenes whose name contains this marker (case-insensitive) are managed.
SCENE_NAME_MARKER = "timelight"

# Value ranges accepted by the bridge.
MIN_BRIGHTNESS = 0.0
MAX_BRIGHTNESS = 100.0
MIN_MIREK = 153
MAX_MIREK = 500

MINUTES_PER_DAY = 24 * 60

# A reported brightness (0-100 scale) that differs from the commanded one by
# at least this much is treated as a manual change.
BRIGHTNESS_OVERRIDE_TOLERANCE = 2

# A reported mirek that differs from the commanded one by at least this much
# is treated as a manual change.
MIREK_OVERRIDE_TOLERANCE = 10

# Default interval in seconds between reconciliation passes.
DEFAULT_UPDATE_INTERVAL = 60

# Default hardware transition in seconds applied to light updates.
DEFAULT_TRANSITION_DURATION = 10

# Capacity of the queue between the event stream and the reconciliation loop.
EVENT_QUEUE_SIZE = 8

# Delay in seconds before resubscribing after the event listener failed.
EVENT_RETRY_DELAY = 2

EVENT_TYPE_UPDATE = "update"

# Configuration keys
CONF_LOGGER = "logger"
CONF_LEVEL = "level"
CONF_BRIDGE = "bridge"
CONF_ADDR = "addr"
CONF_USERNAME = "username"
CONF_TIMELIGHT = "timelight"
CONF_MODE = "mode"
CONF_START_TIME = "start_time"
CONF_TRANSITION_TIME = "transition_time"
CONF_END_TIME = "end_time"
CONF_START_STATE = "start_state"
CONF_END_STATE = "end_state"
CONF_START_VALUE = "start_value"
CONF_END_VALUE = "end_value"
CONF_BRIGHTNESS = "brightness"
CONF_COLOR_TEMP = "color_temp"
CONF_COLOR_TEMP_MIREK = "color_temp_mirek"
CONF_UPDATE_INTERVAL = "update_interval"
CONF_TRANSITION_DURATION = "transition_duration"

MODE_LINEAR = "linear"
MODE_SMOOTH = "smooth"

DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_LOG_LEVEL = "info"
DEFAULT_MODE = MODE_SMOOTH
