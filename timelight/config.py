"""Configuration loading and validation for Timelight."""
from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

import voluptuous as vol
from voluptuous.humanize import humanize_error

from .const import (
    CONF_ADDR,
    CONF_BRIDGE,
    CONF_BRIGHTNESS,
    CONF_COLOR_TEMP,
    CONF_COLOR_TEMP_MIREK,
    CONF_END_STATE,
    CONF_END_TIME,
    CONF_END_VALUE,
    CONF_LEVEL,
    CONF_LOGGER,
    CONF_MODE,
    CONF_START_STATE,
    CONF_START_TIME,
    CONF_START_VALUE,
    CONF_TIMELIGHT,
    CONF_TRANSITION_DURATION,
    CONF_TRANSITION_TIME,
    CONF_UPDATE_INTERVAL,
    CONF_USERNAME,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MODE,
    DEFAULT_TRANSITION_DURATION,
    DEFAULT_UPDATE_INTERVAL,
    MAX_BRIGHTNESS,
    MAX_MIREK,
    MIN_BRIGHTNESS,
    MIN_MIREK,
    MINUTES_PER_DAY,
    MODE_LINEAR,
    MODE_SMOOTH,
)
from .exceptions import ConfigError
from .models import TargetState
from .transition_logic import ChannelSpec, LinearSpec, SmoothSpec, Spec

_LOGGER = logging.getLogger(__name__)

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_minute_of_day(value: Any) -> int:
    """Parse "HH:MM" into a minute of the day."""
    if not isinstance(value, str):
        raise vol.Invalid(f"invalid time: {value!r}")
    hour_str, sep, minute_str = value.partition(":")
    if not sep:
        raise vol.Invalid(f"invalid time: {value}")
    try:
        hour = int(hour_str)
        minute = int(minute_str)
    except ValueError as e:
        raise vol.Invalid(f"invalid time: {value}") from e
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise vol.Invalid(f"time out of range: {value}")
    return 60 * hour + minute


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_brightness(value: float) -> float:
    return float(_clamp(value, MIN_BRIGHTNESS, MAX_BRIGHTNESS))


def clamp_mirek(value: int) -> int:
    return int(_clamp(value, MIN_MIREK, MAX_MIREK))


MODES = vol.All(str, vol.Lower, vol.In([MODE_LINEAR, MODE_SMOOTH]))
POSITIVE_SECONDS = vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False))

STATE_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_BRIGHTNESS): vol.All(vol.Coerce(float), clamp_brightness),
        vol.Optional(CONF_COLOR_TEMP_MIREK): vol.All(vol.Coerce(int), clamp_mirek),
    }
)


def _channel_schema(clamp) -> vol.Schema:
    return vol.Schema(
        {
            vol.Optional(CONF_MODE): MODES,
            vol.Required(CONF_START_TIME): parse_minute_of_day,
            vol.Optional(CONF_TRANSITION_TIME): parse_minute_of_day,
            vol.Required(CONF_END_TIME): parse_minute_of_day,
            vol.Required(CONF_START_VALUE): vol.All(vol.Coerce(float), clamp),
            vol.Required(CONF_END_VALUE): vol.All(vol.Coerce(float), clamp),
        }
    )


TIMELIGHT_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_MODE, default=DEFAULT_MODE): MODES,
        vol.Optional(CONF_START_TIME): parse_minute_of_day,
        vol.Optional(CONF_TRANSITION_TIME): parse_minute_of_day,
        vol.Optional(CONF_END_TIME): parse_minute_of_day,
        vol.Optional(CONF_START_STATE, default={}): STATE_SCHEMA,
        vol.Optional(CONF_END_STATE, default={}): STATE_SCHEMA,
        vol.Optional(CONF_BRIGHTNESS): _channel_schema(clamp_brightness),
        vol.Optional(CONF_COLOR_TEMP): _channel_schema(clamp_mirek),
        vol.Optional(CONF_UPDATE_INTERVAL, default=DEFAULT_UPDATE_INTERVAL): POSITIVE_SECONDS,
        vol.Optional(CONF_TRANSITION_DURATION, default=DEFAULT_TRANSITION_DURATION): vol.All(
            vol.Coerce(float), vol.Range(min=0)
        ),
    }
)

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(CONF_LOGGER, default={}): {
            vol.Optional(CONF_LEVEL, default=DEFAULT_LOG_LEVEL): vol.All(
                str, vol.Lower, vol.In(list(LOG_LEVELS))
            ),
        },
        vol.Required(CONF_BRIDGE): {
            vol.Required(CONF_ADDR): vol.All(str, vol.Length(min=1)),
            vol.Required(CONF_USERNAME): vol.All(str, vol.Length(min=1)),
        },
        vol.Required(CONF_TIMELIGHT): TIMELIGHT_SCHEMA,
    }
)


def _offset(minute: int, start: int) -> int:
    return (minute - start) % MINUTES_PER_DAY


def _build_window_spec(
    mode: str,
    start_minute: int,
    transition_minute: int | None,
    end_minute: int,
    start_state: TargetState,
    end_state: TargetState,
    name: str,
) -> Spec:
    if mode == MODE_LINEAR:
        if transition_minute is not None:
            raise ConfigError(f"{name}: transition_time is only used in {MODE_SMOOTH} mode")
        return LinearSpec(start_minute, end_minute, start_state, end_state)

    if transition_minute is None:
        transition_minute = start_minute
    if _offset(transition_minute, start_minute) > _offset(end_minute, start_minute):
        raise ConfigError(f"{name}: transition_time must lie between start_time and end_time")
    return SmoothSpec(start_minute, transition_minute, end_minute, start_state, end_state)


@dataclass(frozen=True)
class LoggerConfig:
    level: str = DEFAULT_LOG_LEVEL

    @property
    def log_level(self) -> int:
        return LOG_LEVELS.get(self.level.lower(), logging.INFO)


@dataclass(frozen=True)
class BridgeConfig:
    addr: str
    username: str


@dataclass(frozen=True)
class TimelightConfig:
    """Validated [timelight] section."""

    spec: Spec
    update_interval: timedelta = timedelta(seconds=DEFAULT_UPDATE_INTERVAL)
    transition_duration: timedelta = timedelta(seconds=DEFAULT_TRANSITION_DURATION)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimelightConfig:
        return cls(
            spec=_build_spec(data),
            update_interval=timedelta(seconds=data[CONF_UPDATE_INTERVAL]),
            transition_duration=timedelta(seconds=data[CONF_TRANSITION_DURATION]),
        )


def _build_spec(data: dict[str, Any]) -> Spec:
    mode = data[CONF_MODE]

    if CONF_BRIGHTNESS in data or CONF_COLOR_TEMP in data:
        brightness = data.get(CONF_BRIGHTNESS)
        color_temp = data.get(CONF_COLOR_TEMP)
        return ChannelSpec(
            brightness=_build_window_spec(
                brightness.get(CONF_MODE, mode),
                brightness[CONF_START_TIME],
                brightness.get(CONF_TRANSITION_TIME),
                brightness[CONF_END_TIME],
                TargetState(brightness=brightness[CONF_START_VALUE]),
                TargetState(brightness=brightness[CONF_END_VALUE]),
                CONF_BRIGHTNESS,
            )
            if brightness is not None
            else None,
            color_temp=_build_window_spec(
                color_temp.get(CONF_MODE, mode),
                color_temp[CONF_START_TIME],
                color_temp.get(CONF_TRANSITION_TIME),
                color_temp[CONF_END_TIME],
                TargetState(color_temp_mirek=int(color_temp[CONF_START_VALUE])),
                TargetState(color_temp_mirek=int(color_temp[CONF_END_VALUE])),
                CONF_COLOR_TEMP,
            )
            if color_temp is not None
            else None,
        )

    if CONF_START_TIME not in data or CONF_END_TIME not in data:
        raise ConfigError(
            "timelight: start_time and end_time are required unless brightness or color_temp channels are given"
        )

    start_state = TargetState(
        brightness=data[CONF_START_STATE].get(CONF_BRIGHTNESS),
        color_temp_mirek=data[CONF_START_STATE].get(CONF_COLOR_TEMP_MIREK),
    )
    end_state = TargetState(
        brightness=data[CONF_END_STATE].get(CONF_BRIGHTNESS),
        color_temp_mirek=data[CONF_END_STATE].get(CONF_COLOR_TEMP_MIREK),
    )
    return _build_window_spec(
        mode,
        data[CONF_START_TIME],
        data.get(CONF_TRANSITION_TIME),
        data[CONF_END_TIME],
        start_state,
        end_state,
        CONF_TIMELIGHT,
    )


@dataclass(frozen=True)
class Config:
    logger: LoggerConfig
    bridge: BridgeConfig
    timelight: TimelightConfig

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Validate raw configuration data. Raises ConfigError."""
        try:
            validated = CONFIG_SCHEMA(data)
        except vol.Invalid as e:
            raise ConfigError(f"Invalid configuration: {humanize_error(data, e)}") from e

        return cls(
            logger=LoggerConfig(level=validated[CONF_LOGGER][CONF_LEVEL]),
            bridge=BridgeConfig(
                addr=validated[CONF_BRIDGE][CONF_ADDR],
                username=validated[CONF_BRIDGE][CONF_USERNAME],
            ),
            timelight=TimelightConfig.from_dict(validated[CONF_TIMELIGHT]),
        )


def load_config(path: str | Path) -> Config:
    """Read and validate a TOML configuration file."""
    path = Path(path)
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    _LOGGER.debug(f"Loaded configuration from {path}")
    return Config.from_dict(data)
