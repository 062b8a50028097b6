"""Time-of-day transition curves for Timelight."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Protocol

from .const import MINUTES_PER_DAY
from .models import TargetState

_LOGGER = logging.getLogger(__name__)


class Spec(Protocol):
    """A rule for computing the target brightness and color temperature for a given time."""

    def target_light_state(self, now: datetime) -> TargetState:
        ...


def minute_of_day(now: datetime) -> int:
    """Return the wall-clock minute of the day, discarding seconds."""
    return 60 * now.hour + now.minute


def _offset(minute: int, start_minute: int) -> int:
    """Minutes elapsed since start_minute, wrapping at midnight."""
    return (minute - start_minute) % MINUTES_PER_DAY


def get_progress(elapsed: int, total: int) -> float:
    """Get the progress of a transition as a float between 0.0 and 1.0.

    A transition of zero length is always complete.
    """
    if total <= 0:
        return 1.0
    return min(1.0, max(0.0, elapsed / total))


def linear_transition(start: float, end: float, p: float) -> float:
    """Interpolate on a straight line from start (p=0) to end (p=1)."""
    return start + p * (end - start)


def smooth_transition(start: float, end: float, p: float) -> float:
    """For fixed start and end, transition "smoothly" as p progresses from 0 to 1.

    The raised-cosine curve has zero slope at both ends, so lights do not
    visibly jump when a transition starts or stops.
    """
    if p < 0:
        return start
    if p > 1:
        return end
    return 0.5 * (start - end) * (1 + math.cos(math.pi * p)) + end


def _interpolate_value(
    start: float | None,
    end: float | None,
    p: float,
    curve: Callable[[float, float, float], float],
) -> float | None:
    if start is None:
        return end
    if end is None:
        return start
    return curve(start, end, p)


def interpolate_state(
    start: TargetState,
    end: TargetState,
    p: float,
    curve: Callable[[float, float, float], float],
) -> TargetState:
    """Apply curve to every field present on both sides; mirek is truncated."""
    brightness = _interpolate_value(start.brightness, end.brightness, p, curve)
    mirek = _interpolate_value(start.color_temp_mirek, end.color_temp_mirek, p, curve)
    return TargetState(
        brightness=brightness,
        color_temp_mirek=int(mirek) if mirek is not None else None,
    )


@dataclass(frozen=True)
class LinearSpec:
    """Moves linearly from start_state to end_state across the window.

    Outside the window the end state applies. A window whose start is after
    its end wraps around midnight.
    """

    start_minute: int
    end_minute: int
    start_state: TargetState
    end_state: TargetState

    def target_light_state(self, now: datetime) -> TargetState:
        elapsed = _offset(minute_of_day(now), self.start_minute)
        length = _offset(self.end_minute, self.start_minute)
        if elapsed > length:
            return self.end_state

        p = get_progress(elapsed, length)
        return interpolate_state(self.start_state, self.end_state, p, linear_transition)


@dataclass(frozen=True)
class SmoothSpec:
    """Holds start_state until transition_minute, then eases into end_state.

    Outside the window the end state applies.
    """

    start_minute: int  # Time to begin applying start state.
    transition_minute: int  # Time to begin transition towards end state.
    end_minute: int  # Time to begin applying end state.
    start_state: TargetState
    end_state: TargetState

    def target_light_state(self, now: datetime) -> TargetState:
        elapsed = _offset(minute_of_day(now), self.start_minute)
        length = _offset(self.end_minute, self.start_minute)
        if elapsed > length:
            return self.end_state

        hold = _offset(self.transition_minute, self.start_minute)
        if elapsed < hold:
            return self.start_state

        p = get_progress(elapsed - hold, length - hold)
        return interpolate_state(self.start_state, self.end_state, p, smooth_transition)


@dataclass(frozen=True)
class ChannelSpec:
    """Schedules brightness and color temperature independently.

    Brightness comes from the brightness spec and mirek from the color
    temperature spec; a missing channel leaves that field absent.
    """

    brightness: Spec | None = None
    color_temp: Spec | None = None

    def target_light_state(self, now: datetime) -> TargetState:
        state = TargetState()
        if self.brightness is not None:
            state = state.with_brightness(self.brightness.target_light_state(now).brightness)
        if self.color_temp is not None:
            state = state.with_color_temp(self.color_temp.target_light_state(now).color_temp_mirek)
        _LOGGER.debug(f"Channel target at {now:%H:%M}: {state}")
        return state
