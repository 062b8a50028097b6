"""Tracked lights and the per-tick light dispatch."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from .exceptions import HueBridgeError
from .models import TargetState, UpdateResult

if TYPE_CHECKING:
    from aiohue.v2.models.light import Light

    from .bridge import HueClient

_LOGGER = logging.getLogger(__name__)


class TrackedLight:
    """A bridge light and Timelight's view of it."""

    def __init__(
        self,
        client: HueClient,
        light_id: str,
        has_brightness: bool = False,
        has_color_temperature: bool = False,
        has_color: bool = False,
        name: str | None = None,
    ) -> None:
        self._client = client
        self.id = light_id
        self.name = name or light_id
        self.has_brightness = has_brightness
        self.has_color_temperature = has_color_temperature
        self.has_color = has_color

        # Is Timelight currently controlling this light?
        self.managed = False
        self.last_commanded = TargetState()
        self.last_command_time: datetime | None = None

    @classmethod
    def from_resource(cls, client: HueClient, light: Light) -> TrackedLight:
        """Derive capabilities from the sub-objects the bridge returned."""
        return cls(
            client,
            light.id,
            has_brightness=light.dimming is not None,
            has_color_temperature=light.color_temperature is not None,
            has_color=light.color is not None,
            name=light.metadata.name if light.metadata is not None else None,
        )

    def __repr__(self) -> str:
        return f"<TrackedLight {self.id} managed={self.managed} target=({self.last_commanded})>"

    def set_managed(self) -> None:
        self.managed = True

    def set_unmanaged(self) -> None:
        self.managed = False

    def restrict_target(self, target: TargetState) -> TargetState:
        return target.restrict(self.has_brightness, self.has_color_temperature)

    def assume_state(self, target: TargetState, now: datetime) -> None:
        """Record target as the light's state without commanding it."""
        self.last_commanded = self.restrict_target(target)
        self.last_command_time = now

    async def async_update(self, now: datetime, target: TargetState, transition: timedelta) -> bool:
        """Command the light towards target.

        Returns False when the restricted target equals the last commanded
        state and nothing was sent. Bridge errors propagate and leave the
        recorded state untouched.
        """
        target = self.restrict_target(target)
        if target == self.last_commanded:
            return False

        await self._client.async_update_light(
            self.id,
            brightness=target.brightness,
            color_temp_mirek=target.color_temp_mirek,
            transition_ms=int(transition.total_seconds() * 1000),
        )

        self.last_commanded = target
        self.last_command_time = now
        return True


async def async_init_lights(client: HueClient) -> dict[str, TrackedLight]:
    """Build the light registry from the bridge. Bridge errors propagate."""
    lights = {}
    for resource in await client.async_get_lights():
        light = TrackedLight.from_resource(client, resource)
        lights[light.id] = light
        _LOGGER.debug(
            f"[{light.id}] Tracking {light.name}: brightness={light.has_brightness}, "
            f"color_temp={light.has_color_temperature}, color={light.has_color}"
        )

    _LOGGER.info(f"Initialized {len(lights)} lights")
    return lights


async def async_update_lights(
    lights: dict[str, TrackedLight],
    now: datetime,
    target: TargetState,
    transition: timedelta,
) -> UpdateResult:
    """Push target to every managed light, best-effort."""
    _LOGGER.info(f"Updating lights to {target}")
    result = UpdateResult()

    for light in lights.values():
        if not light.managed:
            continue
        try:
            sent = await light.async_update(now, target, transition)
        except HueBridgeError as e:
            _LOGGER.error(f"[{light.id}] Error while updating light: {e}")
            result.errors += 1
            continue
        if sent:
            result.successes += 1
        else:
            result.skipped += 1

    _LOGGER.info(
        f"Finished updating lights: successes={result.successes}, "
        f"errors={result.errors}, unchanged={result.skipped}"
    )
    return result
