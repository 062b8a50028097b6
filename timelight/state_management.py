from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from .const import BRIGHTNESS_OVERRIDE_TOLERANCE, EVENT_TYPE_UPDATE, MIREK_OVERRIDE_TOLERANCE
from .resources import LightUpdate, Resource, SceneUpdate

if TYPE_CHECKING:
    from .events import Event
    from .light import TrackedLight
    from .scene import TrackedScene

_LOGGER = logging.getLogger(__name__)


def within(a: float, b: float, eps: float) -> bool:
    return abs(a - b) < eps


def light_changed(light: TrackedLight, update: LightUpdate) -> bool:
    """Check whether a reported light state departs from what Timelight commanded.

    Small differences caused by the bridge quantizing dimming and mirek
    values, or by our own transitions still running, stay inside the
    tolerances.
    """
    if update.id != light.id:
        return False

    if update.on is False:
        return True  # Light was turned off.

    target = light.last_commanded

    if light.has_brightness and update.brightness is not None and target.has_brightness:
        if not within(target.brightness, update.brightness, BRIGHTNESS_OVERRIDE_TOLERANCE):
            return True

    if light.has_color_temperature and update.has_color_temperature and target.has_color_temp:
        if not update.color_temperature_valid:
            return True
        if not within(target.color_temp_mirek, update.mirek, MIREK_OVERRIDE_TOLERANCE):
            return True

    return False


def handle_scene_update(
    scenes: dict[str, TrackedScene], scene: SceneUpdate, now: datetime
) -> list[str]:
    """Mark the lights of a recalled timelight scene as managed."""
    tracked = scenes.get(scene.id)
    if tracked is None:
        return []  # Not a timelight scene.

    if not scene.has_status:
        # Without a status the update may be an edit rather than a recall.
        return []

    changed = []
    for light in tracked.lights.values():
        if not light.managed:
            changed.append(light.id)
        light.set_managed()
        light.assume_state(tracked.last_commanded, now)

    _LOGGER.info(
        f"[{scene.id}] Timelight scene {tracked.name} recalled, marked {len(tracked.lights)} lights as managed"
    )
    return changed


def handle_light_update(lights: dict[str, TrackedLight], update: LightUpdate) -> list[str]:
    """Stop managing a light that was changed by something other than Timelight."""
    light = lights.get(update.id)
    if light is None or not light.managed:
        return []

    _LOGGER.debug(f"[{light.id}] Checking for manual light change")
    if not light_changed(light, update):
        return []

    _LOGGER.info(
        f"[{light.id}] Manual change detected for {light.name}: target=({light.last_commanded}), "
        f"on={update.on}, brightness={update.brightness}, mirek={update.mirek}, mirek_valid={update.mirek_valid}"
    )
    light.set_unmanaged()
    return [light.id]


def handle_update(
    lights: dict[str, TrackedLight],
    scenes: dict[str, TrackedScene],
    resource: Resource,
    now: datetime,
) -> list[str]:
    if isinstance(resource, SceneUpdate):
        return handle_scene_update(scenes, resource, now)
    if isinstance(resource, LightUpdate):
        return handle_light_update(lights, resource)

    _LOGGER.debug(f"Unknown resource type {type(resource).__name__}")
    return []


def handle_event(
    lights: dict[str, TrackedLight],
    scenes: dict[str, TrackedScene],
    event: Event,
    now: datetime | None = None,
) -> list[str]:
    """Apply one bridge event to the registry.

    Only flips managed flags; never issues bridge commands. Returns the ids
    of lights whose managed status changed.
    """
    _LOGGER.debug(
        f"Handling event {event.id}: type={event.type}, "
        f"creation_time={event.creation_time}, resources={len(event.data)}"
    )
    if event.type != EVENT_TYPE_UPDATE:
        _LOGGER.debug(f"Ignoring event of type {event.type}")
        return []

    if now is None:
        now = datetime.now()

    changed = []
    for resource in event.data:
        changed.extend(handle_update(lights, scenes, resource, now))
    return changed
