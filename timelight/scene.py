"""Timelight scenes and the per-tick scene dispatch."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from aiohue.v2.models.feature import ColorTemperatureFeaturePut, DimmingFeaturePut, OnFeature
from aiohue.v2.models.resource import ResourceTypes
from aiohue.v2.models.scene import Action, ActionAction

from .const import SCENE_NAME_MARKER
from .exceptions import HueBridgeError
from .light import TrackedLight
from .models import TargetState, UpdateResult

if TYPE_CHECKING:
    from aiohue.v2.models.scene import Scene

    from .bridge import HueClient

_LOGGER = logging.getLogger(__name__)


def scene_name(scene: Scene) -> str:
    return scene.metadata.name if scene.metadata is not None else ""


def is_timelight_scene(scene: Scene) -> bool:
    return SCENE_NAME_MARKER in scene_name(scene).lower()


class TrackedScene:
    """A bridge scene whose actions Timelight keeps in step with the schedule."""

    def __init__(
        self,
        client: HueClient,
        scene_id: str,
        name: str,
        actions: list[Action],
        lights: dict[str, TrackedLight],
    ) -> None:
        self._client = client
        self.id = scene_id
        self.name = name
        self.actions = list(actions)
        self.lights = lights
        self.last_commanded = TargetState()
        self.last_command_time: datetime | None = None

    @classmethod
    def from_resource(
        cls, client: HueClient, scene: Scene, registry: dict[str, TrackedLight]
    ) -> TrackedScene:
        """Resolve the scene's light targets against the light registry."""
        name = scene_name(scene)
        lights = {}
        for action in scene.actions:
            if action.target.rtype != ResourceTypes.LIGHT:
                continue
            light = registry.get(action.target.rid)
            if light is None:
                _LOGGER.warning(f"[{scene.id}] Light {action.target.rid} of scene {name} not found")
                continue
            lights[light.id] = light
        return cls(client, scene.id, name, list(scene.actions), lights)

    def __repr__(self) -> str:
        return f"<TrackedScene {self.id} {self.name!r} lights={len(self.lights)}>"

    def build_actions(self, target: TargetState) -> list[Action]:
        """Rewrite the light actions of the scene for target.

        Each tracked light is switched on and given only the goals its
        capabilities allow. Other actions are passed through unchanged.
        """
        new_actions = []
        for old_action in self.actions:
            light = self.lights.get(old_action.target.rid)
            if old_action.target.rtype != ResourceTypes.LIGHT or light is None:
                new_actions.append(old_action)
                continue

            restricted = light.restrict_target(target)
            action = ActionAction(
                on=OnFeature(on=True),
                dimming=DimmingFeaturePut(brightness=restricted.brightness)
                if restricted.brightness is not None
                else None,
                color_temperature=ColorTemperatureFeaturePut(mirek=restricted.color_temp_mirek)
                if restricted.color_temp_mirek is not None
                else None,
            )
            new_actions.append(Action(target=old_action.target, action=action))
        return new_actions

    async def async_update_actions(self, now: datetime, target: TargetState) -> bool:
        """Push target into the scene.

        Returns False when target equals the last pushed state. Bridge errors
        propagate.
        """
        if target == self.last_commanded:
            return False

        new_actions = self.build_actions(target)
        await self._client.async_update_scene(self.id, new_actions)

        self.actions = new_actions
        self.last_commanded = target
        self.last_command_time = now
        return True


async def async_init_scenes(
    client: HueClient, lights: dict[str, TrackedLight]
) -> dict[str, TrackedScene]:
    """Build the scene registry. Lights must be initialized first."""
    scenes = {}
    for resource in await client.async_get_scenes():
        if not is_timelight_scene(resource):
            continue
        scene = TrackedScene.from_resource(client, resource, lights)
        scenes[scene.id] = scene
        _LOGGER.info(f"[{scene.id}] Initialized scene {scene.name} with {len(scene.lights)} lights")

    _LOGGER.info(f"Initialized {len(scenes)} timelight scenes")
    return scenes


async def async_update_scenes(
    scenes: dict[str, TrackedScene], now: datetime, target: TargetState
) -> UpdateResult:
    """Push target into every tracked scene, best-effort."""
    _LOGGER.info(f"Updating scenes to {target}")
    result = UpdateResult()

    for scene in scenes.values():
        try:
            sent = await scene.async_update_actions(now, target)
        except HueBridgeError as e:
            _LOGGER.error(f"[{scene.id}] Error while updating scene: {e}")
            result.errors += 1
            continue
        if sent:
            result.successes += 1
        else:
            result.skipped += 1

    _LOGGER.info(
        f"Finished updating scenes: successes={result.successes}, "
        f"errors={result.errors}, unchanged={result.skipped}"
    )
    return result
