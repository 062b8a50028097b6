"""Pytest fixtures for Timelight tests."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohue.v2.models.feature import DimmingFeaturePut, OnFeature
from aiohue.v2.models.resource import ResourceIdentifier, ResourceTypes
from aiohue.v2.models.scene import Action, ActionAction

from timelight.bridge import HueClient
from timelight.light import TrackedLight
from timelight.models import TargetState
from timelight.scene import TrackedScene


class MockMetadata:
    def __init__(self, name: str):
        self.name = name


class MockDimming:
    def __init__(self, brightness: float):
        self.brightness = brightness


class MockColorTemperature:
    def __init__(self, mirek: int | None, mirek_valid: bool = True):
        self.mirek = mirek
        self.mirek_valid = mirek_valid


class MockLight:
    """Stands in for an aiohue light as returned by bridge.lights.items."""

    def __init__(self, light_id: str, dimming: bool = True, color_temperature: bool = True, color: bool = False):
        self.id = light_id
        self.type = ResourceTypes.LIGHT
        self.metadata = MockMetadata(f"Lamp {light_id}")
        self.dimming = MockDimming(100.0) if dimming else None
        self.color_temperature = MockColorTemperature(366) if color_temperature else None
        self.color = object() if color else None


class MockScene:
    """Stands in for an aiohue scene as returned by bridge.scenes.scene.items."""

    def __init__(self, scene_id: str, name: str, actions: list[Action]):
        self.id = scene_id
        self.type = ResourceTypes.SCENE
        self.metadata = MockMetadata(name)
        self.actions = actions


def scene_action(rid: str, rtype: str = "light") -> Action:
    return Action(
        target=ResourceIdentifier(rid=rid, rtype=ResourceTypes(rtype)),
        action=ActionAction(on=OnFeature(on=True), dimming=DimmingFeaturePut(brightness=80.0)),
    )


@pytest.fixture
def mock_client():
    """Mock bridge client whose calls all succeed."""
    client = MagicMock(spec=HueClient)
    client.async_connect = AsyncMock(return_value=None)
    client.async_close = AsyncMock(return_value=None)
    client.async_get_lights = AsyncMock(return_value=[])
    client.async_get_scenes = AsyncMock(return_value=[])
    client.async_update_light = AsyncMock(return_value=None)
    client.async_update_scene = AsyncMock(return_value=None)
    client.subscribe = MagicMock(return_value=MagicMock())
    return client


@pytest.fixture
def now():
    return datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def light_factory(mock_client):
    """Factory for tracked lights with full capabilities unless told otherwise."""
    def create_light(
        light_id: str = "light-1",
        has_brightness: bool = True,
        has_color_temperature: bool = True,
        has_color: bool = False,
        managed: bool = False,
        last_commanded: TargetState | None = None,
    ) -> TrackedLight:
        light = TrackedLight(
            mock_client,
            light_id,
            has_brightness=has_brightness,
            has_color_temperature=has_color_temperature,
            has_color=has_color,
        )
        light.managed = managed
        if last_commanded is not None:
            light.last_commanded = last_commanded
        return light
    return create_light


@pytest.fixture
def light_resource_factory():
    """Factory for bridge light resources."""
    return MockLight


@pytest.fixture
def scene_resource_factory():
    """Factory for bridge scene resources; targets are (rid, rtype) pairs."""
    def create_scene(scene_id: str, name: str, targets: list[tuple[str, str]]) -> MockScene:
        return MockScene(scene_id, name, [scene_action(rid, rtype) for rid, rtype in targets])
    return create_scene


@pytest.fixture
def scene_factory(mock_client, scene_resource_factory):
    """Factory for tracked scenes built against a light registry."""
    def create_scene(scene_id: str, lights: dict[str, TrackedLight], name: str = "Evening Timelight") -> TrackedScene:
        resource = scene_resource_factory(scene_id, name, [(light_id, "light") for light_id in lights])
        return TrackedScene.from_resource(mock_client, resource, lights)
    return create_scene
