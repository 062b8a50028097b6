"""Tests for light.py"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from timelight.exceptions import HueBridgeError
from timelight.light import TrackedLight, async_init_lights, async_update_lights
from timelight.models import TargetState

TARGET = TargetState(brightness=75.0, color_temp_mirek=250)
TRANSITION = timedelta(seconds=10)


class TestTrackedLight:
    def test_from_resource_capabilities(self, mock_client, light_resource_factory):
        resource = light_resource_factory("light-1", color_temperature=False, color=True)
        light = TrackedLight.from_resource(mock_client, resource)
        assert light.id == "light-1"
        assert light.name == "Lamp light-1"
        assert light.has_brightness
        assert not light.has_color_temperature
        assert light.has_color
        assert not light.managed
        assert light.last_commanded == TargetState()

    def test_managed_flag(self, light_factory):
        light = light_factory()
        light.set_managed()
        assert light.managed
        light.set_unmanaged()
        assert not light.managed

    def test_assume_state_restricts(self, light_factory, now):
        light = light_factory(has_color_temperature=False)
        light.assume_state(TARGET, now)
        assert light.last_commanded == TargetState(brightness=75.0)
        assert light.last_command_time == now

    @pytest.mark.asyncio
    async def test_update_sends_command(self, light_factory, mock_client, now):
        light = light_factory(managed=True)
        assert await light.async_update(now, TARGET, TRANSITION)
        mock_client.async_update_light.assert_awaited_once_with(
            "light-1", brightness=75.0, color_temp_mirek=250, transition_ms=10000
        )
        assert light.last_commanded == TARGET
        assert light.last_command_time == now

    @pytest.mark.asyncio
    async def test_update_restricted_to_capabilities(self, light_factory, mock_client, now):
        light = light_factory(has_brightness=False)
        await light.async_update(now, TARGET, TRANSITION)
        mock_client.async_update_light.assert_awaited_once_with(
            "light-1", brightness=None, color_temp_mirek=250, transition_ms=10000
        )

    @pytest.mark.asyncio
    async def test_unchanged_target_is_not_sent(self, light_factory, mock_client, now):
        light = light_factory(last_commanded=TARGET)
        assert not await light.async_update(now, TARGET, TRANSITION)
        mock_client.async_update_light.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_error_keeps_previous_state(self, light_factory, mock_client, now):
        mock_client.async_update_light.side_effect = HueBridgeError("device unreachable")
        light = light_factory()
        with pytest.raises(HueBridgeError):
            await light.async_update(now, TARGET, TRANSITION)
        assert light.last_commanded == TargetState()
        assert light.last_command_time is None


@pytest.mark.asyncio
async def test_init_lights(mock_client, light_resource_factory):
    mock_client.async_get_lights.return_value = [
        light_resource_factory("light-1"),
        light_resource_factory("light-2", dimming=False),
    ]
    lights = await async_init_lights(mock_client)
    assert list(lights) == ["light-1", "light-2"]
    assert not lights["light-2"].has_brightness
    assert not any(light.managed for light in lights.values())


@pytest.mark.asyncio
async def test_init_lights_error_propagates(mock_client):
    mock_client.async_get_lights.side_effect = HueBridgeError("unauthorized user")
    with pytest.raises(HueBridgeError):
        await async_init_lights(mock_client)


class TestUpdateLights:
    @pytest.mark.asyncio
    async def test_only_managed_lights(self, light_factory, mock_client, now):
        lights = {
            "light-1": light_factory("light-1", managed=True),
            "light-2": light_factory("light-2", managed=False),
        }
        result = await async_update_lights(lights, now, TARGET, TRANSITION)
        assert result.successes == 1
        assert result.commands == 1
        mock_client.async_update_light.assert_awaited_once()
        assert lights["light-2"].last_commanded == TargetState()

    @pytest.mark.asyncio
    async def test_errors_do_not_stop_dispatch(self, light_factory, mock_client, now):
        mock_client.async_update_light.side_effect = [HueBridgeError("busy"), None]
        lights = {
            "light-1": light_factory("light-1", managed=True),
            "light-2": light_factory("light-2", managed=True),
        }
        result = await async_update_lights(lights, now, TARGET, TRANSITION)
        assert result.errors == 1
        assert result.successes == 1
        assert lights["light-1"].last_commanded == TargetState()
        assert lights["light-2"].last_commanded == TARGET
        assert lights["light-1"].managed
        assert lights["light-2"].managed

    @pytest.mark.asyncio
    async def test_second_pass_is_noop(self, light_factory, mock_client, now):
        lights = {"light-1": light_factory("light-1", managed=True)}
        await async_update_lights(lights, now, TARGET, TRANSITION)
        mock_client.async_update_light.reset_mock()

        result = await async_update_lights(lights, now, TARGET, TRANSITION)
        assert result.commands == 0
        assert result.skipped == 1
        mock_client.async_update_light.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_registry(self, now):
        result = await async_update_lights({}, now, TARGET, TRANSITION)
        assert result.commands == 0

    @pytest.mark.asyncio
    async def test_failed_light_retried_next_pass(self, light_factory, mock_client, now):
        mock_client.async_update_light.side_effect = [HueBridgeError("busy"), None]
        lights = {"light-1": light_factory("light-1", managed=True)}

        first = await async_update_lights(lights, now, TARGET, TRANSITION)
        second = await async_update_lights(lights, now, TARGET, TRANSITION)

        assert first.errors == 1
        assert second.successes == 1
        assert lights["light-1"].managed
        assert lights["light-1"].last_commanded == TARGET
