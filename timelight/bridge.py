"""Client for the Hue bridge, built on aiohue's CLIP v2 bridge."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

import aiohttp
from aiohue.errors import AiohueException
from aiohue.v2 import HueBridgeV2
from aiohue.v2.controllers.events import EventType
from aiohue.v2.models.light import Light
from aiohue.v2.models.resource import ResourceTypes
from aiohue.v2.models.scene import Action, Scene, ScenePut

from .exceptions import HueBridgeError, HueConnectionError

_LOGGER = logging.getLogger(__name__)

BridgeEventCallback = Callable[[EventType, "dict[str, Any] | None"], None]


class HueClient:
    """Queries and commands lights and scenes on one bridge.

    Wraps aiohue errors into HueBridgeError and transport failures into
    HueConnectionError.
    """

    def __init__(self, addr: str, app_key: str, bridge: HueBridgeV2 | None = None) -> None:
        self.addr = addr
        self._bridge = bridge or HueBridgeV2(addr, app_key)

    @property
    def bridge(self) -> HueBridgeV2:
        return self._bridge

    async def _call(self, description: str, coro) -> Any:
        try:
            return await coro
        except AiohueException as e:
            _LOGGER.error(f"Request error for {description}: {e}")
            raise HueBridgeError(str(e) or type(e).__name__) from e
        except aiohttp.ClientError as e:
            raise HueConnectionError(f"{description} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise HueConnectionError(f"{description} timed out") from e

    async def async_connect(self) -> None:
        """Load the bridge state and start its event stream."""
        _LOGGER.info(f"Connecting to bridge at {self.addr}")
        await self._call(f"initialize bridge {self.addr}", self._bridge.initialize())

    async def async_close(self) -> None:
        await self._bridge.close()

    async def async_get_lights(self) -> list[Light]:
        return list(self._bridge.lights.items)

    async def async_get_scenes(self) -> list[Scene]:
        return list(self._bridge.scenes.scene.items)

    async def async_update_light(
        self,
        light_id: str,
        brightness: float | None = None,
        color_temp_mirek: int | None = None,
        transition_ms: int | None = None,
    ) -> None:
        """Set brightness and/or color temperature of a light."""
        await self._call(
            f"update light {light_id}",
            self._bridge.lights.set_state(
                light_id,
                brightness=brightness,
                color_temp=color_temp_mirek,
                transition_time=transition_ms,
            ),
        )

    async def async_update_scene(self, scene_id: str, actions: list[Action]) -> None:
        """Replace the action list of a scene."""
        await self._call(
            f"update scene {scene_id}",
            self._bridge.scenes.scene.update(scene_id, ScenePut(actions=actions)),
        )

    def subscribe(self, callback: BridgeEventCallback) -> Callable[[], None]:
        """Receive raw light and scene update payloads plus connection state events.

        Returns a function that cancels the subscription.
        """
        return self._bridge.events.subscribe(
            callback,
            event_filter=(
                EventType.RESOURCE_UPDATED,
                EventType.CONNECTED,
                EventType.DISCONNECTED,
                EventType.RECONNECTED,
            ),
            resource_filter=(ResourceTypes.LIGHT, ResourceTypes.SCENE),
        )
