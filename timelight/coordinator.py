"""The Timelight reconciliation loop."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timedelta

from . import state_management
from .bridge import HueClient
from .config import TimelightConfig
from .const import EVENT_QUEUE_SIZE
from .events import Event, EventStream
from .light import TrackedLight, async_init_lights, async_update_lights
from .models import TargetState, UpdateResult
from .scene import TrackedScene, async_init_scenes, async_update_scenes

_LOGGER = logging.getLogger(__name__)


class Ticker:
    """Fires at a fixed period with a single pending slot.

    A firing that happens while the previous one has not been consumed is
    dropped, so a slow consumer skips ticks instead of running them back to
    back.
    """

    def __init__(self, interval: timedelta) -> None:
        self._interval = interval.total_seconds()
        self._fired = asyncio.Event()
        self._task: asyncio.Task | None = None
        self.skipped = 0

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._async_run())

    async def async_stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    def fire(self) -> None:
        if self._fired.is_set():
            self.skipped += 1
            _LOGGER.debug("Previous tick still pending, skipping tick")
            return
        self._fired.set()

    async def async_wait(self) -> None:
        """Wait for the next firing and consume it."""
        await self._fired.wait()
        self._fired.clear()

    async def _async_run(self) -> None:
        loop = asyncio.get_running_loop()
        next_fire = loop.time() + self._interval
        while True:
            await asyncio.sleep(max(0.0, next_fire - loop.time()))
            self.fire()
            next_fire += self._interval
            now = loop.time()
            if next_fire < now:
                # Lagging behind; realign instead of catching up.
                next_fire = now + self._interval


class Timelight:
    """Owns the light and scene registry and keeps it in step with the schedule.

    Events and ticks are handled one at a time by a single task, which is
    the only writer of the registry.
    """

    def __init__(
        self,
        client: HueClient,
        config: TimelightConfig,
        event_stream: EventStream | None = None,
    ) -> None:
        self._client = client
        self._config = config
        self._spec = config.spec
        self._event_stream = event_stream or EventStream(client)
        self.lights: dict[str, TrackedLight] = {}
        self.scenes: dict[str, TrackedScene] = {}

    async def async_init(self) -> None:
        """Connect, then load lights then scenes; any bridge error is fatal."""
        await self._client.async_connect()
        # Lights first: scenes resolve their targets against the light registry.
        self.lights = await async_init_lights(self._client)
        self.scenes = await async_init_scenes(self._client, self.lights)

    def target_state(self, now: datetime) -> TargetState:
        return self._spec.target_light_state(now)

    async def async_run_update(self, now: datetime | None = None) -> tuple[UpdateResult, UpdateResult]:
        """Push the current target to managed lights and to timelight scenes."""
        if now is None:
            now = datetime.now()
        target = self.target_state(now)
        light_result = await async_update_lights(
            self.lights, now, target, self._config.transition_duration
        )
        scene_result = await async_update_scenes(self.scenes, now, target)
        return light_result, scene_result

    def handle_event(self, event: Event, now: datetime | None = None) -> list[str]:
        """Apply an event to the registry; takes effect on the next update."""
        return state_management.handle_event(self.lights, self.scenes, event, now)

    async def async_run(self) -> None:
        """Initialize, then reconcile until cancelled."""
        _LOGGER.info("Starting Timelight")
        await self.async_init()

        queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=EVENT_QUEUE_SIZE)
        listener = asyncio.create_task(self._event_stream.async_listen(queue))
        ticker = Ticker(self._config.update_interval)
        ticker.start()
        try:
            await self.async_run_update()
            await self.async_process(queue, ticker)
        finally:
            await ticker.async_stop()
            listener.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await listener
            _LOGGER.info("Timelight stopped")

    async def async_process(self, queue: asyncio.Queue[Event], ticker: Ticker) -> None:
        """Handle events and ticks one at a time, forever."""
        while True:
            next_event = asyncio.ensure_future(queue.get())
            next_tick = asyncio.ensure_future(ticker.async_wait())
            try:
                done, _ = await asyncio.wait(
                    {next_event, next_tick}, return_when=asyncio.FIRST_COMPLETED
                )
            finally:
                for task in (next_event, next_tick):
                    if not task.done():
                        task.cancel()

            if next_event in done:
                self.handle_event(next_event.result())
            if next_tick in done:
                await self.async_run_update()
