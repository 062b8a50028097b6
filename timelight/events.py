"""Bridge events: decoding, filtering and the listener that feeds the reconciliation loop."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable

from aiohue.v2.controllers.events import EventType

from .const import EVENT_RETRY_DELAY, EVENT_TYPE_UPDATE
from .exceptions import ResourceDecodeError
from .resources import LightUpdate, Resource, SceneUpdate, UnknownResource, decode_resource

if TYPE_CHECKING:
    from .bridge import HueClient

_LOGGER = logging.getLogger(__name__)


@dataclass
class Event:
    """A decoded bridge event."""

    type: str
    data: list[Resource] = field(default_factory=list)
    creation_time: datetime | None = None
    id: str | None = None


EventFilter = Callable[[Event], bool]


def filter_event(event: Event) -> bool:
    """Keep update events that concern lights or scenes."""
    if event.type != EVENT_TYPE_UPDATE:
        return False
    return any(isinstance(r, (LightUpdate, SceneUpdate)) for r in event.data)


def _event_type_value(event_type: EventType | str) -> str:
    return event_type.value if isinstance(event_type, EventType) else str(event_type)


def decode_event(event_type: EventType | str, items: list[Any], now: datetime | None = None) -> Event:
    """Decode the resources of one bridge event.

    Resources of unknown type are skipped and malformed resources are dropped
    with an error; the remaining resources are kept.
    """
    event = Event(type=_event_type_value(event_type), creation_time=now or datetime.now())
    for item in items:
        try:
            resource = decode_resource(item)
        except ResourceDecodeError as e:
            _LOGGER.error(f"Dropping resource of {event.type} event: {e}")
            continue
        if isinstance(resource, UnknownResource):
            _LOGGER.debug(f"Skipping {resource.type} resource of {event.type} event")
            continue
        if event.id is None:
            event.id = resource.id
        event.data.append(resource)
    return event


class EventStream:
    """Forwards matching bridge events to the reconciliation queue.

    aiohue owns the connection to the bridge and reconnects it on its own.
    Events it delivers are buffered here until the queue has room, so a full
    queue blocks the forwarder rather than dropping events.
    """

    def __init__(
        self,
        client: HueClient,
        event_filter: EventFilter = filter_event,
        retry_delay: float = EVENT_RETRY_DELAY,
    ) -> None:
        self._client = client
        self._filter = event_filter
        self._retry_delay = retry_delay
        self._pending: asyncio.Queue[Event] = asyncio.Queue()

    def _handle_bridge_event(self, event_type: EventType, data: dict[str, Any] | None) -> None:
        if data is None:
            if event_type == EventType.DISCONNECTED:
                _LOGGER.warning("Bridge event stream disconnected, waiting for reconnect")
            else:
                _LOGGER.info(f"Bridge event stream {_event_type_value(event_type)}")
            return

        try:
            event = decode_event(event_type, [data])
        except Exception:
            _LOGGER.error(f"Unexpected error while decoding bridge event {data!r}", exc_info=True)
            return

        if not event.data or not self._filter(event):
            return
        self._pending.put_nowait(event)

    async def async_listen(self, queue: asyncio.Queue[Event]) -> None:
        """Run until cancelled."""
        while True:
            try:
                await self.async_listen_once(queue)
            except Exception as e:
                _LOGGER.error(
                    f"Error while listening for events: {e!r}. Retrying in {self._retry_delay}s",
                    exc_info=True,
                )
            await asyncio.sleep(self._retry_delay)

    async def async_listen_once(self, queue: asyncio.Queue[Event]) -> None:
        """Subscribe to the bridge and forward events until cancelled or failed."""
        unsubscribe = self._client.subscribe(self._handle_bridge_event)
        _LOGGER.info("Listening for bridge events")
        try:
            while True:
                event = await self._pending.get()
                # Blocks while the queue is full.
                await queue.put(event)
        finally:
            unsubscribe()
