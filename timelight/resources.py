"""Partial resource updates carried by bridge events.

Full lights and scenes are aiohue models. Update events only carry the
fields that changed, so they are decoded into the small types below, which
keep "not reported" distinct from any reported value.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

from aiohue.v2.models.resource import ResourceTypes

from .exceptions import ResourceDecodeError

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LightUpdate:
    """Light fields reported by one event; ``None`` means not reported."""

    id: str
    on: bool | None = None
    brightness: float | None = None
    mirek: int | None = None
    # None when the event carried no color_temperature object at all.
    mirek_valid: bool | None = None

    type = ResourceTypes.LIGHT

    @property
    def has_color_temperature(self) -> bool:
        return self.mirek_valid is not None

    @property
    def color_temperature_valid(self) -> bool:
        return bool(self.mirek_valid) and self.mirek is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LightUpdate:
        try:
            on = data.get("on")
            dimming = data.get("dimming")
            color_temp = data.get("color_temperature")
            mirek = color_temp.get("mirek") if color_temp is not None else None
            return cls(
                id=data["id"],
                on=bool(on["on"]) if on is not None else None,
                brightness=float(dimming["brightness"]) if dimming is not None else None,
                mirek=int(mirek) if mirek is not None else None,
                mirek_valid=bool(color_temp.get("mirek_valid", False)) if color_temp is not None else None,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ResourceDecodeError(f"Invalid light update: {e!r}") from e


@dataclass(frozen=True)
class SceneUpdate:
    id: str
    # Present when the bridge reports the scene as recalled.
    status: str | None = None

    type = ResourceTypes.SCENE

    @property
    def has_status(self) -> bool:
        return self.status is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SceneUpdate:
        try:
            status = data.get("status")
            return cls(id=data["id"], status=str(status.get("active", "")) if status is not None else None)
        except (KeyError, TypeError, AttributeError) as e:
            raise ResourceDecodeError(f"Invalid scene update: {e!r}") from e


@dataclass(frozen=True)
class UnknownResource:
    """A resource of a type Timelight does not model."""

    type: str
    id: str | None = None


Resource = Union[LightUpdate, SceneUpdate, UnknownResource]

_DECODERS = {
    ResourceTypes.LIGHT.value: LightUpdate.from_dict,
    ResourceTypes.SCENE.value: SceneUpdate.from_dict,
}


def decode_resource(data: dict[str, Any]) -> Resource:
    """Decode an event resource, dispatching on its ``type`` field.

    Raises ResourceDecodeError when the type tag is missing or the payload of
    a known type is malformed. Unknown types decode to UnknownResource.
    """
    if not isinstance(data, dict):
        raise ResourceDecodeError(f"Resource is not an object: {data!r}")
    rtype = data.get("type")
    if rtype is None:
        raise ResourceDecodeError("Missing type field")
    if isinstance(rtype, ResourceTypes):
        rtype = rtype.value
    if not isinstance(rtype, str):
        raise ResourceDecodeError(f"Type field is not a string: {rtype!r}")

    decoder = _DECODERS.get(rtype)
    if decoder is None:
        _LOGGER.debug(f"Unknown resource type {rtype}")
        return UnknownResource(type=rtype, id=data.get("id"))
    return decoder(data)
