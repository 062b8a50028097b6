"""Exceptions raised by Timelight."""
from __future__ import annotations


class TimelightError(Exception):
    """Base class for Timelight errors."""


class ConfigError(TimelightError):
    """The configuration file is missing or invalid."""


class ResourceDecodeError(TimelightError):
    """A bridge resource payload could not be decoded."""


class HueBridgeError(TimelightError):
    """The bridge rejected a request or answered with an error."""

    def __init__(self, descriptions: list[str] | str) -> None:
        if isinstance(descriptions, str):
            descriptions = [descriptions]
        self.descriptions = list(descriptions)
        super().__init__("; ".join(self.descriptions) or "unknown bridge error")


class HueConnectionError(HueBridgeError):
    """The bridge could not be reached or did not answer in time."""
