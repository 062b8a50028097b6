"""Data models for Timelight."""
from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class TargetState:
    """A partial light appearance.

    Either field may be ``None``, meaning the state has no goal for it. An
    absent field never compares equal to a present one.
    """

    brightness: float | None = None  # 0-100
    color_temp_mirek: int | None = None  # 153-500

    @property
    def has_brightness(self) -> bool:
        return self.brightness is not None

    @property
    def has_color_temp(self) -> bool:
        return self.color_temp_mirek is not None

    def with_brightness(self, brightness: float | None) -> TargetState:
        return replace(self, brightness=brightness)

    def with_color_temp(self, mirek: int | None) -> TargetState:
        return replace(self, color_temp_mirek=mirek)

    def restrict(self, has_brightness: bool, has_color_temperature: bool) -> TargetState:
        """Drop the goals a fixture cannot honour."""
        return TargetState(
            brightness=self.brightness if has_brightness else None,
            color_temp_mirek=self.color_temp_mirek if has_color_temperature else None,
        )

    def __str__(self) -> str:
        brightness = "N/A" if self.brightness is None else f"{self.brightness:g}"
        mirek = "N/A" if self.color_temp_mirek is None else str(self.color_temp_mirek)
        return f"brightness={brightness} temp_mirek={mirek}"


@dataclass
class UpdateResult:
    """Outcome of one dispatch pass over lights or scenes."""

    successes: int = 0
    errors: int = 0
    skipped: int = 0

    @property
    def commands(self) -> int:
        """Number of commands sent to the bridge."""
        return self.successes + self.errors
