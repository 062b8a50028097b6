"""Timelight: time-of-day brightness and color temperature for Hue lights."""
from .coordinator import Timelight
from .models import TargetState

__version__ = "0.1.0"

__all__ = ["TargetState", "Timelight", "__version__"]
