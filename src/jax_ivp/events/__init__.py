"""Event handling: switching functions, settings and the root-bracketing detector."""

from .detector import DetectorStatus, EventDetector, EventOccurrence, EventState
from .handler import Action, EventHandler, SwitchingFunction
from .settings import EventSettings

__all__ = [
    "Action",
    "EventHandler",
    "SwitchingFunction",
    "EventSettings",
    "EventDetector",
    "EventOccurrence",
    "EventState",
    "DetectorStatus",
]
