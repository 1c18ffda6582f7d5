"""Force layout, tick scheduling and viewport handling."""

from .engine import ForceLayoutEngine, LayoutParameters, LayoutRun, LayoutState
from .scheduler import TickScheduler
from .viewport import GestureDelta, ViewportController

__all__ = [
    "ForceLayoutEngine",
    "GestureDelta",
    "LayoutParameters",
    "LayoutRun",
    "LayoutState",
    "TickScheduler",
    "ViewportController",
]
