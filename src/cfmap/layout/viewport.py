"""
Viewport Controller.

Computes the initial pan/zoom for a scope and folds interactive gestures
into the current transform. Transforms are plain values; attaching them to
a canvas is the renderer's job.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from ..core.interfaces import IGraphConfiguration
from ..core.projector import ProjectedNode
from ..core.types import GraphProperties, HierarchicalNode, ViewportTransform


@dataclass(frozen=True)
class GestureDelta:
    """
    A normalised pan/zoom gesture.

    dx/dy pan in screen pixels. scale_factor multiplies the current scale
    around (anchor_x, anchor_y) in screen space, the canvas centre if unset.
    """
    dx: float = 0.0
    dy: float = 0.0
    scale_factor: float = 1.0
    anchor_x: Optional[float] = None
    anchor_y: Optional[float] = None


def _finite(value: float, fallback: float) -> float:
    return value if math.isfinite(value) else fallback


class ViewportController:
    def __init__(self, properties: GraphProperties, configuration: IGraphConfiguration):
        self.properties = properties
        self.configuration = configuration
        self._transform = ViewportTransform(scale=properties.zoom.initial_scale)

    @property
    def transform(self) -> ViewportTransform:
        return self._transform

    def compute_initial_transform(
        self,
        nodes: Sequence[ProjectedNode],
        root_descendants: Sequence[HierarchicalNode],
    ) -> ViewportTransform:
        """
        Centre the layout origin on the canvas and pick a starting scale.

        The scale compares the scope's size with the full tree, so drilling
        into a small subtree opens closer in than the overview.
        """
        canvas = self.properties.canvas
        scale = self.configuration.calculate_initial_zoom(nodes, root_descendants)
        self._transform = ViewportTransform(
            translate_x=canvas.width / 2 + canvas.offset_x,
            translate_y=canvas.height / 2 + canvas.offset_y,
            scale=self.properties.zoom.clamp(scale),
        )
        return self._transform

    def apply_gesture(self, current: ViewportTransform, delta: GestureDelta) -> ViewportTransform:
        """Return `current` with the gesture applied, scale clamped to bounds."""
        canvas = self.properties.canvas
        factor = _finite(delta.scale_factor, 1.0)
        if factor <= 0:
            factor = 1.0

        scale = self.properties.zoom.clamp(current.scale * factor)
        ax = canvas.width / 2 if delta.anchor_x is None else _finite(delta.anchor_x, canvas.width / 2)
        ay = canvas.height / 2 if delta.anchor_y is None else _finite(delta.anchor_y, canvas.height / 2)

        # Keep the layout point under the anchor fixed while scaling.
        ratio = scale / current.scale
        tx = ax - (ax - current.translate_x) * ratio + _finite(delta.dx, 0.0)
        ty = ay - (ay - current.translate_y) * ratio + _finite(delta.dy, 0.0)
        return ViewportTransform(translate_x=tx, translate_y=ty, scale=scale)

    def handle_gesture(self, delta: GestureDelta) -> ViewportTransform:
        """Apply a gesture to the latest transform; gestures apply in arrival order."""
        self._transform = self.apply_gesture(self._transform, delta)
        return self._transform
