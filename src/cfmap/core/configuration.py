"""
Default configuration collaborator.

Answers the physics and zoom questions the session asks, backed by a
GraphProperties snapshot. Every method is a pure query.
"""

import math
from pathlib import Path
from typing import Callable, Optional, Sequence

from .projector import ProjectedEdge, ProjectedNode
from .style import StyleResolver
from .types import GraphProperties, HierarchicalNode, StructuralRole


class GraphConfiguration:
    """
    Link distances/strengths, per-node charge and initial zoom.

    Charge grows with a node's fan-out so hub nodes push neighbours further
    away; the initial zoom grows as the scope shrinks relative to the full
    tree so drill-downs open closer in.
    """

    def __init__(self, properties: Optional[GraphProperties] = None):
        self._properties = properties or GraphProperties()
        self._resolver = StyleResolver(self._properties)

    @classmethod
    def from_file(cls, path: Path) -> "GraphConfiguration":
        return cls(GraphProperties.load(path))

    def get_graph_base_properties(self) -> GraphProperties:
        return self._properties

    def calculate_link_distance(self, edge: ProjectedEdge) -> float:
        return self._resolver.link_distance(edge)

    def calculate_link_strength(self, edge: ProjectedEdge) -> float:
        return self._resolver.link_strength(edge)

    def calculate_force_strength(
        self, scope_root: HierarchicalNode
    ) -> Callable[[ProjectedNode], float]:
        resolver = self._resolver

        def strength(node: ProjectedNode) -> float:
            role = StructuralRole.ROOT if node.node is scope_root else node.role
            return resolver.charge(role) * math.sqrt(1 + len(node.node.children))

        return strength

    def calculate_initial_zoom(
        self,
        nodes: Sequence[ProjectedNode],
        full_descendants: Sequence[HierarchicalNode],
    ) -> float:
        zoom = self._properties.zoom
        if not nodes or not full_descendants:
            return zoom.clamp(zoom.initial_scale)
        ratio = len(full_descendants) / len(nodes)
        return zoom.clamp(zoom.initial_scale * ratio ** 0.25)
