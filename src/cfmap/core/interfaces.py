"""
Collaborator interfaces consumed by the layout core.

The core only reads through these; it never mutates what they return.
"""

from typing import TYPE_CHECKING, Callable, Protocol, Sequence

from .types import GraphProperties, GroupingMode, HierarchicalNode

if TYPE_CHECKING:
    from .projector import ProjectedEdge, ProjectedNode


class IHierarchyDataSource(Protocol):
    """Supplies catalog trees. Raises DataUnavailable for unknown modes."""

    def get_hierarchical_data(self, grouping_mode: GroupingMode) -> HierarchicalNode:
        ...


class IGraphConfiguration(Protocol):
    """Read-only access to visual properties and physics parameters."""

    def get_graph_base_properties(self) -> GraphProperties:
        ...

    def calculate_link_distance(self, edge: "ProjectedEdge") -> float:
        ...

    def calculate_link_strength(self, edge: "ProjectedEdge") -> float:
        ...

    def calculate_force_strength(
        self, scope_root: HierarchicalNode
    ) -> Callable[["ProjectedNode"], float]:
        ...

    def calculate_initial_zoom(
        self,
        nodes: Sequence["ProjectedNode"],
        full_descendants: Sequence[HierarchicalNode],
    ) -> float:
        ...
