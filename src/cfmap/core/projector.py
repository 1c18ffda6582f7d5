"""
Graph Projector.

Flattens a scoped subtree into the node and edge lists the force layout
runs on. Nodes come out in pre-order (scope root first, children in
insertion order) so seeding and edge resolution are reproducible.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, FrozenSet, Optional, Set, Tuple

from .hierarchy import MalformedHierarchy
from .types import HierarchicalNode, StructuralRole

if TYPE_CHECKING:
    from .interfaces import IGraphConfiguration

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ProjectedNode:
    """
    A hierarchy node plus its simulation state.

    x/y/vx/vy belong to the layout run while it is active; everything else
    reads them only between ticks.
    """
    node: HierarchicalNode
    index: int
    depth: int
    role: StructuralRole
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def name(self) -> str:
        return self.node.name

    @property
    def group(self) -> str:
        return self.node.group


@dataclass(eq=False)
class ProjectedEdge:
    """Parent -> child spring with its target length and stiffness."""
    source: ProjectedNode
    target: ProjectedNode
    distance: float = 30.0
    strength: float = 1.0

    @property
    def key(self) -> Tuple[str, str]:
        return self.source.id, self.target.id


@dataclass(frozen=True)
class ProjectedGraph:
    """Nodes and edges for one scope. Recreated on every scope change."""
    root: Optional[HierarchicalNode]
    nodes: Tuple[ProjectedNode, ...] = ()
    edges: Tuple[ProjectedEdge, ...] = ()
    _by_id: Dict[str, ProjectedNode] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def empty(cls) -> "ProjectedGraph":
        return cls(root=None)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def get(self, node_id: str) -> Optional[ProjectedNode]:
        return self._by_id.get(node_id)

    def node_ids(self) -> FrozenSet[str]:
        return frozenset(self._by_id)

    def edge_keys(self) -> FrozenSet[Tuple[str, str]]:
        return frozenset(edge.key for edge in self.edges)


class GraphProjector:
    """
    Projects HierarchicalNode subtrees into ProjectedGraphs.

    When a configuration collaborator is supplied, each edge's distance and
    strength are asked of it as the edge is created.
    """

    def __init__(self, configuration: Optional["IGraphConfiguration"] = None):
        self.configuration = configuration

    def project(self, root: HierarchicalNode) -> ProjectedGraph:
        """
        Project the subtree rooted at `root`.

        Raises:
            MalformedHierarchy: If a node is reached twice (cycle or
                duplicate parentage) or two nodes share an id.
        """
        nodes = []
        by_id: Dict[str, ProjectedNode] = {}
        relations = []
        seen: Set[int] = set()

        stack = [(root, None, 0)]
        while stack:
            node, parent_id, depth = stack.pop()
            if id(node) in seen:
                raise MalformedHierarchy(node.id, f"reached twice (via '{parent_id}')")
            if node.id in by_id:
                raise MalformedHierarchy(node.id, "id is not unique within the scope")
            seen.add(id(node))

            if node is root:
                role = StructuralRole.ROOT
            elif node.children:
                role = StructuralRole.BRANCH
            else:
                role = StructuralRole.LEAF

            projected = ProjectedNode(node=node, index=len(nodes), depth=depth, role=role)
            nodes.append(projected)
            by_id[node.id] = projected
            if parent_id is not None:
                relations.append((parent_id, node.id))

            for child in reversed(node.children):
                stack.append((child, node.id, depth + 1))

        edges = []
        for source_id, target_id in relations:
            edge = ProjectedEdge(source=by_id[source_id], target=by_id[target_id])
            if self.configuration is not None:
                edge.distance = self.configuration.calculate_link_distance(edge)
                edge.strength = self.configuration.calculate_link_strength(edge)
            edges.append(edge)

        logger.debug(f"Projected scope '{root.id}': {len(nodes)} nodes, {len(edges)} edges")
        return ProjectedGraph(root=root, nodes=tuple(nodes), edges=tuple(edges), _by_id=by_id)
