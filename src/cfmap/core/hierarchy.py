"""
Hierarchy Builder.

Turns raw catalog data into a single-rooted HierarchicalNode tree and
indexes it for lookups. Accepted inputs:
- Nested records: {"id", "name", ..., "children": [...]}
- Flat parent-pointer records: [{"id", "name", ..., "parent": "<id>|None"}, ...]
- An already constructed HierarchicalNode (validated only).

The tree is mirrored into a rustworkx PyDiGraph (parent -> child) so that
duplicate parentage, cycles and unreachable records are detected with the
same graph primitives used for traversal.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

import rustworkx as rx

from .. import config
from .types import HierarchicalNode

logger = logging.getLogger(__name__)


class MalformedHierarchy(Exception):
    """
    Raised when catalog data does not form a strict tree.

    Attributes:
        node_id: The record at which the problem was detected.
        message: Human-readable description.
    """

    def __init__(self, node_id: str, message: str):
        self.node_id = node_id
        self.message = message
        super().__init__(f"Malformed hierarchy at '{node_id}': {message}")


class HierarchyIndex:
    """
    Validated index over one tree snapshot.

    Maintains the bimap between string node IDs and rustworkx indices,
    plus per-node depth and parent links.
    """

    def __init__(self, root: HierarchicalNode):
        self._root = root
        self._graph = rx.PyDiGraph(multigraph=False)
        self._id_to_idx: Dict[str, int] = {}
        self._depth: Dict[str, int] = {}
        self._parent: Dict[str, Optional[str]] = {}
        self._index(root)

    def _index(self, root: HierarchicalNode) -> None:
        self._add(root, parent=None, depth=0)
        on_path: Set[int] = {id(root)}
        # (node, child iterator) frames keep ancestry explicit for cycle checks
        stack = [(root, iter(root.children))]

        while stack:
            parent, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                on_path.discard(id(parent))
                continue

            if id(child) in on_path:
                raise MalformedHierarchy(child.id, f"cycle through '{parent.id}'")
            if child.id in self._id_to_idx:
                raise MalformedHierarchy(
                    child.id,
                    f"listed under '{parent.id}' but already placed under "
                    f"'{self._parent.get(child.id)}'",
                )

            depth = self._depth[parent.id] + 1
            if depth > config.MAX_HIERARCHY_DEPTH:
                raise MalformedHierarchy(child.id, f"depth exceeds {config.MAX_HIERARCHY_DEPTH}")

            self._add(child, parent=parent, depth=depth)
            on_path.add(id(child))
            stack.append((child, iter(child.children)))

    def _add(self, node: HierarchicalNode, parent: Optional[HierarchicalNode], depth: int) -> None:
        idx = self._graph.add_node(node)
        self._id_to_idx[node.id] = idx
        self._depth[node.id] = depth
        self._parent[node.id] = parent.id if parent is not None else None
        if parent is not None:
            self._graph.add_edge(self._id_to_idx[parent.id], idx, None)

    @property
    def root(self) -> HierarchicalNode:
        return self._root

    @property
    def node_count(self) -> int:
        return self._graph.num_nodes()

    def get_node(self, node_id: str) -> Optional[HierarchicalNode]:
        idx = self._id_to_idx.get(node_id)
        if idx is None:
            return None
        return self._graph[idx]

    def has_node(self, node_id: str) -> bool:
        return node_id in self._id_to_idx

    def contains(self, node: HierarchicalNode) -> bool:
        """True if this exact node object belongs to the indexed snapshot."""
        return self.get_node(node.id) is node

    def depth(self, node_id: str) -> int:
        return self._depth.get(node_id, 0)

    def parent_id(self, node_id: str) -> Optional[str]:
        return self._parent.get(node_id)

    def descendant_ids(self, node_id: str) -> Set[str]:
        """IDs of the subtree rooted at node_id, including node_id itself."""
        idx = self._id_to_idx.get(node_id)
        if idx is None:
            return set()
        found = {self._graph[i].id for i in rx.descendants(self._graph, idx)}
        found.add(node_id)
        return found

    def ancestor_ids(self, node_id: str) -> List[str]:
        """Path from the root down to (excluding) node_id."""
        path = []
        current = self._parent.get(node_id)
        while current is not None:
            path.append(current)
            current = self._parent.get(current)
        return list(reversed(path))


def _from_nested(data: Mapping[str, Any]) -> HierarchicalNode:
    try:
        return HierarchicalNode.model_validate(data)
    except ValueError as e:
        raise MalformedHierarchy(str(data.get("id", "?")), f"invalid record: {e}")


def _from_records(records: List[Mapping[str, Any]]) -> HierarchicalNode:
    graph = rx.PyDiGraph(multigraph=False)
    id_to_idx: Dict[str, int] = {}
    parents: Dict[str, Optional[str]] = {}

    for record in records:
        node_id = record.get("id")
        if node_id is None:
            raise MalformedHierarchy("?", f"record without id: {dict(record)}")
        node_id = str(node_id)
        if node_id in id_to_idx:
            raise MalformedHierarchy(node_id, "record appears more than once")
        fields = {k: v for k, v in record.items() if k not in ("parent", "children")}
        try:
            node = HierarchicalNode.model_validate({**fields, "id": node_id, "children": []})
        except ValueError as e:
            raise MalformedHierarchy(node_id, f"invalid record: {e}")
        id_to_idx[node_id] = graph.add_node(node)
        parent = record.get("parent")
        parents[node_id] = str(parent) if parent is not None else None

    roots = [node_id for node_id, parent in parents.items() if parent is None]
    if len(roots) != 1:
        raise MalformedHierarchy(
            roots[1] if len(roots) > 1 else "?",
            f"expected exactly one root record, found {len(roots)}",
        )

    for node_id, parent in parents.items():
        if parent is None:
            continue
        if parent not in id_to_idx:
            raise MalformedHierarchy(node_id, f"unknown parent '{parent}'")
        graph.add_edge(id_to_idx[parent], id_to_idx[node_id], None)

    if not rx.is_directed_acyclic_graph(graph):
        cycle = rx.digraph_find_cycle(graph)
        at = graph[cycle[0][0]].id if len(cycle) else "?"
        raise MalformedHierarchy(at, "parent links form a cycle")

    root_idx = id_to_idx[roots[0]]
    reachable = rx.descendants(graph, root_idx)
    if len(reachable) + 1 != graph.num_nodes():
        orphan = next(n for n, i in id_to_idx.items() if i != root_idx and i not in reachable)
        raise MalformedHierarchy(orphan, "record is not reachable from the root")

    # Successors come back in arbitrary order; rebuild children in record order.
    for node_id, parent in parents.items():
        if parent is not None:
            graph[id_to_idx[parent]].children.append(graph[id_to_idx[node_id]])

    return graph[root_idx]


def build_hierarchy(
    data: Union[HierarchicalNode, Mapping[str, Any], Iterable[Mapping[str, Any]]],
) -> HierarchicalNode:
    """
    Build and validate a catalog tree.

    Args:
        data: Nested root record, flat parent-pointer records, or a tree.

    Returns:
        The root HierarchicalNode.

    Raises:
        MalformedHierarchy: On cycles, duplicate parentage, missing or
            multiple roots, or records that fail validation.
    """
    if isinstance(data, HierarchicalNode):
        root = data
    elif isinstance(data, Mapping):
        root = _from_nested(data)
    else:
        root = _from_records(list(data))

    index = HierarchyIndex(root)
    logger.debug(f"Built hierarchy '{root.id}' with {index.node_count} nodes")
    return root
