"""
Graph Session.

Orchestrates one interactive graph: it owns the originally loaded tree and
the current GraphScope, and wires

    Projector -> Style Resolver -> Force Layout Engine -> Viewport Controller

on every scope change. At most one layout run is active at a time; ticks
are queued on a TickScheduler tagged with their run's generation, so ticks
queued before a scope change do nothing when they fire.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

from .catalog.source import DataUnavailable
from .core.configuration import GraphConfiguration
from .core.hierarchy import HierarchyIndex, MalformedHierarchy
from .core.interfaces import IGraphConfiguration, IHierarchyDataSource
from .core.projector import GraphProjector, ProjectedGraph, ProjectedNode
from .core.result import Err, Ok, Result
from .core.style import StyleResolver
from .core.types import (
    EdgeFrame,
    GroupingMode,
    HierarchicalNode,
    LayoutFrame,
    LinkStyle,
    NodeFrame,
    NodeStyle,
    ViewportTransform,
    ZoomTier,
)
from .layout.engine import ForceLayoutEngine, LayoutParameters, LayoutRun, LayoutState
from .layout.scheduler import TickScheduler
from .layout.viewport import GestureDelta, ViewportController

logger = logging.getLogger(__name__)

ScopeError = Union[MalformedHierarchy, DataUnavailable]


@dataclass(frozen=True)
class GraphScope:
    """
    Everything that belongs to one scope. Replaced, never mutated, on
    scope change.
    """
    graph: ProjectedGraph
    tier: ZoomTier
    run: Optional[LayoutRun] = None
    node_styles: Dict[str, NodeStyle] = field(default_factory=dict)
    link_styles: Tuple[LinkStyle, ...] = ()

    @classmethod
    def empty(cls) -> "GraphScope":
        return cls(graph=ProjectedGraph.empty(), tier=ZoomTier.OVERVIEW)

    @property
    def root(self) -> Optional[HierarchicalNode]:
        return self.graph.root

    @property
    def generation(self) -> int:
        return self.run.generation if self.run is not None else 0


class GraphSession:
    def __init__(
        self,
        source: Optional[IHierarchyDataSource] = None,
        configuration: Optional[IGraphConfiguration] = None,
        scheduler: Optional[TickScheduler] = None,
        parameters: Optional[LayoutParameters] = None,
    ):
        self.source = source
        self.configuration = configuration or GraphConfiguration()
        self.scheduler = scheduler or TickScheduler()
        self.engine = ForceLayoutEngine(parameters)

        self.projector = GraphProjector(self.configuration)
        self._refresh_properties()

        self._original: Optional[HierarchicalNode] = None
        self._index: Optional[HierarchyIndex] = None
        self._scope = GraphScope.empty()
        self.last_error: Optional[ScopeError] = None
        self._disposed = False

    # --- State ---

    @property
    def scope(self) -> GraphScope:
        return self._scope

    @property
    def original_root(self) -> Optional[HierarchicalNode]:
        return self._original

    @property
    def transform(self) -> ViewportTransform:
        return self.viewport.transform

    @property
    def layout_state(self) -> LayoutState:
        run = self._scope.run
        return run.state if run is not None else LayoutState.IDLE

    # --- Loading ---

    def load(self, grouping_mode: GroupingMode) -> Result[GraphScope, ScopeError]:
        """Fetch a tree from the data source and show it in full."""
        if self.source is None:
            return self._fail_load(DataUnavailable(grouping_mode, "no data source configured"))
        try:
            root = self.source.get_hierarchical_data(grouping_mode)
        except (DataUnavailable, MalformedHierarchy) as e:
            return self._fail_load(e)
        return self.open(root)

    def open(self, root: HierarchicalNode) -> Result[GraphScope, ScopeError]:
        """Adopt `root` as the original tree and scope to it."""
        try:
            index = HierarchyIndex(root)
        except MalformedHierarchy as e:
            return self._fail_load(e)
        self._refresh_properties()
        self._original = root
        self._index = index
        return self.set_scope(root)

    def _refresh_properties(self) -> None:
        """Take a fresh properties snapshot for the tree about to be shown."""
        self.properties = self.configuration.get_graph_base_properties()
        self.resolver = StyleResolver(self.properties)
        self.viewport = ViewportController(self.properties, self.configuration)

    def _fail_load(self, error: ScopeError) -> Err:
        logger.error(f"Cannot load hierarchy: {error}")
        self.engine.cancel()
        self._original = None
        self._index = None
        self._scope = GraphScope.empty()
        self.last_error = error
        return Err(error)

    # --- Scope transitions ---

    def set_scope(self, root: HierarchicalNode) -> Result[GraphScope, ScopeError]:
        """
        Replace the current scope with the subtree at `root`.

        On a malformed subtree the current scope stays on screen and the
        error is returned.
        """
        if self._disposed:
            return Err(DataUnavailable("-", "session has been disposed"))

        try:
            graph = self.projector.project(root)
        except MalformedHierarchy as e:
            logger.error(f"Scope change to '{root.id}' rejected: {e}")
            self.last_error = e
            return Err(e)

        depth = self._index.depth(root.id) if self._index and self._index.contains(root) else 0
        tier = ZoomTier.for_depth(depth)

        node_styles = {node.id: self.resolver.node_style(node, tier) for node in graph.nodes}
        link_styles = tuple(self.resolver.link_style(edge, tier) for edge in graph.edges)

        self.engine.cancel()
        strength = self.configuration.calculate_force_strength(root)
        run = self.engine.start(graph.nodes, graph.edges, strength)

        self._scope = GraphScope(
            graph=graph,
            tier=tier,
            run=run,
            node_styles=node_styles,
            link_styles=link_styles,
        )
        full = self._original.descendants() if self._original is not None else root.descendants()
        self.viewport.compute_initial_transform(graph.nodes, full)
        self.last_error = None

        logger.debug(f"Scope set to '{root.id}' (tier={tier}, generation={run.generation})")
        self._schedule(run.generation)
        return Ok(self._scope)

    def on_node_activated(
        self, node: Union[HierarchicalNode, ProjectedNode, str]
    ) -> Result[GraphScope, ScopeError]:
        """Drill down into the activated node's subtree."""
        if isinstance(node, ProjectedNode):
            target = node.node
        elif isinstance(node, str):
            projected = self._scope.graph.get(node)
            if projected is None:
                logger.debug(f"Ignoring activation of unknown node '{node}'")
                return Ok(self._scope)
            target = projected.node
        else:
            target = node
        return self.set_scope(target)

    def reset_to_root(self) -> Result[GraphScope, ScopeError]:
        if self._original is None:
            return Ok(self._scope)
        return self.set_scope(self._original)

    # --- Ticking ---

    def _schedule(self, generation: int) -> None:
        self.scheduler.schedule(lambda: self._on_tick(generation))

    def _on_tick(self, generation: int) -> None:
        if not self.engine.tick(generation):
            return
        run = self.engine.active_run
        if run is not None and run.state == LayoutState.RUNNING:
            self._schedule(generation)

    def run_until_settled(self, max_frames: Optional[int] = None) -> LayoutState:
        """Pump the scheduler until the active run leaves RUNNING."""
        limit = max_frames if max_frames is not None else self.engine.parameters.max_ticks + 1
        self.scheduler.drain(limit)
        return self.layout_state

    def handle_gesture(self, delta: GestureDelta) -> ViewportTransform:
        return self.viewport.handle_gesture(delta)

    # --- Output ---

    def frame(self) -> LayoutFrame:
        """Snapshot of positions, styles and transform for the renderer."""
        scope = self._scope
        run = scope.run
        nodes = [
            NodeFrame(
                id=node.id,
                name=node.name,
                group=node.group,
                x=node.x,
                y=node.y,
                style=scope.node_styles[node.id],
            )
            for node in scope.graph.nodes
        ]
        edges = [
            EdgeFrame(
                source=edge.source.id,
                target=edge.target.id,
                x1=edge.source.x,
                y1=edge.source.y,
                x2=edge.target.x,
                y2=edge.target.y,
                style=style,
            )
            for edge, style in zip(scope.graph.edges, scope.link_styles)
        ]
        return LayoutFrame(
            generation=scope.generation,
            tick=run.tick_count if run is not None else 0,
            alpha=run.alpha if run is not None else 0.0,
            state=self.layout_state.value,
            tier=scope.tier,
            canvas=self.properties.canvas,
            transform=self.viewport.transform,
            nodes=nodes,
            edges=edges,
        )

    # --- Teardown ---

    def dispose(self) -> None:
        """Stop any active run and drop all scope state."""
        self.engine.cancel()
        self.scheduler.clear()
        self._scope = GraphScope.empty()
        self._original = None
        self._index = None
        self._disposed = True
