"""
cfmap - Catalog discovery map layout engine.

Lays out a course catalog hierarchy as a force-directed node-link graph
and manages zoom and drill-down between scopes.

Key Components:
- core: Hierarchy building, projection, style resolution
- layout: Force solver, tick scheduler, viewport
- session: Scope orchestration for one interactive graph
- catalog: JSON unit feed as a data source

Usage:
    from cfmap import GraphSession, JsonCatalogSource, GroupingMode

    session = GraphSession(JsonCatalogSource(Path("units.json")))
    session.load(GroupingMode.FACULTY)
    session.run_until_settled()
    frame = session.frame()
"""

__version__ = "0.1.0"

from .catalog.source import DataUnavailable, JsonCatalogSource
from .core.hierarchy import MalformedHierarchy, build_hierarchy
from .core.types import GraphProperties, GroupingMode, HierarchicalNode, ZoomTier
from .layout.viewport import GestureDelta
from .session import GraphScope, GraphSession

__all__ = [
    "__version__",
    "DataUnavailable",
    "GestureDelta",
    "GraphProperties",
    "GraphScope",
    "GraphSession",
    "GroupingMode",
    "HierarchicalNode",
    "JsonCatalogSource",
    "MalformedHierarchy",
    "ZoomTier",
    "build_hierarchy",
]
