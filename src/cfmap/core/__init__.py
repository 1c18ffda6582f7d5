"""
cfmap Core Module.

Hierarchy & Projection:
    - HierarchicalNode: catalog tree node
    - build_hierarchy, HierarchyIndex: tree construction and validation
    - GraphProjector: subtree -> node/edge lists

Styling & Configuration:
    - GraphProperties: immutable visual/physics snapshot
    - StyleResolver: total per-tier style lookup
    - GraphConfiguration: default configuration collaborator
"""

from .configuration import GraphConfiguration
from .hierarchy import HierarchyIndex, MalformedHierarchy, build_hierarchy
from .projector import GraphProjector, ProjectedEdge, ProjectedGraph, ProjectedNode
from .result import Err, Ok, Result
from .style import StyleLookupMiss, StyleResolver
from .types import (
    GraphProperties,
    GroupingMode,
    HierarchicalNode,
    LayoutFrame,
    StructuralRole,
    ViewportTransform,
    ZoomTier,
)

__all__ = [
    "Err",
    "GraphConfiguration",
    "GraphProjector",
    "GraphProperties",
    "GroupingMode",
    "HierarchicalNode",
    "HierarchyIndex",
    "LayoutFrame",
    "MalformedHierarchy",
    "Ok",
    "ProjectedEdge",
    "ProjectedGraph",
    "ProjectedNode",
    "Result",
    "StructuralRole",
    "StyleLookupMiss",
    "StyleResolver",
    "ViewportTransform",
    "ZoomTier",
    "build_hierarchy",
]
