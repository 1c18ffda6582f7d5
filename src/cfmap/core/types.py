"""
Core type definitions for cfmap.

Covers the three layers of data that flow through a graph session:
- Catalog hierarchy (HierarchicalNode) as handed over by the data source.
- Visual configuration (GraphProperties and its per-tier style tables).
- Render output (ViewportTransform, NodeStyle, LinkStyle, LayoutFrame).
"""

import tomllib
from enum import StrEnum
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class GroupingMode(StrEnum):
    """How raw catalog units are grouped beneath the catalog root."""
    FACULTY = "faculty"
    LEVEL = "level"


class ZoomTier(StrEnum):
    """
    Named buckets of visual style parameters.

    The tier is chosen from the depth of the current scope root inside the
    originally loaded tree. DEFAULT is the documented fallback tier.
    """
    OVERVIEW = "overview"
    DETAIL = "detail"
    FOCUS = "focus"
    DEFAULT = "default"

    @classmethod
    def for_depth(cls, depth: int) -> "ZoomTier":
        if depth <= 0:
            return cls.OVERVIEW
        if depth == 1:
            return cls.DETAIL
        return cls.FOCUS


class StructuralRole(StrEnum):
    """Position of a node within the projected scope."""
    ROOT = "root"
    BRANCH = "branch"
    LEAF = "leaf"


class HierarchicalNode(BaseModel):
    """
    A single entry of the catalog tree.

    `id` is unique within one tree snapshot only; drill-downs reuse the
    same node objects, so identity comparisons use `is`, not `==`.
    """
    id: str
    name: str
    description: str = ""
    group: str = ""
    children: List["HierarchicalNode"] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def iter_preorder(self) -> Iterator["HierarchicalNode"]:
        """Yield this node and its descendants, parents before children."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def descendants(self) -> List["HierarchicalNode"]:
        """All nodes of the subtree, including this one."""
        return list(self.iter_preorder())

    def count(self) -> int:
        return sum(1 for _ in self.iter_preorder())

    def find(self, node_id: str) -> Optional["HierarchicalNode"]:
        for node in self.iter_preorder():
            if node.id == node_id:
                return node
        return None


# --- Visual configuration ---

class CanvasProperties(BaseModel):
    """Canvas dimensions and the initial translation offsets."""
    width: float = 960.0
    height: float = 640.0
    color: str = "#0f172a"
    border_radius: str = "12px"
    offset_x: float = 0.0
    offset_y: float = 0.0

    model_config = ConfigDict(frozen=True)


class ZoomProperties(BaseModel):
    initial_scale: float = Field(default=1.0, gt=0)
    min_scale: float = Field(default=0.1, gt=0)
    max_scale: float = Field(default=8.0, gt=0)

    model_config = ConfigDict(frozen=True)

    def clamp(self, scale: float) -> float:
        return max(self.min_scale, min(self.max_scale, scale))


class ForceProperties(BaseModel):
    """
    Physics tables keyed by structural role ("root", "branch", "leaf").

    Link tables are keyed by the role of the edge's target node.
    Every table may carry a "default" entry.
    """
    link_distance: Dict[str, float] = Field(default_factory=lambda: {
        "branch": 110.0,
        "leaf": 50.0,
        "default": 70.0,
    })
    link_strength: Dict[str, float] = Field(default_factory=lambda: {
        "branch": 0.6,
        "leaf": 1.0,
        "default": 0.8,
    })
    many_body_strength: Dict[str, float] = Field(default_factory=lambda: {
        "root": -400.0,
        "branch": -220.0,
        "leaf": -40.0,
        "default": -100.0,
    })

    model_config = ConfigDict(frozen=True)


class ZoomTierStyle(BaseModel):
    """
    Style tables for one zoom tier.

    Node tables are keyed by structural role, `node_color` additionally by
    the node's group label. Link tables are keyed by the target's role.
    Absent keys fall through to the table's "default" entry and then to the
    DEFAULT tier.
    """
    link_width: Dict[str, float] = Field(default_factory=dict)
    link_opacity: Dict[str, float] = Field(default_factory=dict)
    link_color: Dict[str, str] = Field(default_factory=dict)
    node_radius: Dict[str, float] = Field(default_factory=dict)
    node_color: Dict[str, str] = Field(default_factory=dict)
    text_color: Dict[str, str] = Field(default_factory=dict)
    text_font_size: Dict[str, float] = Field(default_factory=dict)
    text_font_weight: Dict[str, int] = Field(default_factory=dict)
    text_x_offset: Dict[str, float] = Field(default_factory=dict)
    text_y_offset: Dict[str, float] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


def default_tiers() -> Dict[ZoomTier, ZoomTierStyle]:
    """
    Built-in tier tables.

    Each named tier starts from the DEFAULT tables and replaces whole tables,
    so every built-in tier resolves without leaving its own tables.
    """
    base = ZoomTierStyle(
        link_width={"branch": 2.0, "default": 1.0},
        link_opacity={"default": 0.6},
        link_color={"default": "#64748b"},
        node_radius={"root": 24.0, "branch": 14.0, "default": 6.0},
        node_color={"catalog": "#f8fafc", "faculty": "#38bdf8", "level": "#a78bfa", "default": "#94a3b8"},
        text_color={"default": "#e2e8f0"},
        text_font_size={"root": 16.0, "branch": 12.0, "default": 9.0},
        text_font_weight={"root": 700, "branch": 600, "default": 400},
        text_x_offset={"default": 10.0},
        text_y_offset={"default": 4.0},
    )
    return {
        ZoomTier.DEFAULT: base,
        ZoomTier.OVERVIEW: base.model_copy(update={
            "link_width": {"branch": 3.0, "leaf": 0.8, "default": 1.0},
            "link_opacity": {"branch": 0.8, "leaf": 0.35, "default": 0.6},
            "node_radius": {"root": 30.0, "branch": 16.0, "leaf": 4.0, "default": 6.0},
            "text_font_size": {"root": 18.0, "branch": 13.0, "leaf": 0.0, "default": 9.0},
        }),
        ZoomTier.DETAIL: base.model_copy(update={
            "link_width": {"default": 1.5},
            "link_opacity": {"default": 0.7},
            "node_radius": {"root": 26.0, "branch": 12.0, "leaf": 8.0, "default": 8.0},
            "text_font_size": {"root": 16.0, "branch": 12.0, "leaf": 10.0, "default": 10.0},
        }),
        ZoomTier.FOCUS: base.model_copy(update={
            "link_width": {"default": 2.0},
            "node_radius": {"root": 28.0, "default": 12.0},
            "text_font_size": {"root": 18.0, "default": 12.0},
            "text_font_weight": {"default": 600},
        }),
    }


class GraphProperties(BaseModel):
    """
    Immutable configuration snapshot for one session scope.

    Never mutated by the layout core; load a new snapshot instead.
    """
    canvas: CanvasProperties = Field(default_factory=CanvasProperties)
    zoom: ZoomProperties = Field(default_factory=ZoomProperties)
    forces: ForceProperties = Field(default_factory=ForceProperties)
    tiers: Dict[ZoomTier, ZoomTierStyle] = Field(default_factory=default_tiers)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def load(cls, path: Path) -> "GraphProperties":
        """
        Load graph properties from a TOML file.

        Returns the built-in defaults if the file does not exist.

        Raises:
            ValueError: If the TOML is malformed or fails validation.
        """
        if not path.exists():
            return cls()

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except Exception as e:
            raise ValueError(f"Failed to parse {path}: {e}")

        tiers = default_tiers()
        overrides = data.get("tiers", {})
        if not isinstance(overrides, dict):
            raise ValueError(f"[tiers] in {path} must be a table")
        for tier_name, table in overrides.items():
            try:
                tier = ZoomTier(tier_name)
            except ValueError:
                raise ValueError(f"Unknown zoom tier in {path}: {tier_name}")
            if not isinstance(table, dict):
                raise ValueError(f"Tier '{tier_name}' in {path} must be a table")
            merged = tiers.get(tier, ZoomTierStyle()).model_dump()
            for attribute, values in table.items():
                if not isinstance(values, dict):
                    raise ValueError(
                        f"{path}: tiers.{tier_name}.{attribute} must be a table keyed by role or group"
                    )
                merged[attribute] = {**merged.get(attribute, {}), **values}
            tiers[tier] = ZoomTierStyle.model_validate(merged)

        return cls.model_validate({
            "canvas": data.get("canvas", {}),
            "zoom": data.get("zoom", {}),
            "forces": data.get("forces", {}),
            "tiers": tiers,
        })


# --- Render output ---

class ViewportTransform(BaseModel):
    """Pan/zoom transform applied to the whole rendered graph."""
    translate_x: float = 0.0
    translate_y: float = 0.0
    scale: float = Field(default=1.0, gt=0)

    model_config = ConfigDict(frozen=True)

    def apply(self, x: float, y: float) -> tuple[float, float]:
        """Map layout coordinates to screen coordinates."""
        return x * self.scale + self.translate_x, y * self.scale + self.translate_y

    def invert(self, sx: float, sy: float) -> tuple[float, float]:
        """Map screen coordinates back to layout coordinates."""
        return (sx - self.translate_x) / self.scale, (sy - self.translate_y) / self.scale


class NodeStyle(BaseModel):
    radius: float
    fill: str
    label_color: str
    font_size: float
    font_weight: int
    label_dx: float
    label_dy: float

    model_config = ConfigDict(frozen=True)


class LinkStyle(BaseModel):
    stroke: str
    stroke_width: float
    opacity: float

    model_config = ConfigDict(frozen=True)


class NodeFrame(BaseModel):
    id: str
    name: str
    group: str
    x: float
    y: float
    style: NodeStyle


class EdgeFrame(BaseModel):
    source: str
    target: str
    x1: float
    y1: float
    x2: float
    y2: float
    style: LinkStyle


class LayoutFrame(BaseModel):
    """
    Read-only snapshot handed to the renderer between ticks.
    """
    generation: int
    tick: int
    alpha: float
    state: str
    tier: ZoomTier
    canvas: CanvasProperties
    transform: ViewportTransform
    nodes: List[NodeFrame] = Field(default_factory=list)
    edges: List[EdgeFrame] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
