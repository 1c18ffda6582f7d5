"""
Style Resolver.

Maps projected nodes and edges to visual attributes using the per-tier
tables in GraphProperties. Resolution is total:

    requested tier[key] -> requested tier["default"]
        -> DEFAULT tier[key] -> DEFAULT tier["default"] -> built-in value

Falling past the requested tier is a StyleLookupMiss. Misses are recorded
and logged at WARNING once per (tier, attribute, key); they never raise.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Set, Tuple

from .projector import ProjectedEdge, ProjectedNode
from .types import (
    ForceProperties,
    GraphProperties,
    LinkStyle,
    NodeStyle,
    StructuralRole,
    ZoomTier,
    ZoomTierStyle,
)

logger = logging.getLogger(__name__)

# Last-resort values, used only when the DEFAULT tier lacks an attribute.
BUILTIN_STYLE: Dict[str, Any] = {
    "link_width": 1.0,
    "link_opacity": 0.6,
    "link_color": "#999999",
    "node_radius": 6.0,
    "node_color": "#cccccc",
    "text_color": "#ffffff",
    "text_font_size": 10.0,
    "text_font_weight": 400,
    "text_x_offset": 8.0,
    "text_y_offset": 4.0,
}

BUILTIN_FORCES = ForceProperties()


@dataclass(frozen=True)
class StyleLookupMiss:
    """A style lookup that had to leave its requested tier."""
    tier: ZoomTier
    attribute: str
    keys: Tuple[str, ...]
    resolved_from: str


class StyleResolver:
    """
    Pure mapping from (node or edge, tier) to visual attributes.

    The only state is the miss log, which does not influence output:
    identical inputs always resolve to identical styles.
    """

    def __init__(self, properties: GraphProperties):
        self.properties = properties
        self.misses: List[StyleLookupMiss] = []
        self._reported: Set[Tuple[ZoomTier, str, Tuple[str, ...]]] = set()

    def lookup(self, tier: ZoomTier, attribute: str, keys: Sequence[str]) -> Any:
        """Resolve one attribute through the fallback chain."""
        keys = tuple(keys)
        table = self._table(tier, attribute)
        value = self._pick(table, keys)
        if value is not None:
            return value

        value = self._pick(self._table(ZoomTier.DEFAULT, attribute), keys)
        source = f"{ZoomTier.DEFAULT.value} tier"
        if value is None:
            value = BUILTIN_STYLE[attribute]
            source = "built-in default"

        self._record(StyleLookupMiss(tier, attribute, keys, source))
        return value

    def node_style(self, node: ProjectedNode, tier: ZoomTier) -> NodeStyle:
        role = node.role.value
        return NodeStyle(
            radius=float(self.lookup(tier, "node_radius", [role])),
            fill=str(self.lookup(tier, "node_color", [node.group, role] if node.group else [role])),
            label_color=str(self.lookup(tier, "text_color", [role])),
            font_size=float(self.lookup(tier, "text_font_size", [role])),
            font_weight=int(self.lookup(tier, "text_font_weight", [role])),
            label_dx=float(self.lookup(tier, "text_x_offset", [role])),
            label_dy=float(self.lookup(tier, "text_y_offset", [role])),
        )

    def link_style(self, edge: ProjectedEdge, tier: ZoomTier) -> LinkStyle:
        role = edge.target.role.value
        return LinkStyle(
            stroke=str(self.lookup(tier, "link_color", [role])),
            stroke_width=float(self.lookup(tier, "link_width", [role])),
            opacity=float(self.lookup(tier, "link_opacity", [role])),
        )

    # --- Physics tables ---

    def link_distance(self, edge: ProjectedEdge) -> float:
        return self._force("link_distance", edge.target.role)

    def link_strength(self, edge: ProjectedEdge) -> float:
        return self._force("link_strength", edge.target.role)

    def charge(self, role: StructuralRole) -> float:
        return self._force("many_body_strength", role)

    def _force(self, table_name: str, role: StructuralRole) -> float:
        table = getattr(self.properties.forces, table_name)
        value = self._pick(table, (role.value,))
        if value is None:
            value = self._pick(getattr(BUILTIN_FORCES, table_name), (role.value,))
        return float(value)

    # --- Internals ---

    def _table(self, tier: ZoomTier, attribute: str) -> Dict[str, Any]:
        style: ZoomTierStyle | None = self.properties.tiers.get(tier)
        if style is None:
            return {}
        return getattr(style, attribute)

    @staticmethod
    def _pick(table: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
        for key in keys:
            if key in table:
                return table[key]
        return table.get("default")

    def _record(self, miss: StyleLookupMiss) -> None:
        marker = (miss.tier, miss.attribute, miss.keys)
        if marker in self._reported:
            return
        self._reported.add(marker)
        self.misses.append(miss)
        logger.warning(
            f"Style lookup miss: tier={miss.tier.value} attribute={miss.attribute} "
            f"keys={list(miss.keys)} -> {miss.resolved_from}"
        )
