"""
Barnes-Hut quadtree for the many-body force.

A cell that is far enough away, relative to its width, acts on a node as a
single charge placed at its charge-weighted centre. Nearer cells are
opened, and leaves are summed pair by pair. Built fresh every tick from the
positions at the start of the tick.
"""

import math
from typing import Callable, List, Optional, Sequence

from ..core.projector import ProjectedNode

# Coincident nodes never separate; stop splitting at this depth.
MAX_DEPTH = 32


class QuadCell:
    __slots__ = ("width", "children", "members", "charge", "x", "y")

    def __init__(self, width: float):
        self.width = width
        self.children: List["QuadCell"] = []
        self.members: List[int] = []
        self.charge = 0.0
        self.x = 0.0
        self.y = 0.0


class ChargeTree:
    """
    Quadtree over one tick's node positions and per-node charges.
    """

    def __init__(self, nodes: Sequence[ProjectedNode], charges: Sequence[float]):
        self.nodes = nodes
        self.charges = charges
        self.root: Optional[QuadCell] = self._build()

    def _build(self) -> Optional[QuadCell]:
        if not self.nodes:
            return None
        xs = [node.x for node in self.nodes]
        ys = [node.y for node in self.nodes]
        x0, y0 = min(xs), min(ys)
        size = max(max(xs) - x0, max(ys) - y0) or 1.0
        return self._cell(list(range(len(self.nodes))), x0, y0, size, 0)

    def _cell(self, members: List[int], x0: float, y0: float, size: float, depth: int) -> QuadCell:
        cell = QuadCell(size)
        if len(members) == 1 or depth >= MAX_DEPTH:
            cell.members = members
        else:
            half = size / 2
            mx, my = x0 + half, y0 + half
            quadrants: List[List[int]] = [[], [], [], []]
            for i in members:
                node = self.nodes[i]
                quadrants[(node.x >= mx) + 2 * (node.y >= my)].append(i)
            for q, part in enumerate(quadrants):
                if part:
                    cell.children.append(
                        self._cell(part, x0 + half * (q & 1), y0 + half * (q >> 1), half, depth + 1)
                    )
        self._accumulate(cell)
        return cell

    def _accumulate(self, cell: QuadCell) -> None:
        if cell.children:
            parts = [(child.charge, child.x, child.y) for child in cell.children]
        else:
            parts = [(self.charges[i], self.nodes[i].x, self.nodes[i].y) for i in cell.members]

        strength = weight = x = y = 0.0
        for charge, px, py in parts:
            c = abs(charge)
            strength += charge
            weight += c
            x += c * px
            y += c * py
        cell.charge = strength
        if weight:
            cell.x = x / weight
            cell.y = y / weight

    def apply(
        self,
        index: int,
        alpha: float,
        theta2: float,
        distance_min2: float,
        jiggle: Callable[[], float],
    ) -> None:
        """Add the repulsion on node `index` to its velocity."""
        if self.root is None:
            return
        node = self.nodes[index]
        nx, ny = node.x, node.y
        vx = vy = 0.0
        stack = [self.root]

        while stack:
            cell = stack.pop()
            if not cell.charge:
                continue
            dx = cell.x - nx
            dy = cell.y - ny
            l2 = dx * dx + dy * dy

            if cell.width * cell.width < theta2 * l2:
                if l2 < distance_min2:
                    l2 = math.sqrt(distance_min2 * l2)
                w = cell.charge * alpha / l2
                vx += dx * w
                vy += dy * w
                continue

            if cell.children:
                stack.extend(cell.children)
                continue

            for j in cell.members:
                if j == index:
                    continue
                other = self.nodes[j]
                dx = other.x - nx
                dy = other.y - ny
                if dx == 0:
                    dx = jiggle()
                if dy == 0:
                    dy = jiggle()
                l2 = dx * dx + dy * dy
                if l2 < distance_min2:
                    l2 = math.sqrt(distance_min2 * l2)
                w = self.charges[j] * alpha / l2
                vx += dx * w
                vy += dy * w

        node.vx += vx
        node.vy += vy
