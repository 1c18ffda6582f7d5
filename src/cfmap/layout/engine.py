"""
Force Layout Engine.

An iterative spring/charge solver advanced one tick at a time by the host
loop. Each LayoutRun moves through:

    IDLE -> RUNNING -> CONVERGED | STOPPED | SUPERSEDED

- CONVERGED: alpha fell below alpha_min; positions are kept for rendering.
- STOPPED: cancelled (simulation state discarded) or hit max_ticks
  (positions kept, run left unsettled).
- SUPERSEDED: the engine started a newer run; state discarded.

The engine hands out monotonically increasing generation numbers. A tick
carrying any generation other than the active run's is a no-op, which is
how callbacks queued for a cancelled run are neutralised.
"""

import logging
import math
import random
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, Optional, Sequence

from .. import config
from ..core.projector import ProjectedEdge, ProjectedNode
from .quadtree import ChargeTree

logger = logging.getLogger(__name__)

StrengthFn = Callable[[ProjectedNode], float]


class LayoutState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    CONVERGED = "converged"
    STOPPED = "stopped"
    SUPERSEDED = "superseded"


@dataclass(frozen=True)
class LayoutParameters:
    """Schedule and safety bounds for a run."""
    alpha: float = 1.0
    alpha_min: float = config.DEFAULT_ALPHA_MIN
    alpha_decay: float = config.DEFAULT_ALPHA_DECAY
    alpha_target: float = 0.0
    velocity_decay: float = config.DEFAULT_VELOCITY_DECAY
    distance_min: float = config.DEFAULT_DISTANCE_MIN
    theta: float = config.DEFAULT_THETA
    exact_charge_limit: int = config.DEFAULT_EXACT_CHARGE_LIMIT
    max_ticks: int = config.DEFAULT_MAX_TICKS
    seed: int = 0


class LayoutRun:
    """
    One simulation over a fixed node/edge set.

    While RUNNING the run exclusively owns x/y/vx/vy of its nodes. A run is
    never restarted once it leaves RUNNING.
    """

    def __init__(
        self,
        generation: int,
        nodes: Sequence[ProjectedNode],
        edges: Sequence[ProjectedEdge],
        strength: StrengthFn,
        parameters: LayoutParameters,
    ):
        self.generation = generation
        self.parameters = parameters
        self.state = LayoutState.IDLE
        self.alpha = parameters.alpha
        self.tick_count = 0
        self._nodes = list(nodes)
        self._edges = list(edges)
        self._strength = strength
        self._charges: list[float] = []
        self._bias: list[float] = []
        self._rng = random.Random(parameters.seed)

    @property
    def nodes(self) -> Sequence[ProjectedNode]:
        return self._nodes

    @property
    def is_active(self) -> bool:
        return self.state in (LayoutState.IDLE, LayoutState.RUNNING)

    @property
    def is_settled(self) -> bool:
        return self.state == LayoutState.CONVERGED

    def start(self) -> None:
        if self.state != LayoutState.IDLE:
            raise RuntimeError(f"Run {self.generation} cannot start from {self.state}")

        for i, node in enumerate(self._nodes):
            radius = config.INITIAL_RADIUS * math.sqrt(0.5 + i)
            angle = i * math.pi * config.INITIAL_ANGLE_FACTOR
            node.x = radius * math.cos(angle)
            node.y = radius * math.sin(angle)
            node.vx = node.vy = 0.0

        self._charges = [self._strength(node) for node in self._nodes]

        degree = {id(node): 0 for node in self._nodes}
        for edge in self._edges:
            degree[id(edge.source)] += 1
            degree[id(edge.target)] += 1
        self._bias = [
            degree[id(e.source)] / (degree[id(e.source)] + degree[id(e.target)])
            for e in self._edges
        ]

        self.state = LayoutState.RUNNING
        logger.debug(f"Layout run {self.generation} started: {len(self._nodes)} nodes")

        if not self._nodes:
            self.state = LayoutState.CONVERGED

    def step(self) -> bool:
        """
        Advance one tick. Returns False if the run is not RUNNING.
        """
        if self.state != LayoutState.RUNNING:
            return False

        p = self.parameters
        self.alpha += (p.alpha_target - self.alpha) * p.alpha_decay

        self._apply_links()
        self._apply_charges()

        keep = 1 - p.velocity_decay
        for node in self._nodes:
            node.vx *= keep
            node.vy *= keep
            node.x += node.vx
            node.y += node.vy

        self.tick_count += 1

        if self.alpha < p.alpha_min:
            self.state = LayoutState.CONVERGED
            logger.debug(f"Layout run {self.generation} converged after {self.tick_count} ticks")
        elif self.tick_count >= p.max_ticks:
            self.state = LayoutState.STOPPED
            logger.warning(
                f"Layout run {self.generation} stopped at {self.tick_count} ticks "
                f"without settling (alpha={self.alpha:.4f})"
            )
        return True

    def stop(self) -> None:
        """Cancel the run and discard its simulation state."""
        if self.is_active:
            self._discard(LayoutState.STOPPED)

    def supersede(self) -> None:
        if self.is_active:
            self._discard(LayoutState.SUPERSEDED)

    def _discard(self, state: LayoutState) -> None:
        for node in self._nodes:
            node.vx = node.vy = 0.0
        self._nodes = []
        self._edges = []
        self._charges = []
        self._bias = []
        self.state = state
        logger.debug(f"Layout run {self.generation} -> {state} after {self.tick_count} ticks")

    # --- Forces ---

    def _jiggle(self) -> float:
        return (self._rng.random() - 0.5) * 1e-6

    def _apply_links(self) -> None:
        alpha = self.alpha
        for edge, bias in zip(self._edges, self._bias):
            source, target = edge.source, edge.target
            dx = target.x + target.vx - source.x - source.vx or self._jiggle()
            dy = target.y + target.vy - source.y - source.vy or self._jiggle()
            length = math.sqrt(dx * dx + dy * dy)
            pull = (length - edge.distance) / length * alpha * edge.strength
            dx *= pull
            dy *= pull
            target.vx -= dx * bias
            target.vy -= dy * bias
            source.vx += dx * (1 - bias)
            source.vy += dy * (1 - bias)

    def _apply_charges(self) -> None:
        if len(self._nodes) > self.parameters.exact_charge_limit:
            self._apply_charges_approx()
            return

        alpha = self.alpha
        distance_min2 = self.parameters.distance_min ** 2
        nodes = self._nodes
        for i, node in enumerate(nodes):
            for j, other in enumerate(nodes):
                if i == j:
                    continue
                dx = other.x - node.x
                dy = other.y - node.y
                if dx == 0:
                    dx = self._jiggle()
                if dy == 0:
                    dy = self._jiggle()
                l2 = dx * dx + dy * dy
                if l2 < distance_min2:
                    l2 = math.sqrt(distance_min2 * l2)
                w = self._charges[j] * alpha / l2
                node.vx += dx * w
                node.vy += dy * w

    def _apply_charges_approx(self) -> None:
        p = self.parameters
        tree = ChargeTree(self._nodes, self._charges)
        theta2 = p.theta * p.theta
        distance_min2 = p.distance_min ** 2
        for i in range(len(self._nodes)):
            tree.apply(i, self.alpha, theta2, distance_min2, self._jiggle)


class ForceLayoutEngine:
    """
    Owns the generation counter and the single active run.
    """

    def __init__(self, parameters: Optional[LayoutParameters] = None):
        self.parameters = parameters or LayoutParameters()
        self._generation = 0
        self._active: Optional[LayoutRun] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def active_run(self) -> Optional[LayoutRun]:
        return self._active

    def is_current(self, generation: int) -> bool:
        return self._active is not None and self._active.generation == generation

    def start(
        self,
        nodes: Sequence[ProjectedNode],
        edges: Sequence[ProjectedEdge],
        strength: StrengthFn,
    ) -> LayoutRun:
        """
        Start a new run, superseding the previous one first.
        """
        if self._active is not None:
            self._active.supersede()

        self._generation += 1
        run = LayoutRun(self._generation, nodes, edges, strength, self.parameters)
        self._active = run
        run.start()
        return run

    def tick(self, generation: int) -> bool:
        """Step the active run if `generation` still names it."""
        if not self.is_current(generation):
            logger.debug(f"Dropping stale tick for generation {generation}")
            return False
        return self._active.step()

    def cancel(self) -> None:
        if self._active is not None:
            self._active.stop()
