"""Connector-path strategies used by the scaffolder."""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Protocol, Set, Tuple

from ..logging_utils import apply_debug_logging
from ..positions import FACES, unpack
from .collapsed import Component

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .overlay import DependencyGraphScaffoldingOverlay

logger = logging.getLogger(__name__)

State = Tuple[int, int]


class ScaffolderStrategy(Protocol):
    """Proposes a path of scaffolding that gives ``root`` an incoming edge.

    The returned path starts at a position already in the overlay (outside
    ``root``), continues through Air cells, and ends at a position of
    ``root``. ``None`` means no connector exists right now.
    """

    def scaffold_to(
        self, root: Component, overlay: "DependencyGraphScaffoldingOverlay"
    ) -> Optional[List[int]]:
        ...


class DijkstraScaffolderStrategy:
    """Cheapest connector search outward from the root through Air cells.

    The search only steps along hypothetical support edges, so every cell of
    the returned path can be placed against its predecessor. Components
    reachable from the root are never used as the path source, and Air cells
    that would share an edge with one of them (other than the root itself)
    are never used as scaffolding: enabling such a cell would fold a
    descendant into the root instead of giving the root an incoming edge.

    With ``max_scaffolding`` set, search states are ``(cell, depth)`` pairs so
    a cheap but long route to a cell does not hide a shorter one that still
    fits the bound.
    """

    def __init__(
        self,
        max_scaffolding: Optional[int] = None,
        cost: Optional[Callable[[int], float]] = None,
    ):
        if max_scaffolding is not None and max_scaffolding < 0:
            raise ValueError("max_scaffolding must be non-negative")
        self.max_scaffolding = max_scaffolding
        self._cost = cost or (lambda pos: 1.0)

    def scaffold_to(
        self, root: Component, overlay: "DependencyGraphScaffoldingOverlay"
    ) -> Optional[List[int]]:
        graph = overlay.collapsed_graph
        root = graph.resolve_live(root)
        excluded = graph.descendants(root)
        bounds = overlay.bounds
        bounded = self.max_scaffolding is not None

        dist: Dict[State, float] = {}
        toward_root: Dict[State, State] = {}
        blocked: Dict[int, bool] = {}
        heap: List[Tuple[float, int, State]] = []
        counter = itertools.count()
        for pos in sorted(root.positions):
            start = (pos, 0)
            dist[start] = 0.0
            heapq.heappush(heap, (0.0, next(counter), start))

        done: Set[State] = set()
        while heap:
            cost, _, state = heapq.heappop(heap)
            if state in done:
                continue
            done.add(state)
            current, depth = state
            for face in FACES:
                neighbor = bounds.neighbor(current, face)
                if neighbor is None or not overlay.hypothetical_incoming_edge(current, face):
                    continue
                if overlay.air(neighbor):
                    next_depth = depth + 1 if bounded else 0
                    if bounded and next_depth > self.max_scaffolding:
                        continue
                    nxt = (neighbor, next_depth)
                    if nxt in done:
                        continue
                    if neighbor not in blocked:
                        blocked[neighbor] = _touches_descendant(overlay, neighbor, root, excluded)
                    if blocked[neighbor]:
                        continue
                    step = self._cost(neighbor)
                    if step <= 0:
                        raise ValueError(f"scaffolding cost must be positive, got {step} at {unpack(neighbor)}")
                    next_cost = cost + step
                    if next_cost < dist.get(nxt, math.inf):
                        dist[nxt] = next_cost
                        toward_root[nxt] = state
                        heapq.heappush(heap, (next_cost, next(counter), nxt))
                    continue
                component = graph.component_of(neighbor)
                if component is None or component in excluded:
                    continue
                path = [neighbor, current]
                while state in toward_root:
                    state = toward_root[state]
                    path.append(state[0])
                logger.info(
                    "Found connector into component %d from component %d with %d scaffolding cell(s)",
                    root.id,
                    component.id,
                    len(path) - 2,
                )
                return path

        logger.info("No connector into component %d (explored %d state(s))", root.id, len(done))
        return None


def _touches_descendant(
    overlay: "DependencyGraphScaffoldingOverlay", cell: int, root: Component, excluded: Set[Component]
) -> bool:
    """Return whether scaffolding at ``cell`` would share an edge with a non-root descendant."""

    graph = overlay.collapsed_graph
    for face in FACES:
        neighbor = overlay.bounds.neighbor(cell, face)
        if neighbor is None or overlay.air(neighbor):
            continue
        component = graph.component_of(neighbor)
        if component is root or component not in excluded:
            continue
        if overlay.hypothetical_incoming_edge(cell, face) or overlay.hypothetical_incoming_edge(
            neighbor, face.opposite
        ):
            return True
    return False


apply_debug_logging(globals(), logger=logger)


__all__ = ["DijkstraScaffolderStrategy", "ScaffolderStrategy"]
