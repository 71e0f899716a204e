"""Root elimination loop: add scaffolding until a single root remains.

The collapsed graph is a DAG, so every live component without incoming
edges is an unconnected island. Each step asks the strategy for a connector
path into one of those roots, validates it, enables its Air cells and then
patches the tracked root list from what the merge changed instead of
rescanning every component.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..logging_utils import apply_debug_logging
from ..positions import Face, adjacent, unpack
from .collapsed import Component
from .config import get_scaffolder_config
from .consistency import check_collapsed_graph, check_roots
from .dependency_graph import PlaceOrderDependencyGraph
from .model import (
    Classification,
    FrozenPlanError,
    InternalInconsistency,
    PlannerState,
    ScaffolderConfig,
    Unconnectable,
)
from .overlay import DependencyGraphScaffoldingOverlay
from .strategy import ScaffolderStrategy

logger = logging.getLogger(__name__)


def apply_scaffolding_connection(
    overlay: DependencyGraphScaffoldingOverlay,
    path: Sequence[int],
    root: Optional[Component] = None,
) -> List[int]:
    """Validate ``path`` and enable its interior cells in order.

    Nothing is mutated unless the whole path is valid. Returns the enabled
    positions.
    """

    path = list(path)
    if len(path) < 2:
        raise InternalInconsistency(f"connector path needs at least two positions, got {len(path)}")
    if len(set(path)) != len(path):
        raise InternalInconsistency("connector path visits a position twice")

    graph = overlay.collapsed_graph
    start = graph.component_of(path[0])
    end = graph.component_of(path[-1])
    if start is None:
        raise InternalInconsistency(f"path start {unpack(path[0])} is not part of the graph")
    if end is None:
        raise InternalInconsistency(f"path end {unpack(path[-1])} is not part of the graph")
    if start.deleted() or end.deleted():
        raise InternalInconsistency("path endpoint resolved to a dead component")
    if start is end:
        raise InternalInconsistency(f"path starts and ends in component {start.id}")
    if root is not None and graph.resolve_live(root) is not end:
        raise InternalInconsistency(f"path ends in component {end.id}, expected root {root.id}")
    if end.incoming:
        raise InternalInconsistency(f"path ends in component {end.id} which already has incoming edges")

    interior = path[1:-1]
    for pos in interior:
        if not overlay.air(pos):
            raise InternalInconsistency(
                f"path interior {unpack(pos)} is {overlay.classify(pos).value}, expected air"
            )
        if not overlay.bounds.contains(pos):
            raise InternalInconsistency(f"path interior {unpack(pos)} is outside bounds")
    for prev, pos in zip(path, path[1:]):
        if not adjacent(prev, pos):
            raise InternalInconsistency(f"{unpack(prev)} and {unpack(pos)} are not face-adjacent")
        if not overlay.hypothetical_incoming_edge(pos, Face.between(pos, prev)):
            raise InternalInconsistency(f"{unpack(pos)} cannot be placed against {unpack(prev)}")

    logger.info("Enabling %s", [unpack(pos) for pos in interior])
    for pos in interior:
        overlay.enable(pos)
    return interior


class Scaffolder:
    """One planning session over a dependency graph."""

    def __init__(
        self,
        graph: PlaceOrderDependencyGraph,
        strategy: ScaffolderStrategy,
        config: Optional[ScaffolderConfig] = None,
    ):
        self._config = config if config is not None else get_scaffolder_config()
        self._strategy = strategy
        self._overlay = DependencyGraphScaffoldingOverlay(graph)
        self._collapsed = self._overlay.collapsed_graph
        self._roots: List[Component] = self._collapsed.root_components()
        if not self._roots:
            raise ValueError("dependency graph has no real positions to connect")
        self._steps = 0
        self._state = PlannerState.CONVERGING if len(self._roots) > 1 else PlannerState.CONVERGED
        logger.info(
            "Scaffolder starting with %d component(s) and %d root(s)",
            len(self._collapsed.components()),
            len(self._roots),
        )

    @classmethod
    def run(
        cls,
        graph: PlaceOrderDependencyGraph,
        strategy: ScaffolderStrategy,
        config: Optional[ScaffolderConfig] = None,
    ) -> "ScaffoldingOutput":
        scaffolder = cls(graph, strategy, config)
        while len(scaffolder._roots) > 1:
            scaffolder.step()
        scaffolder._state = PlannerState.CONVERGED
        logger.info(
            "Converged after %d merge(s) with %d scaffolding position(s)",
            scaffolder._steps,
            len(scaffolder._overlay.scaffolding()),
        )
        return ScaffoldingOutput(scaffolder)

    @property
    def state(self) -> PlannerState:
        return self._state

    @property
    def roots(self) -> Tuple[Component, ...]:
        return tuple(self._roots)

    @property
    def steps(self) -> int:
        return self._steps

    @property
    def overlay(self) -> DependencyGraphScaffoldingOverlay:
        return self._overlay

    def step(self) -> None:
        """Apply the first usable connector path, trying roots in order."""

        if len(self._roots) <= 1:
            raise InternalInconsistency(f"step called with {len(self._roots)} root(s)")
        for root in list(self._roots):
            if root.incoming:
                raise InternalInconsistency(f"tracked root {root.id} has incoming edges")
            path = self._strategy.scaffold_to(root, self._overlay)
            if path is None:
                logger.debug("Strategy found no connector for root %d", root.id)
                continue
            self._internal_enable(path, root)
            self._steps += 1
            self._state = PlannerState.CONVERGING if len(self._roots) > 1 else PlannerState.CONVERGED
            return
        self._state = PlannerState.FAILED
        logger.error("No connector found for any of %d root(s)", len(self._roots))
        raise Unconnectable(f"unconnectable: {len(self._roots)} root(s) remain", roots=len(self._roots))

    def _internal_enable(self, path: Sequence[int], root: Component) -> None:
        cid = self._collapsed.last_component_id()
        apply_scaffolding_connection(self._overlay, path, root)
        new_cid = self._collapsed.last_component_id()

        live = self._collapsed.components()
        for component_id in range(cid + 1, new_cid + 1):
            component = live.get(component_id)
            if component is not None and not component.incoming:
                logger.warning("Scaffolding component %d started a new root", component_id)
                self._roots.append(component)

        tracked = set(self._roots)
        kept: List[Component] = []
        absorbed: Dict[Component, List[Component]] = {}
        for candidate in self._roots:
            if candidate.deleted():
                survivor = self._collapsed.resolve_live(candidate)
                if not survivor.incoming and survivor not in tracked:
                    absorbed.setdefault(survivor, []).append(candidate)
                continue
            if candidate.incoming:
                continue
            kept.append(candidate)
        # an untracked survivor is a new root only if it swallowed several tracked roots;
        # a single root folded into one of its descendants is a strategy bug
        for survivor, merged_roots in absorbed.items():
            if len(merged_roots) < 2:
                raise InternalInconsistency(
                    f"root {merged_roots[0].id} was merged into untracked component {survivor.id}"
                )
            logger.warning(
                "Roots %s were merged into component %d, tracking it as a root",
                [root.id for root in merged_roots],
                survivor.id,
            )
            kept.append(survivor)
        self._roots = kept
        logger.info("Root count after merge: %d", len(self._roots))

        if self._config.debug_checks:
            self._check_consistency()

    def _check_consistency(self) -> None:
        issues = check_roots(self._collapsed, self._roots) + check_collapsed_graph(self._overlay)
        if issues:
            for issue in issues:
                logger.error("Consistency check failed: %s", issue)
            raise InternalInconsistency("; ".join(issues))


class ScaffoldingOutput:
    """Read-only result of a converged planning session."""

    def __init__(self, scaffolder: Scaffolder):
        self._scaffolder = scaffolder
        self._overlay = scaffolder.overlay

    @property
    def root(self) -> Component:
        roots = self._scaffolder.roots
        if len(roots) != 1:
            raise InternalInconsistency(f"expected exactly one root, found {len(roots)}")
        root = roots[0]
        if root.incoming or root.deleted():
            raise InternalInconsistency(f"root {root.id} is no longer a live root")
        return root

    def enable_ancillary_scaffolding(self, positions: Iterable[int]) -> None:
        raise FrozenPlanError("the scaffolding plan is frozen once computed")

    def classify(self, pos: int) -> Classification:
        return self._overlay.classify(pos)

    def real(self, pos: int) -> bool:
        return self._overlay.real(pos)

    def is_scaffolding(self, pos: int) -> bool:
        return self._overlay.is_scaffolding(pos)

    def air(self, pos: int) -> bool:
        return self._overlay.air(pos)

    @property
    def scaffolding(self) -> FrozenSet[int]:
        return self._overlay.scaffolding()

    def real_positions(self) -> Iterator[int]:
        return self._overlay.real_positions()

    def summary(self) -> Dict[str, Any]:
        return {
            "root": self.root.id,
            "merges": self._scaffolder.steps,
            "real": sum(1 for _ in self.real_positions()),
            "scaffolding": [list(unpack(pos)) for pos in sorted(self.scaffolding)],
        }


apply_debug_logging(globals(), logger=logger)


__all__ = [
    "Scaffolder",
    "ScaffoldingOutput",
    "apply_scaffolding_connection",
]
