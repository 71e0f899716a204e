"""Planner façade: from a schematic to a connected scaffolding plan."""

from __future__ import annotations

import logging

from ..schematic import Schematic
from .collapsed import CollapsedDependencyGraph, Component
from .config import get_scaffolder_config, set_scaffolder_config
from .consistency import check_collapsed_graph, check_roots
from .dependency_graph import PlaceOrderDependencyGraph
from .model import (
    Classification,
    ComponentKind,
    FrozenPlanError,
    InternalInconsistency,
    PlannerState,
    PlanOptions,
    ScaffolderConfig,
    ScaffoldingError,
    Unconnectable,
)
from .overlay import DependencyGraphScaffoldingOverlay
from .scaffolder import Scaffolder, ScaffoldingOutput, apply_scaffolding_connection
from .strategy import DijkstraScaffolderStrategy, ScaffolderStrategy

logger = logging.getLogger(__name__)


def plan_scaffolding(schematic: Schematic, options: PlanOptions = PlanOptions()) -> ScaffoldingOutput:
    """Build the dependency graph for ``schematic`` and connect it with the Dijkstra strategy."""

    logger.info(
        "Planning scaffolding for %d block(s) in bounds %s", len(schematic), schematic.bounds.shape
    )
    config = get_scaffolder_config()
    if options.debug_checks is not None:
        config.debug_checks = options.debug_checks
    graph = PlaceOrderDependencyGraph(schematic)
    strategy = DijkstraScaffolderStrategy(max_scaffolding=options.max_scaffolding)
    return Scaffolder.run(graph, strategy, config)


__all__ = [
    "Classification",
    "CollapsedDependencyGraph",
    "Component",
    "ComponentKind",
    "DependencyGraphScaffoldingOverlay",
    "DijkstraScaffolderStrategy",
    "FrozenPlanError",
    "InternalInconsistency",
    "PlaceOrderDependencyGraph",
    "PlanOptions",
    "PlannerState",
    "ScaffolderConfig",
    "ScaffolderStrategy",
    "Scaffolder",
    "ScaffoldingError",
    "ScaffoldingOutput",
    "Unconnectable",
    "apply_scaffolding_connection",
    "check_collapsed_graph",
    "check_roots",
    "get_scaffolder_config",
    "plan_scaffolding",
    "set_scaffolder_config",
]
