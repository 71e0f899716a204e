"""Full-rescan self-checks for the incrementally maintained planner state."""

from __future__ import annotations

from typing import TYPE_CHECKING, FrozenSet, Iterable, List, Set

from ..positions import unpack
from .collapsed import CollapsedDependencyGraph, Component, overlay_edges, strongly_connected_partition

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .overlay import DependencyGraphScaffoldingOverlay


def _ids(components: Iterable[Component]) -> List[int]:
    return sorted(c.id for c in components)


def check_collapsed_graph(overlay: "DependencyGraphScaffoldingOverlay") -> List[str]:
    """Compare the collapsed graph of ``overlay`` against a from-scratch rebuild.

    Returns a list of human-readable problems; an empty list means the
    incremental state matches a full strong-connectivity pass.
    """

    graph: CollapsedDependencyGraph = overlay.collapsed_graph
    issues: List[str] = []
    live = graph.components()
    locations = graph.component_locations()

    nodes, edges = overlay_edges(overlay)
    expected: Set[FrozenSet[int]] = {frozenset(group) for group in strongly_connected_partition(nodes, edges)}
    actual: Set[FrozenSet[int]] = {frozenset(c.positions) for c in live.values()}
    if expected != actual:
        issues.append(
            f"component partition differs from rescan: {len(actual)} live vs {len(expected)} expected"
        )

    if set(locations) != set(nodes):
        issues.append("component locations do not cover exactly the overlay nodes")
    for pos, component in locations.items():
        if live.get(component.id) is not component:
            issues.append(f"{unpack(pos)} maps to dead component {component.id}")
        elif pos not in component.positions:
            issues.append(f"{unpack(pos)} maps to component {component.id} which does not contain it")

    for component in live.values():
        for other in component.incoming | component.outgoing:
            if live.get(other.id) is not other:
                issues.append(f"component {component.id} references dead component {other.id}")
        for other in component.outgoing:
            if component not in other.incoming:
                issues.append(f"edge {component.id}->{other.id} missing from incoming side")

    expected_edges = set()
    for src, dst in edges:
        a = locations.get(src)
        b = locations.get(dst)
        if a is not None and b is not None and a is not b:
            expected_edges.add((a.id, b.id))
    actual_edges = {(c.id, o.id) for c in live.values() for o in c.outgoing}
    if expected_edges != actual_edges:
        issues.append(
            f"component edges differ from rescan: missing={sorted(expected_edges - actual_edges)} "
            f"extra={sorted(actual_edges - expected_edges)}"
        )
    return issues


def check_roots(graph: CollapsedDependencyGraph, roots: Iterable[Component]) -> List[str]:
    """Compare a tracked root collection with a rescan of live zero-incoming components."""

    tracked = list(roots)
    rescan = graph.root_components()
    if set(tracked) == set(rescan) and len(tracked) == len(set(tracked)):
        return []
    return [f"tracked roots {_ids(tracked)} differ from rescan {_ids(rescan)}"]


__all__ = ["check_collapsed_graph", "check_roots"]
