"""Incrementally maintained condensation of the scaffolding overlay.

Every strongly connected set of overlay nodes is collapsed into a single
:class:`Component`, which leaves a DAG of components. The DAG is built once
with a full strong-connectivity pass and then updated in place each time the
overlay enables a scaffolding cell: the new cell starts as its own component,
and any of its edges that closes a cycle merges the components along that
cycle into the largest of them. Merged-away components stay in an arena with
a redirect to the survivor so stale references can be resolved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components

from ..positions import FACES, unpack
from .model import ComponentKind, InternalInconsistency

if TYPE_CHECKING:  # pragma: no cover - import cycle with the overlay
    from .overlay import DependencyGraphScaffoldingOverlay

logger = logging.getLogger(__name__)

Edge = Tuple[int, int]


@dataclass(eq=False, repr=False)
class Component:
    """Strongly connected set of overlay nodes."""

    id: int
    positions: Set[int]
    incoming: Set["Component"] = field(default_factory=set)
    outgoing: Set["Component"] = field(default_factory=set)
    deleted_into: Optional["Component"] = None

    def deleted(self) -> bool:
        return self.deleted_into is not None

    @property
    def kind(self) -> ComponentKind:
        return ComponentKind.TRIVIAL if len(self.positions) == 1 else ComponentKind.MERGED

    def __repr__(self) -> str:
        if self.deleted_into is not None:
            return f"Component(id={self.id}, deleted_into={self.deleted_into.id})"
        return (
            f"Component(id={self.id}, size={len(self.positions)}, "
            f"incoming={sorted(c.id for c in self.incoming)}, "
            f"outgoing={sorted(c.id for c in self.outgoing)})"
        )


def overlay_edges(overlay: "DependencyGraphScaffoldingOverlay") -> Tuple[List[int], List[Edge]]:
    """Return the sorted overlay nodes and every edge between them."""

    nodes = sorted(overlay.nodes())
    present = set(nodes)
    bounds = overlay.bounds
    edges: List[Edge] = []
    for pos in nodes:
        for face in FACES:
            neighbor = bounds.neighbor(pos, face)
            if neighbor is not None and neighbor in present and overlay.outgoing_edge(pos, face):
                edges.append((pos, neighbor))
    return nodes, edges


def strongly_connected_partition(nodes: Sequence[int], edges: Iterable[Edge]) -> List[List[int]]:
    """Group ``nodes`` into strongly connected sets.

    Groups are returned in ascending order of their smallest member when
    ``nodes`` is sorted.
    """

    if not nodes:
        return []
    index = {pos: idx for idx, pos in enumerate(nodes)}
    rows: List[int] = []
    cols: List[int] = []
    for src, dst in edges:
        rows.append(index[src])
        cols.append(index[dst])
    matrix = csr_matrix(
        (np.ones(len(rows), dtype=np.int8), (np.array(rows, dtype=np.int64), np.array(cols, dtype=np.int64))),
        shape=(len(nodes), len(nodes)),
    )
    _, labels = connected_components(matrix, directed=True, connection="strong")
    groups: Dict[int, List[int]] = {}
    for pos, label in zip(nodes, labels):
        groups.setdefault(int(label), []).append(pos)
    return list(groups.values())


class CollapsedDependencyGraph:
    def __init__(self, overlay: "DependencyGraphScaffoldingOverlay"):
        self._overlay = overlay
        self._arena: Dict[int, Component] = {}
        self._components: Dict[int, Component] = {}
        self._locations: Dict[int, Component] = {}
        self._next_id = 0
        self._build()

    def _build(self) -> None:
        nodes, edges = overlay_edges(self._overlay)
        for members in strongly_connected_partition(nodes, edges):
            self._new_component(members)
        for src, dst in edges:
            a = self._locations[src]
            b = self._locations[dst]
            if a is not b:
                a.outgoing.add(b)
                b.incoming.add(a)
        logger.info(
            "Collapsed %d node(s) and %d edge(s) into %d component(s)",
            len(nodes),
            len(edges),
            len(self._components),
        )

    def _new_component(self, positions: Iterable[int]) -> Component:
        component = Component(id=self._next_id, positions=set(positions))
        self._next_id += 1
        self._arena[component.id] = component
        self._components[component.id] = component
        for pos in component.positions:
            self._locations[pos] = component
        return component

    def components(self) -> Mapping[int, Component]:
        return MappingProxyType(self._components)

    def component_locations(self) -> Mapping[int, Component]:
        return MappingProxyType(self._locations)

    def component_of(self, pos: int) -> Optional[Component]:
        return self._locations.get(pos)

    def component_by_id(self, component_id: int) -> Optional[Component]:
        """Return the component created with ``component_id``, live or dead."""

        return self._arena.get(component_id)

    def last_component_id(self) -> int:
        return self._next_id - 1

    def root_components(self) -> List[Component]:
        return [c for _, c in sorted(self._components.items()) if not c.incoming]

    def resolve_live(self, component: Component) -> Component:
        """Follow merge redirects from ``component`` to the live survivor."""

        live = component
        steps = 0
        while live.deleted_into is not None:
            live = live.deleted_into
            steps += 1
            if steps > len(self._arena):
                raise InternalInconsistency(f"redirect cycle starting at component {component.id}")
        node = component
        while node.deleted_into is not None and node.deleted_into is not live:
            node.deleted_into, node = live, node.deleted_into
        if self._components.get(live.id) is not live:
            raise InternalInconsistency(f"component {live.id} has no redirect but is not live")
        return live

    def descendants(self, component: Component) -> Set[Component]:
        """Return every live component reachable from ``component``, itself included."""

        return self._reachable(component, forward=True)

    def is_descendant(self, ancestor: Component, candidate: Component) -> bool:
        if ancestor is candidate:
            return True
        seen = {ancestor}
        stack = [ancestor]
        while stack:
            for nxt in stack.pop().outgoing:
                if nxt is candidate:
                    return True
                if nxt not in seen:
                    seen.add(nxt)
                    stack.append(nxt)
        return False

    def _reachable(self, start: Component, *, forward: bool) -> Set[Component]:
        seen = {start}
        stack = [start]
        while stack:
            current = stack.pop()
            for nxt in current.outgoing if forward else current.incoming:
                if nxt not in seen:
                    seen.add(nxt)
                    stack.append(nxt)
        return seen

    def incremental_update(self, pos: int) -> None:
        """Insert the freshly enabled overlay node ``pos`` and all of its edges."""

        if pos in self._locations:
            raise InternalInconsistency(f"{unpack(pos)} already belongs to a component")
        self._new_component([pos])
        bounds = self._overlay.bounds
        for face in FACES:
            neighbor = bounds.neighbor(pos, face)
            if neighbor is None or neighbor not in self._locations:
                continue
            if self._overlay.outgoing_edge(pos, face):
                self._add_edge(self._locations[pos], self._locations[neighbor])
            if self._overlay.incoming_edge(pos, face):
                self._add_edge(self._locations[neighbor], self._locations[pos])

    def _add_edge(self, src: Component, dst: Component) -> None:
        if src is dst or dst in src.outgoing:
            return
        if self.is_descendant(dst, src):
            members = self._reachable(dst, forward=True) & self._reachable(src, forward=False)
            self._merge(members)
            return
        src.outgoing.add(dst)
        dst.incoming.add(src)

    def _merge(self, members: Set[Component]) -> Component:
        survivor = max(members, key=lambda c: (len(c.positions), -c.id))
        outgoing: Set[Component] = set().union(*(c.outgoing for c in members)) - members
        incoming: Set[Component] = set().union(*(c.incoming for c in members)) - members
        for component in sorted(members, key=lambda c: c.id):
            if component is survivor:
                continue
            survivor.positions |= component.positions
            for pos in component.positions:
                self._locations[pos] = survivor
            component.deleted_into = survivor
            component.incoming = set()
            component.outgoing = set()
            del self._components[component.id]
        for other in outgoing:
            other.incoming -= members
            other.incoming.add(survivor)
        for other in incoming:
            other.outgoing -= members
            other.outgoing.add(survivor)
        survivor.outgoing = outgoing
        survivor.incoming = incoming
        logger.debug(
            "Merged components %s into %d (%d position(s))",
            sorted(c.id for c in members if c is not survivor),
            survivor.id,
            len(survivor.positions),
        )
        return survivor


__all__ = [
    "CollapsedDependencyGraph",
    "Component",
    "overlay_edges",
    "strongly_connected_partition",
]
