"""Scaffolding overlay on top of a place-order dependency graph."""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterator, Set

from ..positions import FACES, Bounds, Face, unpack
from .collapsed import CollapsedDependencyGraph
from .dependency_graph import PlaceOrderDependencyGraph
from .model import Classification, InternalInconsistency

logger = logging.getLogger(__name__)


class DependencyGraphScaffoldingOverlay:
    """Mutable view of the dependency graph restricted to real and scaffolding cells.

    Real cells come from the schematic and never change. Air cells may be
    promoted to scaffolding with :meth:`enable`; the collapsed graph is kept
    in step with every promotion.
    """

    def __init__(self, delegate: PlaceOrderDependencyGraph):
        self._delegate = delegate
        self._scaffolding: Set[int] = set()
        self._collapsed = CollapsedDependencyGraph(self)

    @property
    def bounds(self) -> Bounds:
        return self._delegate.bounds

    @property
    def collapsed_graph(self) -> CollapsedDependencyGraph:
        return self._collapsed

    def real(self, pos: int) -> bool:
        return self._delegate.real(pos)

    def is_scaffolding(self, pos: int) -> bool:
        return pos in self._scaffolding

    def air(self, pos: int) -> bool:
        return not self.real(pos) and pos not in self._scaffolding

    def classify(self, pos: int) -> Classification:
        if self.real(pos):
            return Classification.REAL
        if pos in self._scaffolding:
            return Classification.SCAFFOLDING
        return Classification.AIR

    def real_positions(self) -> Iterator[int]:
        return self._delegate.real_positions()

    def scaffolding(self) -> FrozenSet[int]:
        return frozenset(self._scaffolding)

    def nodes(self) -> Iterator[int]:
        yield from self._delegate.real_positions()
        yield from sorted(self._scaffolding)

    def outgoing_edge(self, pos: int, face: Face) -> bool:
        if self.air(pos):
            return False
        neighbor = self.bounds.neighbor(pos, face) if self.bounds.contains(pos) else None
        if neighbor is None or self.air(neighbor):
            return False
        return self._delegate.outgoing_edge(pos, face)

    def incoming_edge(self, pos: int, face: Face) -> bool:
        if self.air(pos):
            return False
        neighbor = self.bounds.neighbor(pos, face) if self.bounds.contains(pos) else None
        if neighbor is None or self.air(neighbor):
            return False
        return self._delegate.outgoing_edge(neighbor, face.opposite)

    def hypothetical_incoming_edge(self, pos: int, face: Face) -> bool:
        """Return whether a block at ``pos`` could be placed against the cell across ``face``.

        Air on either side is treated as scaffolding, so the answer holds for
        connector paths whose cells have not been enabled yet.
        """

        return self._delegate.incoming_edge(pos, face)

    def enable(self, pos: int) -> None:
        if not self.air(pos):
            raise InternalInconsistency(
                f"cannot enable {unpack(pos)}: already {self.classify(pos).value}"
            )
        if not self.bounds.contains(pos):
            raise InternalInconsistency(f"cannot enable {unpack(pos)}: outside bounds")
        supported = False
        for face in FACES:
            neighbor = self.bounds.neighbor(pos, face)
            if neighbor is not None and not self.air(neighbor) and self.hypothetical_incoming_edge(pos, face):
                supported = True
                break
        if not supported:
            raise InternalInconsistency(f"cannot enable {unpack(pos)}: no neighbour supports it")
        self._scaffolding.add(pos)
        logger.debug("Enabled scaffolding at %s", unpack(pos))
        self._collapsed.incremental_update(pos)


__all__ = ["DependencyGraphScaffoldingOverlay"]
