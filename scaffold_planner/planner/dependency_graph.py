"""Place-order dependency graph over every cell of a schematic's bounds."""

from __future__ import annotations

import logging
from typing import Iterator, List

import numpy as np

from ..positions import FACES, Bounds, Face, unpack
from ..schematic import SCAFFOLDING, BlockKind, Schematic

logger = logging.getLogger(__name__)


def _shift_from_neighbor(grid: np.ndarray, face: Face, fill: bool) -> np.ndarray:
    """Return ``out`` with ``out[p] = grid[p + face]`` and ``fill`` past the edge."""

    out = np.full_like(grid, fill)
    src: List[slice] = [slice(None)] * 3
    dst: List[slice] = [slice(None)] * 3
    for axis, delta in enumerate(face.value):
        size = grid.shape[axis]
        if delta > 0:
            dst[axis] = slice(0, size - delta)
            src[axis] = slice(delta, size)
        elif delta < 0:
            dst[axis] = slice(-delta, size)
            src[axis] = slice(0, size + delta)
    out[tuple(dst)] = grid[tuple(src)]
    return out


class PlaceOrderDependencyGraph:
    """Directed support relation between face-adjacent cells.

    An edge ``u -> v`` means a block at ``v`` can be placed against the block
    at ``u``. Edges are defined for every cell in bounds; cells the schematic
    leaves empty are treated as hypothetical scaffolding so that callers can
    ask what would happen if scaffolding were placed there.
    """

    def __init__(self, schematic: Schematic):
        self._schematic = schematic
        self._bounds = schematic.bounds
        kinds: List[BlockKind] = [SCAFFOLDING]
        kind_index = {SCAFFOLDING.name: 0}
        grid = np.zeros(self._bounds.shape, dtype=np.int16)
        for pos, kind in schematic.blocks.items():
            x, y, z = unpack(pos)
            if not self._bounds.in_range(x, y, z):
                raise ValueError(f"block {(x, y, z)} outside bounds {self._bounds.shape}")
            if kind.name not in kind_index:
                kind_index[kind.name] = len(kinds)
                kinds.append(kind)
            grid[x, y, z] = kind_index[kind.name]

        supports = np.array([[face in kind.supports for face in FACES] for kind in kinds], dtype=bool)
        supported_from = np.array(
            [[face in kind.supported_from for face in FACES] for kind in kinds], dtype=bool
        )

        self._outgoing = np.zeros(self._bounds.shape + (len(FACES),), dtype=bool)
        for face in FACES:
            accepts = supported_from[grid, face.opposite.index]
            self._outgoing[..., face.index] = supports[grid, face.index] & _shift_from_neighbor(
                accepts, face, False
            )
        logger.debug(
            "Built dependency graph over %s with %d real block(s) and %d edge(s)",
            self._bounds.shape,
            len(schematic.blocks),
            int(self._outgoing.sum()),
        )

    @property
    def bounds(self) -> Bounds:
        return self._bounds

    @property
    def schematic(self) -> Schematic:
        return self._schematic

    def real(self, pos: int) -> bool:
        return pos in self._schematic.blocks

    def real_positions(self) -> Iterator[int]:
        return self._schematic.positions()

    def outgoing_edge(self, pos: int, face: Face) -> bool:
        x, y, z = unpack(pos)
        if not self._bounds.in_range(x, y, z):
            return False
        return bool(self._outgoing[x, y, z, face.index])

    def incoming_edge(self, pos: int, face: Face) -> bool:
        """Return whether the cell across ``face`` supports ``pos``."""

        neighbor = self._bounds.neighbor(pos, face) if self._bounds.contains(pos) else None
        if neighbor is None:
            return False
        return self.outgoing_edge(neighbor, face.opposite)

    def edge_count(self) -> int:
        return int(self._outgoing.sum())


__all__ = ["PlaceOrderDependencyGraph"]
