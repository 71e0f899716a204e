"""Schematic model: which cells must be built and how each block attaches."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from .positions import FACES, Bounds, Coord, Face, pack, unpack


@dataclass(frozen=True)
class BlockKind:
    """Placement behaviour of a block.

    ``supported_from`` lists the faces of the block across which it may be
    placed against an existing neighbour. ``supports`` lists the faces across
    which the block offers support to a neighbour placed against it.
    """

    name: str
    supported_from: FrozenSet[Face]
    supports: FrozenSet[Face]


_ALL_FACES = frozenset(FACES)

SOLID = BlockKind("solid", _ALL_FACES, _ALL_FACES)
SCAFFOLDING = BlockKind("scaffolding", _ALL_FACES, _ALL_FACES)
FALLING = BlockKind("falling", frozenset({Face.DOWN}), _ALL_FACES)
ATTACHMENT = BlockKind("attachment", _ALL_FACES, frozenset())

BLOCK_KINDS: Dict[str, BlockKind] = {
    kind.name: kind for kind in (SOLID, SCAFFOLDING, FALLING, ATTACHMENT)
}


def block_kind(name: str) -> BlockKind:
    try:
        return BLOCK_KINDS[name]
    except KeyError as exc:
        raise ValueError(f"unknown block kind {name!r}") from exc


@dataclass
class Schematic:
    bounds: Bounds
    blocks: Dict[int, BlockKind] = field(default_factory=dict)

    @classmethod
    def from_coords(
        cls,
        size: Sequence[int],
        coords: Iterable[Coord],
        kind: BlockKind = SOLID,
    ) -> "Schematic":
        blocks = {pack(*coord): kind for coord in coords}
        return cls(Bounds(*size), blocks)

    def add(self, x: int, y: int, z: int, kind: BlockKind = SOLID) -> int:
        pos = pack(x, y, z)
        self.blocks[pos] = kind
        return pos

    def kind_at(self, pos: int) -> Optional[BlockKind]:
        return self.blocks.get(pos)

    def positions(self) -> Iterator[int]:
        return iter(sorted(self.blocks))

    def coords(self) -> List[Tuple[Coord, str]]:
        return [(unpack(pos), self.blocks[pos].name) for pos in sorted(self.blocks)]

    def __len__(self) -> int:
        return len(self.blocks)


def parse_schematic(text: str) -> Schematic:
    """Parse a JSON schematic.

    The document looks like ``{"size": [sx, sy, sz], "blocks": [[x, y, z], [x, y, z, "falling"]]}``;
    the block kind defaults to ``solid``.
    """

    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"schematic is not valid JSON: {exc}") from exc
    if not isinstance(doc, dict):
        raise ValueError("schematic must be a JSON object")

    size = doc.get("size")
    if not isinstance(size, list) or len(size) != 3 or not all(isinstance(v, int) for v in size):
        raise ValueError("schematic 'size' must be a list of three integers")

    blocks: Dict[int, BlockKind] = {}
    for idx, entry in enumerate(doc.get("blocks", [])):
        if not isinstance(entry, list) or len(entry) not in (3, 4):
            raise ValueError(f"block #{idx} must be [x, y, z] or [x, y, z, kind]")
        x, y, z = entry[:3]
        if not all(isinstance(v, int) for v in (x, y, z)):
            raise ValueError(f"block #{idx} coordinates must be integers")
        name = entry[3] if len(entry) == 4 else SOLID.name
        if not isinstance(name, str):
            raise ValueError(f"block #{idx} kind must be a string")
        pos = pack(x, y, z)
        if pos in blocks:
            raise ValueError(f"block #{idx} duplicates position {(x, y, z)}")
        blocks[pos] = block_kind(name)

    return Schematic(Bounds(*size), blocks)


__all__ = [
    "ATTACHMENT",
    "BLOCK_KINDS",
    "BlockKind",
    "FALLING",
    "SCAFFOLDING",
    "SOLID",
    "Schematic",
    "block_kind",
    "parse_schematic",
]
