"""Packed block positions, unit faces and bounding boxes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

import numpy as np

Coord = Tuple[int, int, int]

NUM_X_BITS = 26
NUM_Z_BITS = NUM_X_BITS
NUM_Y_BITS = 64 - NUM_X_BITS - NUM_Z_BITS
Y_SHIFT = 0
Z_SHIFT = Y_SHIFT + NUM_Y_BITS
X_SHIFT = Z_SHIFT + NUM_Z_BITS
X_MASK = (1 << NUM_X_BITS) - 1
Y_MASK = (1 << NUM_Y_BITS) - 1
Z_MASK = (1 << NUM_Z_BITS) - 1
KEY_MASK = (1 << 64) - 1


def _axis_range(bits: int) -> Tuple[int, int]:
    return -(1 << (bits - 1)), 1 << (bits - 1)


def _signed(value: int, bits: int) -> int:
    if value >= 1 << (bits - 1):
        return value - (1 << bits)
    return value


def pack(x: int, y: int, z: int) -> int:
    """Pack ``(x, y, z)`` into a single non-negative 64-bit key."""

    for name, value, bits in (("x", x, NUM_X_BITS), ("y", y, NUM_Y_BITS), ("z", z, NUM_Z_BITS)):
        lo, hi = _axis_range(bits)
        if not lo <= value < hi:
            raise ValueError(f"{name}={value} outside packable range [{lo}, {hi})")
    return ((x & X_MASK) << X_SHIFT) | ((y & Y_MASK) << Y_SHIFT) | ((z & Z_MASK) << Z_SHIFT)


def unpack(key: int) -> Coord:
    if not 0 <= key <= KEY_MASK:
        raise ValueError(f"position key {key} is not a 64-bit value")
    x = _signed((key >> X_SHIFT) & X_MASK, NUM_X_BITS)
    y = _signed((key >> Y_SHIFT) & Y_MASK, NUM_Y_BITS)
    z = _signed((key >> Z_SHIFT) & Z_MASK, NUM_Z_BITS)
    return x, y, z


def pack_array(coords: np.ndarray) -> np.ndarray:
    """Vectorised :func:`pack` for an ``(N, 3)`` integer array."""

    arr = np.asarray(coords, dtype=np.int64).reshape(-1, 3)
    for axis, bits in enumerate((NUM_X_BITS, NUM_Y_BITS, NUM_Z_BITS)):
        lo, hi = _axis_range(bits)
        column = arr[:, axis]
        if column.size and (column.min() < lo or column.max() >= hi):
            raise ValueError(f"axis {axis} outside packable range [{lo}, {hi})")
    x = (arr[:, 0] & X_MASK).astype(np.uint64) << np.uint64(X_SHIFT)
    y = (arr[:, 1] & Y_MASK).astype(np.uint64) << np.uint64(Y_SHIFT)
    z = (arr[:, 2] & Z_MASK).astype(np.uint64) << np.uint64(Z_SHIFT)
    return x | y | z


def unpack_array(keys: np.ndarray) -> np.ndarray:
    """Vectorised :func:`unpack`; returns an ``(N, 3)`` int64 array."""

    arr = np.asarray(keys, dtype=np.uint64).reshape(-1)
    out = np.empty((arr.size, 3), dtype=np.int64)
    for axis, (shift, mask, bits) in enumerate(
        ((X_SHIFT, X_MASK, NUM_X_BITS), (Y_SHIFT, Y_MASK, NUM_Y_BITS), (Z_SHIFT, Z_MASK, NUM_Z_BITS))
    ):
        raw = ((arr >> np.uint64(shift)) & np.uint64(mask)).astype(np.int64)
        out[:, axis] = np.where(raw >= (1 << (bits - 1)), raw - (1 << bits), raw)
    return out


class Face(Enum):
    DOWN = (0, -1, 0)
    UP = (0, 1, 0)
    NORTH = (0, 0, -1)
    SOUTH = (0, 0, 1)
    WEST = (-1, 0, 0)
    EAST = (1, 0, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def dz(self) -> int:
        return self.value[2]

    @property
    def index(self) -> int:
        return _FACE_INDEX[self]

    @property
    def opposite(self) -> "Face":
        return _OPPOSITES[self]

    def offset(self, pos: int) -> int:
        """Return the key of the cell next to ``pos`` across this face."""

        x, y, z = unpack(pos)
        return pack(x + self.dx, y + self.dy, z + self.dz)

    @classmethod
    def between(cls, a: int, b: int) -> "Face":
        """Return the face pointing from ``a`` to the face-adjacent ``b``."""

        face = _face_between(a, b)
        if face is None:
            raise ValueError(f"{unpack(a)} and {unpack(b)} are not face-adjacent")
        return face


FACES: Tuple[Face, ...] = tuple(Face)
_FACE_INDEX = {face: idx for idx, face in enumerate(FACES)}
_OPPOSITES = {
    Face.DOWN: Face.UP,
    Face.UP: Face.DOWN,
    Face.NORTH: Face.SOUTH,
    Face.SOUTH: Face.NORTH,
    Face.WEST: Face.EAST,
    Face.EAST: Face.WEST,
}
_BY_DELTA = {face.value: face for face in FACES}


def _face_between(a: int, b: int) -> Optional[Face]:
    ax, ay, az = unpack(a)
    bx, by, bz = unpack(b)
    return _BY_DELTA.get((bx - ax, by - ay, bz - az))


def adjacent(a: int, b: int) -> bool:
    return _face_between(a, b) is not None


@dataclass(frozen=True)
class Bounds:
    """Box of cells ``[0, size_x) x [0, size_y) x [0, size_z)``."""

    size_x: int
    size_y: int
    size_z: int

    def __post_init__(self) -> None:
        for name in ("size_x", "size_y", "size_z"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

    @property
    def shape(self) -> Coord:
        return self.size_x, self.size_y, self.size_z

    @property
    def volume(self) -> int:
        return self.size_x * self.size_y * self.size_z

    def in_range(self, x: int, y: int, z: int) -> bool:
        return 0 <= x < self.size_x and 0 <= y < self.size_y and 0 <= z < self.size_z

    def contains(self, pos: int) -> bool:
        return self.in_range(*unpack(pos))

    def neighbor(self, pos: int, face: Face) -> Optional[int]:
        """Return the neighbour of ``pos`` across ``face``, or ``None`` outside the box."""

        x, y, z = unpack(pos)
        nx, ny, nz = x + face.dx, y + face.dy, z + face.dz
        if not self.in_range(nx, ny, nz):
            return None
        return pack(nx, ny, nz)

    def positions(self) -> Iterator[int]:
        for x in range(self.size_x):
            for y in range(self.size_y):
                for z in range(self.size_z):
                    yield pack(x, y, z)

    def all_positions(self) -> np.ndarray:
        grid = np.indices(self.shape, dtype=np.int64).reshape(3, -1).T
        return pack_array(grid)


__all__ = [
    "Bounds",
    "Coord",
    "FACES",
    "Face",
    "adjacent",
    "pack",
    "pack_array",
    "unpack",
    "unpack_array",
]
