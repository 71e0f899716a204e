from typing import Iterable

from .positions import unpack
from .schematic import BLOCK_KINDS, SCAFFOLDING, Schematic

class ValidationError(Exception):
    pass

def _ensure_in_bounds(sch: Schematic, positions: Iterable[int]):
    for pos in positions:
        x, y, z = unpack(pos)
        if not sch.bounds.in_range(x, y, z):
            raise ValidationError(f'[block {x},{y},{z}] outside bounds {sch.bounds.shape}')

def validate(sch: Schematic) -> None:
    if not sch.blocks:
        raise ValidationError('schematic has no blocks')
    _ensure_in_bounds(sch, sch.blocks)
    for pos, kind in sch.blocks.items():
        x, y, z = unpack(pos)
        if kind is SCAFFOLDING or kind.name == SCAFFOLDING.name:
            raise ValidationError(f'[block {x},{y},{z}] kind "scaffolding" is reserved for planned positions')
        if BLOCK_KINDS.get(kind.name) is not kind:
            raise ValidationError(f'[block {x},{y},{z}] unknown block kind "{kind.name}"')
