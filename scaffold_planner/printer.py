from typing import Dict, List

from .planner.model import Classification
from .planner.scaffolder import ScaffoldingOutput
from .positions import Bounds, pack, unpack

SYMBOLS: Dict[Classification, str] = {
    Classification.REAL: '#',
    Classification.SCAFFOLDING: '+',
    Classification.AIR: '.',
}


def format_layer(output: ScaffoldingOutput, bounds: Bounds, y: int) -> str:
    """Render one horizontal slice; rows are z, columns are x."""
    rows: List[str] = []
    for z in range(bounds.size_z):
        rows.append(''.join(SYMBOLS[output.classify(pack(x, y, z))] for x in range(bounds.size_x)))
    return '\n'.join(rows)


def format_plan(output: ScaffoldingOutput, bounds: Bounds) -> str:
    parts: List[str] = []
    for y in range(bounds.size_y - 1, -1, -1):
        parts.append(f'y={y}')
        parts.append(format_layer(output, bounds, y))
    return '\n'.join(parts)


def format_scaffolding(output: ScaffoldingOutput) -> str:
    lines = [f'scaffolding {x} {y} {z}' for (x, y, z) in (unpack(pos) for pos in sorted(output.scaffolding))]
    return '\n'.join(lines)
