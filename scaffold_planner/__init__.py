from .positions import Bounds, Face, adjacent, pack, pack_array, unpack, unpack_array
from .schematic import (
    ATTACHMENT,
    BLOCK_KINDS,
    FALLING,
    SOLID,
    BlockKind,
    Schematic,
    parse_schematic,
)
from .validate import validate, ValidationError
from .printer import format_plan, format_scaffolding
from .planner import (
    plan_scaffolding,
    apply_scaffolding_connection,
    Classification,
    Component,
    CollapsedDependencyGraph,
    DependencyGraphScaffoldingOverlay,
    DijkstraScaffolderStrategy,
    FrozenPlanError,
    InternalInconsistency,
    PlaceOrderDependencyGraph,
    PlanOptions,
    PlannerState,
    Scaffolder,
    ScaffolderConfig,
    ScaffolderStrategy,
    ScaffoldingError,
    ScaffoldingOutput,
    Unconnectable,
    get_scaffolder_config,
    set_scaffolder_config,
)

__all__ = [
    'Bounds',
    'Face',
    'adjacent',
    'pack',
    'pack_array',
    'unpack',
    'unpack_array',
    'ATTACHMENT',
    'BLOCK_KINDS',
    'FALLING',
    'SOLID',
    'BlockKind',
    'Schematic',
    'parse_schematic',
    'validate',
    'ValidationError',
    'format_plan',
    'format_scaffolding',
    'plan_scaffolding',
    'apply_scaffolding_connection',
    'Classification',
    'Component',
    'CollapsedDependencyGraph',
    'DependencyGraphScaffoldingOverlay',
    'DijkstraScaffolderStrategy',
    'FrozenPlanError',
    'InternalInconsistency',
    'PlaceOrderDependencyGraph',
    'PlanOptions',
    'PlannerState',
    'Scaffolder',
    'ScaffolderConfig',
    'ScaffolderStrategy',
    'ScaffoldingError',
    'ScaffoldingOutput',
    'Unconnectable',
    'get_scaffolder_config',
    'set_scaffolder_config',
]
