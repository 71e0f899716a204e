"""Core data structures for the scaffolding planner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ScaffoldingError(RuntimeError):
    """Base class for failures raised by a planning session."""


class InternalInconsistency(ScaffoldingError):
    """An invariant of the planner was violated.

    Raised for malformed strategy paths, redirect-chain corruption, or a root
    set that disagrees with a full rescan. Never retried.
    """


class FrozenPlanError(ScaffoldingError):
    """A converged plan was asked to change."""


class Unconnectable(ScaffoldingError):
    """No remaining root could be connected during a full pass."""

    def __init__(self, message: str, roots: int = 0):
        super().__init__(message)
        self.roots = roots


class Classification(Enum):
    REAL = "real"
    SCAFFOLDING = "scaffolding"
    AIR = "air"


class ComponentKind(Enum):
    TRIVIAL = "trivial"
    MERGED = "merged"


class PlannerState(Enum):
    CONVERGING = "converging"
    CONVERGED = "converged"
    FAILED = "failed"


@dataclass
class ScaffolderConfig:
    """Process-wide defaults for planning sessions."""

    debug_checks: bool = False


@dataclass
class PlanOptions:
    """Planner façade options."""

    max_scaffolding: Optional[int] = None
    debug_checks: Optional[bool] = None


__all__ = [
    "Classification",
    "ComponentKind",
    "FrozenPlanError",
    "InternalInconsistency",
    "PlanOptions",
    "PlannerState",
    "ScaffolderConfig",
    "ScaffoldingError",
    "Unconnectable",
]
