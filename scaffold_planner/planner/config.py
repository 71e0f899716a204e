"""Configuration helpers for planning sessions."""

from __future__ import annotations

import copy

from .model import ScaffolderConfig

_SCAFFOLDER_CONFIG = ScaffolderConfig()


def get_scaffolder_config() -> ScaffolderConfig:
    return copy.deepcopy(_SCAFFOLDER_CONFIG)


def set_scaffolder_config(config: ScaffolderConfig) -> None:
    global _SCAFFOLDER_CONFIG
    _SCAFFOLDER_CONFIG = copy.deepcopy(config)
