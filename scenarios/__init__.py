"""Scenario modules and the rule registry."""

from __future__ import annotations

import importlib

from .registry import MODULE_NAMES, SCENARIO_REGISTRY, scenarios_for_service

__all__ = ["SCENARIO_REGISTRY", "scenarios_for_service"]

for module_name in MODULE_NAMES:
    module = importlib.import_module(module_name)
    short_name = module_name.rsplit(".", 1)[-1]
    globals()[short_name] = module
    __all__.append(short_name)
