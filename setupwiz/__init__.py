from __future__ import annotations

from importlib import import_module
from typing import Any

__version__ = "0.1.0"

_LAZY_EXPORTS = {
    "apply_draft": ("setupwiz.mapping", "apply_draft"),
    "build_tuning_plan": ("setupwiz.tuning", "build_tuning_plan"),
    "extract_draft": ("setupwiz.mapping", "extract_draft"),
    "resolve_effective_preset": ("setupwiz.presets", "resolve_effective_preset"),
    "ReconciliationController": ("setupwiz.controller", "ReconciliationController"),
}

__all__ = [
    "__version__",
    "apply_draft",
    "build_tuning_plan",
    "extract_draft",
    "resolve_effective_preset",
    "ReconciliationController",
]


def __getattr__(name: str) -> Any:
    if name in _LAZY_EXPORTS:
        module_name, attr_name = _LAZY_EXPORTS[name]
        module = import_module(module_name)
        value = getattr(module, attr_name)
        globals()[name] = value
        return value
    raise AttributeError(f"module 'setupwiz' has no attribute '{name}'")
