"""
Performance tier catalog and preset resolution.
"""

from .constants import (
    LOAD_PROFILE_PRESETS,
    PERFORMANCE_PRESETS,
    PERFORMANCE_TIERS,
)
from .models import EffectivePreset, FeatureFlags, LoadProfileOverride, PerformancePreset
from .resolver import (
    get_preset,
    normalize_runtime_os,
    recommended_allocator_policy,
    resolve_effective_preset,
)

__all__ = [
    "LOAD_PROFILE_PRESETS",
    "PERFORMANCE_PRESETS",
    "PERFORMANCE_TIERS",
    "EffectivePreset",
    "FeatureFlags",
    "LoadProfileOverride",
    "PerformancePreset",
    "get_preset",
    "normalize_runtime_os",
    "recommended_allocator_policy",
    "resolve_effective_preset",
]
