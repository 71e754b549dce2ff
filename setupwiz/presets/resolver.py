"""
Preset resolution and host-based allocator recommendation.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Mapping, Optional, Sequence

from setupwiz.logging import get_logger

from .constants import LOAD_PROFILE_PRESETS, LOAD_PROFILE_TIERS, PERFORMANCE_PRESETS
from .models import EffectivePreset, LoadProfileOverride, PerformancePreset

if TYPE_CHECKING:
    from setupwiz.mapping.draft import Draft

logger = get_logger(__name__)


def get_preset(
    tier: str,
    presets: Sequence[PerformancePreset] = PERFORMANCE_PRESETS,
) -> PerformancePreset:
    """
    Look up a tier in the catalog.

    Unknown tiers fall back to the lowest-capability entry.
    """
    for preset in presets:
        if preset.tier == tier:
            return preset
    if not presets:
        raise ValueError("Preset catalog must contain at least one tier")
    logger.debug("Unknown performance tier %r; using %r", tier, presets[0].tier)
    return presets[0]


def resolve_effective_preset(
    draft: "Draft",
    presets: Sequence[PerformancePreset] = PERFORMANCE_PRESETS,
    load_profiles: Mapping[str, Mapping[str, LoadProfileOverride]] = LOAD_PROFILE_PRESETS,
) -> EffectivePreset:
    """
    Fold the draft's load profile onto its performance tier.

    For ``medium`` and ``good`` a matching load-profile entry replaces the
    tier's connection budget and feature flags; every other case keeps the
    tier's own values. This is the only place feature flags are decided.
    """
    preset = get_preset(draft.performance_tier, presets)
    if preset.tier in LOAD_PROFILE_TIERS:
        override = load_profiles.get(preset.tier, {}).get(draft.load_profile)
        if override is not None:
            return EffectivePreset(
                preset=preset,
                max_connections=override.max_connections,
                features=override.features,
            )
    return EffectivePreset(
        preset=preset,
        max_connections=preset.recommendations.max_connections,
        features=preset.features,
    )


def normalize_runtime_os(value: Optional[str]) -> str:
    """Normalize a host OS name to linux/windows/macos/freebsd/unknown."""
    normalized = str(value or "").strip().lower()
    if normalized == "linux":
        return "linux"
    if normalized in {"windows", "win32"}:
        return "windows"
    if normalized in {"macos", "darwin", "mac"}:
        return "macos"
    if normalized == "freebsd":
        return "freebsd"
    return "unknown"


def infer_local_runtime_os(platform: Optional[str] = None) -> str:
    """Sniff the local platform string when the host did not report its OS."""
    value = (platform if platform is not None else sys.platform).lower()
    if "linux" in value:
        return "linux"
    if "win" in value and "darwin" not in value:
        return "windows"
    if "mac" in value or "darwin" in value:
        return "macos"
    if "freebsd" in value:
        return "freebsd"
    return "unknown"


def effective_runtime_os(runtime_os: Optional[str]) -> str:
    normalized = normalize_runtime_os(runtime_os)
    if normalized == "unknown":
        return infer_local_runtime_os()
    return normalized


def recommended_allocator_policy(runtime_os: Optional[str]) -> str:
    """
    Recommend a memory allocator policy for the host OS.

    Linux gets ``jemalloc``; every other platform gets ``mimalloc``.
    """
    return "jemalloc" if effective_runtime_os(runtime_os) == "linux" else "mimalloc"
