"""
Static preset catalog: performance tiers and load-profile overrides.
"""

from __future__ import annotations

from typing import Dict

from .models import (
    FeatureFlags,
    LoadProfileOverride,
    PerformancePreset,
    PresetRecommendations,
)


PERFORMANCE_TIERS: tuple[str, ...] = ("extreme-low", "low", "medium", "good")
LOW_MEMORY_TIERS: frozenset[str] = frozenset({"extreme-low", "low"})
LOAD_PROFILE_TIERS: frozenset[str] = frozenset({"medium", "good"})

LOAD_PROFILES: tuple[str, ...] = ("light", "heavy")
CAPTCHA_PREHEAT_MODES: tuple[str, ...] = ("memory", "balanced", "throughput")
DATABASE_TYPES: tuple[str, ...] = ("postgres", "sqlite")
CACHE_TYPES: tuple[str, ...] = ("valkey", "redis", "keydb", "dashmap", "database")
ALLOCATOR_POLICIES: tuple[str, ...] = ("system", "mimalloc", "jemalloc")
ALLOCATOR_PROFILES: tuple[str, ...] = ("low_memory", "balanced", "throughput")

_LOW_TIER_FEATURES = FeatureFlags(
    compression=False,
    sftp=False,
    ftp=False,
    webdav=True,
    s3=False,
    bloom_warmup=False,
    chat=False,
    email=False,
)

_ALL_FEATURES = FeatureFlags(
    compression=True,
    sftp=True,
    ftp=True,
    webdav=True,
    s3=True,
    bloom_warmup=True,
    chat=True,
    email=True,
)

# Ordered from lowest to highest capability; the first entry is the fallback.
PERFORMANCE_PRESETS: tuple[PerformancePreset, ...] = (
    PerformancePreset(
        tier="extreme-low",
        label="Extreme low",
        description="Single-board computers and tiny VPS instances",
        recommendations=PresetRecommendations(
            database_type="sqlite",
            cache_type="database",
            max_connections=2,
            cache_memory_mb=4,
        ),
        features=_LOW_TIER_FEATURES,
    ),
    PerformancePreset(
        tier="low",
        label="Low",
        description="Small home servers with limited memory",
        recommendations=PresetRecommendations(
            database_type="sqlite",
            cache_type="database",
            max_connections=5,
            cache_memory_mb=16,
        ),
        features=_LOW_TIER_FEATURES,
    ),
    PerformancePreset(
        tier="medium",
        label="Medium",
        description="Typical NAS or desktop-class hardware",
        recommendations=PresetRecommendations(
            database_type="sqlite",
            cache_type="database",
            max_connections=20,
            cache_memory_mb=32,
        ),
        features=FeatureFlags(
            compression=False,
            sftp=False,
            ftp=False,
            webdav=True,
            s3=False,
            bloom_warmup=True,
            chat=False,
            email=False,
        ),
    ),
    PerformancePreset(
        tier="good",
        label="Good",
        description="Dedicated servers with a separate database and cache",
        recommendations=PresetRecommendations(
            database_type="postgres",
            cache_type="valkey",
            max_connections=100,
            cache_memory_mb=256,
        ),
        features=_ALL_FEATURES,
    ),
)

LOAD_PROFILE_PRESETS: Dict[str, Dict[str, LoadProfileOverride]] = {
    "medium": {
        "light": LoadProfileOverride(
            max_connections=20,
            features=FeatureFlags(
                compression=False,
                sftp=False,
                ftp=True,
                webdav=True,
                s3=False,
                bloom_warmup=True,
                chat=True,
                email=False,
            ),
        ),
        "heavy": LoadProfileOverride(
            max_connections=30,
            features=_LOW_TIER_FEATURES,
        ),
    },
    "good": {
        "light": LoadProfileOverride(
            max_connections=50,
            features=_ALL_FEATURES,
        ),
        "heavy": LoadProfileOverride(
            max_connections=200,
            features=FeatureFlags(
                compression=False,
                sftp=True,
                ftp=False,
                webdav=True,
                s3=True,
                bloom_warmup=False,
                chat=False,
                email=False,
            ),
        ),
    },
}
