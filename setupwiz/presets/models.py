"""
Preset data models for performance tiers and load profiles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


PerformanceTier = Literal["extreme-low", "low", "medium", "good"]
LoadProfile = Literal["light", "heavy"]
DatabaseType = Literal["postgres", "sqlite"]


@dataclass(frozen=True)
class FeatureFlags:
    """
    Feature switches decided by the effective preset.
    """

    compression: bool = False
    sftp: bool = False
    ftp: bool = False
    webdav: bool = True
    s3: bool = False
    bloom_warmup: bool = False
    """Scheduled index (bloom filter) warmup."""
    chat: bool = False
    email: bool = False

    @property
    def remote_protocols(self) -> dict[str, bool]:
        """Remote-filesystem protocol and object storage switches."""
        return {"sftp": self.sftp, "ftp": self.ftp, "webdav": self.webdav, "s3": self.s3}


@dataclass(frozen=True)
class PresetRecommendations:
    """Resources a tier recommends when it is selected."""

    database_type: DatabaseType
    cache_type: str
    max_connections: int
    cache_memory_mb: int


@dataclass(frozen=True)
class PerformancePreset:
    """
    Immutable catalog entry for one performance tier.
    """

    tier: PerformanceTier
    label: str
    description: str
    recommendations: PresetRecommendations
    features: FeatureFlags


@dataclass(frozen=True)
class LoadProfileOverride:
    """Connection budget and features that replace a tier's own values."""

    max_connections: int
    features: FeatureFlags


@dataclass(frozen=True)
class EffectivePreset:
    """
    A tier with its load profile folded in.

    Recomputed on every read and never stored.
    """

    preset: PerformancePreset
    max_connections: int
    features: FeatureFlags

    @property
    def tier(self) -> PerformanceTier:
        return self.preset.tier
