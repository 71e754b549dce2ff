"""
Tuning plan builder.

``build_tuning_plan`` is deterministic and side-effect free: every concern is
looked up in its own tier table (see :mod:`setupwiz.tuning.tables`) and the
rows are combined into one :class:`PerformanceTuningPlan`.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import TYPE_CHECKING, Mapping, TypeVar

from setupwiz.presets.constants import LOAD_PROFILE_TIERS, LOW_MEMORY_TIERS, PERFORMANCE_TIERS
from setupwiz.presets.models import EffectivePreset

from . import tables
from .models import (
    CaptchaPreheatTuning,
    ConcurrencyVariants,
    PerformanceTuningPlan,
    ProtocolServerTuning,
    SchedulerIntervals,
    SchedulerTuning,
)

if TYPE_CHECKING:
    from setupwiz.mapping.draft import Draft

RowT = TypeVar("RowT")

_DISABLED_VARIANTS = ConcurrencyVariants(1, 1, 1)


def every_minutes_cron(minutes: int) -> str:
    """Six-field cron expression firing every ``minutes`` minutes (at least 1)."""
    return f"0 */{max(1, int(minutes))} * * * *"


def tier_row(
    base: Mapping[str, RowT],
    heavy: Mapping[str, RowT],
    tier: str,
    is_heavy: bool,
) -> RowT:
    """
    Pick the row for a tier.

    Heavy rows apply only to load-profile tiers; a missing heavy row keeps
    the base row, and a tier missing from the base table uses the lowest tier.
    """
    if is_heavy and tier in LOAD_PROFILE_TIERS and tier in heavy:
        return heavy[tier]
    if tier in base:
        return base[tier]
    return base[PERFORMANCE_TIERS[0]]


def _scheduler(intervals: SchedulerIntervals) -> SchedulerTuning:
    return SchedulerTuning(
        critical_cron=every_minutes_cron(intervals.critical),
        maintenance_cron=every_minutes_cron(intervals.maintenance),
        low_priority_cron=every_minutes_cron(intervals.low_priority),
        health_check_cron=every_minutes_cron(intervals.health_check),
    )


def apply_captcha_preheat_mode(base: CaptchaPreheatTuning, mode: str) -> CaptchaPreheatTuning:
    """
    Adjust the tier baseline for the selected preheat mode.

    ``memory`` shrinks the pool and concurrency, ``throughput`` grows them and
    ``balanced`` (or anything else) keeps the baseline.
    """
    if mode == "memory":
        return CaptchaPreheatTuning(
            graphic_cache_size=max(
                tables.CAPTCHA_POOL_FLOOR,
                math.floor(base.graphic_cache_size * tables.CAPTCHA_MEMORY_POOL_RATIO),
            ),
            graphic_gen_concurrency=max(1, base.graphic_gen_concurrency - 1),
            max_gen_concurrency=max(1, base.max_gen_concurrency - 1),
            pool_check_interval_secs=max(1, base.pool_check_interval_secs + 1),
            emergency_fill_multiplier=max(1, base.emergency_fill_multiplier - 1),
        )
    if mode == "throughput":
        return CaptchaPreheatTuning(
            graphic_cache_size=max(
                tables.CAPTCHA_POOL_FLOOR,
                math.floor(base.graphic_cache_size * tables.CAPTCHA_THROUGHPUT_POOL_RATIO),
            ),
            graphic_gen_concurrency=max(1, base.graphic_gen_concurrency + 1),
            max_gen_concurrency=max(1, base.max_gen_concurrency + 2),
            pool_check_interval_secs=max(1, base.pool_check_interval_secs - 1),
            emergency_fill_multiplier=max(1, base.emergency_fill_multiplier + 1),
        )
    return base


def _protocol_servers(effective: EffectivePreset) -> ProtocolServerTuning:
    enabled = tables.PROTOCOL_SERVER_LIMITS.get(
        effective.tier, tables.PROTOCOL_SERVER_LIMITS[PERFORMANCE_TIERS[0]]
    )
    disabled = tables.DISABLED_PROTOCOL_SERVER_LIMITS
    features = effective.features
    sftp = enabled if features.sftp else disabled
    return ProtocolServerTuning(
        sftp_max_connections=sftp[0],
        sftp_worker_threads=sftp[1],
        ftp_max_connections=(enabled if features.ftp else disabled)[0],
        s3_max_connections=(enabled if features.s3 else disabled)[0],
    )


def allocator_profile_for(tier: str, load_profile: str) -> str:
    """Allocator profile implied by tier and load profile."""
    if tier in LOW_MEMORY_TIERS:
        return "low_memory"
    if tier == "good" and load_profile == "heavy":
        return "throughput"
    return "balanced"


def build_tuning_plan(draft: "Draft", effective: EffectivePreset) -> PerformanceTuningPlan:
    """
    Compute the tuning plan for a draft and its effective preset.

    Args:
        draft: Wizard draft (tier, load profile, database kind, captcha mode)
        effective: Result of ``resolve_effective_preset`` for the same draft

    Returns:
        Fully populated PerformanceTuningPlan
    """
    tier = effective.tier
    is_heavy = draft.load_profile == "heavy"
    compression = effective.features.compression

    cache_memory_mb = effective.preset.recommendations.cache_memory_mb
    if tier in LOAD_PROFILE_TIERS and is_heavy:
        cache_memory_mb = int(round(cache_memory_mb * tables.HEAVY_CACHE_MEMORY_FACTOR))

    max_connections = effective.max_connections
    if draft.database_type == "postgres":
        min_connections = max(1, math.floor(max_connections * 0.1))
    else:
        min_connections = 1

    captcha_base = tier_row(tables.CAPTCHA_PREHEAT, tables.HEAVY_CAPTCHA_PREHEAT, tier, is_heavy)

    compression_concurrency = _DISABLED_VARIANTS
    compression_threads = _DISABLED_VARIANTS
    vfs_batch = tier_row(
        tables.VFS_BATCH_MAX_CONCURRENT_TASKS,
        tables.HEAVY_VFS_BATCH_MAX_CONCURRENT_TASKS,
        tier,
        is_heavy,
    )
    if compression:
        compression_concurrency = tier_row(
            tables.COMPRESSION_CONCURRENCY, tables.HEAVY_COMPRESSION_CONCURRENCY, tier, is_heavy
        )
        compression_threads = tier_row(
            tables.COMPRESSION_MAX_CPU_THREADS, tables.HEAVY_COMPRESSION_MAX_CPU_THREADS, tier, is_heavy
        )
    else:
        vfs_batch = replace(vfs_batch, normal=1)

    return PerformanceTuningPlan(
        db_max_connections=max_connections,
        db_min_connections=min_connections,
        embedded_db=tier_row(tables.EMBEDDED_DB, {}, tier, is_heavy),
        cache_memory_mb=cache_memory_mb,
        kv=tier_row(tables.KV, tables.HEAVY_KV, tier, is_heavy),
        notify=tier_row(tables.NOTIFY, tables.HEAVY_NOTIFY, tier, is_heavy),
        system_backup_max_size_mb=tier_row(
            tables.SYSTEM_BACKUP_MAX_SIZE_MB, tables.HEAVY_SYSTEM_BACKUP_MAX_SIZE_MB, tier, is_heavy
        ),
        middleware=tier_row(tables.MIDDLEWARE, tables.HEAVY_MIDDLEWARE, tier, is_heavy),
        scheduler=_scheduler(tier_row(tables.SCHEDULER, tables.HEAVY_SCHEDULER, tier, is_heavy)),
        bloom_warmup=tier_row(tables.BLOOM_WARMUP, tables.HEAVY_BLOOM_WARMUP, tier, is_heavy),
        quota_calibration=tier_row(
            tables.QUOTA_CALIBRATION, tables.HEAVY_QUOTA_CALIBRATION, tier, is_heavy
        ),
        file_index_sync=tier_row(tables.FILE_INDEX_SYNC, tables.HEAVY_FILE_INDEX_SYNC, tier, is_heavy),
        captcha_preheat=apply_captcha_preheat_mode(captcha_base, draft.captcha_preheat_mode),
        vfs_batch_max_concurrent_tasks=vfs_batch,
        file_index_max_concurrent_refresh=tier_row(
            tables.FILE_INDEX_MAX_CONCURRENT_REFRESH,
            tables.HEAVY_FILE_INDEX_MAX_CONCURRENT_REFRESH,
            tier,
            is_heavy,
        ),
        compression_concurrency=compression_concurrency,
        compression_max_cpu_threads=compression_threads,
        task_retention_days=tier_row(tables.TASK_RETENTION_DAYS, {}, tier, is_heavy),
        journal_log=tier_row(tables.JOURNAL_LOG, tables.HEAVY_JOURNAL_LOG, tier, is_heavy),
        webapi_upload_max_file_size=tier_row(tables.WEBAPI_UPLOAD_MAX_FILE_SIZE, {}, tier, is_heavy),
        log_enable_async=tier == "good",
        protocol_servers=_protocol_servers(effective),
        plus_startup_parallelism=tier_row(
            tables.PLUS_STARTUP_PARALLELISM, tables.HEAVY_PLUS_STARTUP_PARALLELISM, tier, is_heavy
        ),
        allocator_profile=allocator_profile_for(tier, draft.load_profile),
    )
