"""
Owned tree paths and the values the wizard writes to them.

Both the apply step and the preview read from these lists, so what the
preview shows is exactly what gets written.
"""

from __future__ import annotations

from typing import Any, List, Tuple

from setupwiz.presets.models import EffectivePreset
from setupwiz.tuning.models import PerformanceTuningPlan
from setupwiz.tuning.tables import (
    CRITICAL_TASK_KEYS,
    LOW_PRIORITY_TASK_KEYS,
    MAINTENANCE_TASK_KEYS,
)

from .draft import DEFAULT_DRAFT, Draft

OwnedWrite = Tuple[str, Any]

DEFAULT_KEY_PREFIX = "fileuni:"
SQLITE_TEMP_STORE_MEMORY = 2

# Owned paths whose value comes from host recommendation rather than the draft.
HOST_DERIVED_PATHS: frozenset[str] = frozenset({"memory_allocator.policy"})


def non_empty(value: str, fallback: str) -> str:
    text = (value or "").strip()
    return text or fallback


def positive_int(value: str, fallback: str) -> int:
    """Parse user text as a positive integer, else use the fallback text."""
    try:
        parsed = int(str(value).strip())
    except ValueError:
        parsed = 0
    return parsed if parsed > 0 else int(fallback)


def draft_writes(draft: Draft) -> List[OwnedWrite]:
    """Values copied from draft fields that are not part of the tuning plan."""
    return [
        ("database.postgres_config.database_dsn", non_empty(draft.postgres_dsn, DEFAULT_DRAFT.postgres_dsn)),
        ("database.sqlite_config.database_dsn", non_empty(draft.sqlite_dsn, DEFAULT_DRAFT.sqlite_dsn)),
        (
            "database.health_check_timeout_seconds",
            positive_int(draft.db_health_timeout_seconds, DEFAULT_DRAFT.db_health_timeout_seconds),
        ),
        ("fast_kv_storage_hub.redis_url", non_empty(draft.cache_redis_url, DEFAULT_DRAFT.cache_redis_url)),
        ("user_center.enable_registration", draft.enable_registration),
        ("extension_manager.plus.enabled", draft.plus_enabled),
        ("extension_manager.plus.capture_logs", draft.plus_capture_logs),
        ("captcha_code.code_length", positive_int(draft.captcha_code_length, DEFAULT_DRAFT.captcha_code_length)),
        ("captcha_code.expires_in", positive_int(draft.captcha_expires_in, DEFAULT_DRAFT.captcha_expires_in)),
    ]


def tuning_writes(
    draft: Draft,
    effective: EffectivePreset,
    plan: PerformanceTuningPlan,
    allocator_policy: str,
) -> List[OwnedWrite]:
    """
    Every tuning-plan and feature-flag value with its full dotted path.
    """
    features = effective.features
    middleware = plan.middleware
    scheduler = plan.scheduler
    writes: List[OwnedWrite] = [("database.db_type", draft.database_type)]

    if draft.database_type == "sqlite":
        writes += [
            ("database.sqlite_config.max_connections", plan.db_max_connections),
            ("database.sqlite_config.min_connections", plan.db_min_connections),
            ("database.sqlite_config.cache_size", plan.embedded_db.cache_size),
            ("database.sqlite_config.temp_store", SQLITE_TEMP_STORE_MEMORY),
            ("database.sqlite_config.mmap_size", plan.embedded_db.mmap_size),
        ]
    else:
        writes += [
            ("database.postgres_config.max_connections", plan.db_max_connections),
            ("database.postgres_config.min_connections", plan.db_min_connections),
        ]

    writes += [
        ("fast_kv_storage_hub.kv_type", non_empty(draft.cache_type, DEFAULT_DRAFT.cache_type)),
        ("fast_kv_storage_hub.default_ttl", plan.kv.default_ttl_secs),
        ("fast_kv_storage_hub.condition_ttl", plan.kv.condition_ttl_secs),
        ("fast_kv_storage_hub.dashmap_mem_upper_limit_ratio", plan.kv.dashmap_upper_limit_ratio),
        ("fast_kv_storage_hub.dashmap_mem_max_bytes", plan.cache_memory_bytes),
        ("internal_notify.unread_count_cache_ttl", plan.notify.unread_count_cache_ttl_secs),
        ("internal_notify.retention_days", plan.notify.retention_days),
        ("system_backup.max_backup_size_mb", plan.system_backup_max_size_mb),
        ("middleware.ip_rate_limit.window_secs", middleware.ip_window_secs),
        ("middleware.ip_rate_limit.max_requests", middleware.ip_max_requests),
        ("middleware.client_id_rate_limit.window_secs", middleware.client_window_secs),
        ("middleware.client_id_rate_limit.max_requests", middleware.client_max_requests),
        ("middleware.client_id_rate_limit.max_cid", middleware.client_max_cid),
        ("middleware.client_id_rate_limit.client_id_blacklist_enabled", False),
        ("middleware.user_id_rate_limit.window_secs", middleware.user_window_secs),
        ("middleware.user_id_rate_limit.max_requests", middleware.user_max_requests),
        ("middleware.user_id_rate_limit.max_userid", middleware.user_max_id),
        ("middleware.user_id_rate_limit.user_id_blacklist_enabled", False),
        ("middleware.brute_force.enabled", middleware.brute_force_enabled),
        ("middleware.brute_force.max_failures_per_user_ip", middleware.brute_force_max_failures_per_user_ip),
        ("middleware.brute_force.max_failures_per_ip_global", middleware.brute_force_max_failures_per_ip_global),
        ("middleware.brute_force.lockout_secs", middleware.brute_force_lockout_secs),
        ("middleware.brute_force.enable_exponential_backoff", middleware.brute_force_backoff_enabled),
        ("captcha_code.graphic_cache_size", plan.captcha_preheat.graphic_cache_size),
        ("captcha_code.graphic_gen_concurrency", plan.captcha_preheat.graphic_gen_concurrency),
        ("captcha_code.max_gen_concurrency", plan.captcha_preheat.max_gen_concurrency),
        ("captcha_code.pool_check_interval_secs", plan.captcha_preheat.pool_check_interval_secs),
        ("captcha_code.emergency_fill_multiplier", plan.captcha_preheat.emergency_fill_multiplier),
        ("memory_allocator.policy", allocator_policy),
        ("memory_allocator.profile", plan.allocator_profile),
        ("extension_manager.plus.startup_parallelism_low_memory", plan.plus_startup_parallelism.low_memory),
        ("extension_manager.plus.startup_parallelism_throughput", plan.plus_startup_parallelism.throughput),
        ("vfs_storage_hub.enable_webdav", features.webdav),
        ("vfs_storage_hub.enable_sftp", features.sftp),
        ("vfs_storage_hub.enable_ftp", features.ftp),
        ("vfs_storage_hub.enable_s3", features.s3),
        ("vfs_storage_hub.max_concurrent_tasks", plan.vfs_batch_max_concurrent_tasks.normal),
    ]

    for prefix, variants in (
        ("vfs_storage_hub.batch_operation.max_concurrent_tasks", plan.vfs_batch_max_concurrent_tasks),
        ("vfs_storage_hub.file_compress.process_manager_max_concurrency", plan.compression_concurrency),
        ("vfs_storage_hub.file_compress.max_cpu_threads", plan.compression_max_cpu_threads),
        ("vfs_storage_hub.file_index.max_concurrent_refresh", plan.file_index_max_concurrent_refresh),
    ):
        writes += [
            (prefix, variants.normal),
            (f"{prefix}_low_memory", variants.low_memory),
            (f"{prefix}_throughput", variants.throughput),
        ]
    writes.append(("vfs_storage_hub.file_compress.enable", features.compression))

    writes += [
        ("task_registry.bloom_filter_warmup.enabled", features.bloom_warmup),
        ("task_registry.bloom_filter_warmup.cron_expression", scheduler.maintenance_cron),
        ("task_registry.bloom_filter_warmup_tuning.reserve_capacity", plan.bloom_warmup.reserve_capacity),
        ("task_registry.bloom_filter_warmup_tuning.max_users_per_run", plan.bloom_warmup.max_users_per_run),
        ("task_registry.bloom_filter_warmup_tuning.yield_every_users", plan.bloom_warmup.yield_every_users),
        ("task_registry.bloom_filter_warmup_tuning.sleep_ms_per_yield", plan.bloom_warmup.sleep_ms_per_yield),
    ]
    for section, batch in (
        ("task_registry.quota_calibration_tuning", plan.quota_calibration),
        ("task_registry.file_index_sync_tuning", plan.file_index_sync),
    ):
        writes += [
            (f"{section}.max_users_per_run", batch.max_users_per_run),
            (f"{section}.yield_every_users", batch.yield_every_users),
            (f"{section}.sleep_ms_per_user", batch.sleep_ms_per_user),
        ]
    writes.append(("task_registry.task_retention_days", plan.task_retention_days))

    for task_keys, cron in (
        (CRITICAL_TASK_KEYS, scheduler.critical_cron),
        (MAINTENANCE_TASK_KEYS, scheduler.maintenance_cron),
        (LOW_PRIORITY_TASK_KEYS, scheduler.low_priority_cron),
        (("database_health_check",), scheduler.health_check_cron),
    ):
        for task_name in task_keys:
            writes += [
                (f"task_registry.{task_name}.enabled", True),
                (f"task_registry.{task_name}.cron_expression", cron),
            ]

    servers = plan.protocol_servers
    writes += [
        ("file_manager_serv_sftp.max_connections", servers.sftp_max_connections),
        ("file_manager_serv_sftp.worker_threads", servers.sftp_worker_threads),
        ("file_manager_serv_ftp.max_connections", servers.ftp_max_connections),
        ("file_manager_serv_s3.max_connections", servers.s3_max_connections),
        ("chat_manager.enabled", features.chat),
        ("email_manager.enabled", features.email),
        ("journal_log.log_retention_days", plan.journal_log.retention_days),
        ("journal_log.batch_size", plan.journal_log.batch_size),
        ("journal_log.flush_interval_ms", plan.journal_log.flush_interval_ms),
        ("journal_log.queue_capacity_multiplier", plan.journal_log.queue_capacity_multiplier),
        ("file_manager_api.webapi_upload_max_file_size", plan.webapi_upload_max_file_size),
        ("log.enable_async", plan.log_enable_async),
    ]
    return writes
