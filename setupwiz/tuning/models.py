"""
Performance tuning plan data models.

A plan is a pure function of an effective preset and a draft; it is never
persisted directly and only exists to be written into a configuration tree.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ConcurrencyVariants:
    """
    Three precomputed concurrency values, one per allocator profile.

    The consuming tree picks the active one at runtime without recomputation.
    """

    normal: int
    low_memory: int
    throughput: int


@dataclass(frozen=True)
class KvTuning:
    default_ttl_secs: int
    condition_ttl_secs: int
    dashmap_upper_limit_ratio: float


@dataclass(frozen=True)
class NotifyTuning:
    unread_count_cache_ttl_secs: int
    retention_days: int


@dataclass(frozen=True)
class EmbeddedDbTuning:
    cache_size: int
    mmap_size: int


@dataclass(frozen=True)
class MiddlewareTuning:
    """Rate-limit windows and brute-force lockout thresholds."""

    ip_window_secs: int
    ip_max_requests: int
    client_window_secs: int
    client_max_requests: int
    client_max_cid: int
    user_window_secs: int
    user_max_requests: int
    user_max_id: int
    brute_force_enabled: bool
    brute_force_max_failures_per_user_ip: int
    brute_force_max_failures_per_ip_global: int
    brute_force_lockout_secs: int
    brute_force_backoff_enabled: bool


@dataclass(frozen=True)
class SchedulerIntervals:
    """Scheduler intervals in minutes, one per task priority class."""

    critical: int
    maintenance: int
    low_priority: int
    health_check: int


@dataclass(frozen=True)
class SchedulerTuning:
    critical_cron: str
    maintenance_cron: str
    low_priority_cron: str
    health_check_cron: str


@dataclass(frozen=True)
class BloomWarmupTuning:
    reserve_capacity: int
    max_users_per_run: int
    yield_every_users: int
    sleep_ms_per_yield: int


@dataclass(frozen=True)
class UserBatchTuning:
    """Pacing for background jobs that walk every user."""

    max_users_per_run: int
    yield_every_users: int
    sleep_ms_per_user: int


@dataclass(frozen=True)
class CaptchaPreheatTuning:
    graphic_cache_size: int
    graphic_gen_concurrency: int
    max_gen_concurrency: int
    pool_check_interval_secs: int
    emergency_fill_multiplier: int


@dataclass(frozen=True)
class JournalLogTuning:
    retention_days: int
    batch_size: int
    flush_interval_ms: int
    queue_capacity_multiplier: int


@dataclass(frozen=True)
class ProtocolServerTuning:
    sftp_max_connections: int
    sftp_worker_threads: int
    ftp_max_connections: int
    s3_max_connections: int


@dataclass(frozen=True)
class StartupParallelism:
    low_memory: int
    throughput: int


@dataclass(frozen=True)
class PerformanceTuningPlan:
    """
    Concrete operational parameters derived from tier, load profile and draft.
    """

    db_max_connections: int
    db_min_connections: int
    embedded_db: EmbeddedDbTuning
    cache_memory_mb: int
    kv: KvTuning
    notify: NotifyTuning
    system_backup_max_size_mb: int
    middleware: MiddlewareTuning
    scheduler: SchedulerTuning
    bloom_warmup: BloomWarmupTuning
    quota_calibration: UserBatchTuning
    file_index_sync: UserBatchTuning
    captcha_preheat: CaptchaPreheatTuning
    vfs_batch_max_concurrent_tasks: ConcurrencyVariants
    file_index_max_concurrent_refresh: ConcurrencyVariants
    compression_concurrency: ConcurrencyVariants
    compression_max_cpu_threads: ConcurrencyVariants
    task_retention_days: int
    journal_log: JournalLogTuning
    webapi_upload_max_file_size: int
    log_enable_async: bool
    protocol_servers: ProtocolServerTuning
    plus_startup_parallelism: StartupParallelism
    allocator_profile: str

    @property
    def cache_memory_bytes(self) -> int:
        return self.cache_memory_mb * 1024 * 1024
