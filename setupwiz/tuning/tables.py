"""
Per-concern tuning tables.

Each concern has one base row per tier. ``HEAVY_*`` tables hold the rows that
replace the base row when the load profile is ``heavy`` on ``medium`` or
``good``; a tier absent from a heavy table keeps its base row.
"""

from __future__ import annotations

from typing import Dict

from .models import (
    BloomWarmupTuning,
    CaptchaPreheatTuning,
    ConcurrencyVariants,
    EmbeddedDbTuning,
    JournalLogTuning,
    KvTuning,
    MiddlewareTuning,
    NotifyTuning,
    SchedulerIntervals,
    StartupParallelism,
    UserBatchTuning,
)

MIB = 1024 * 1024
GIB = 1024 * MIB

HEAVY_CACHE_MEMORY_FACTOR = 1.5

CRITICAL_TASK_KEYS: tuple[str, ...] = ("process_timeout_check", "interrupted_task_checker")
MAINTENANCE_TASK_KEYS: tuple[str, ...] = (
    "cache_ttl_cleanup",
    "temp_cleanup",
    "quota_calibration",
    "file_index_sync",
    "audit_log_pruning",
    "s3_multipart_cleanup",
    "trash_cleanup",
)
LOW_PRIORITY_TASK_KEYS: tuple[str, ...] = (
    "share_cleanup",
    "domain_ddns_sync_check",
    "domain_acme_renewal_check",
    "notification_cleanup",
    "task_cleanup",
    "system_backup",
)

EMBEDDED_DB: Dict[str, EmbeddedDbTuning] = {
    "extreme-low": EmbeddedDbTuning(cache_size=256, mmap_size=32 * MIB),
    "low": EmbeddedDbTuning(cache_size=512, mmap_size=32 * MIB),
    "medium": EmbeddedDbTuning(cache_size=2048, mmap_size=32 * MIB),
    "good": EmbeddedDbTuning(cache_size=4096, mmap_size=256 * MIB),
}

KV: Dict[str, KvTuning] = {
    "extreme-low": KvTuning(900, 60, 0.6),
    "low": KvTuning(1200, 90, 0.7),
    "medium": KvTuning(1800, 120, 0.85),
    "good": KvTuning(3600, 300, 1.1),
}
HEAVY_KV: Dict[str, KvTuning] = {
    "medium": KvTuning(2400, 180, 0.95),
    "good": KvTuning(7200, 600, 1.3),
}

NOTIFY: Dict[str, NotifyTuning] = {
    "extreme-low": NotifyTuning(300, 30),
    "low": NotifyTuning(600, 45),
    "medium": NotifyTuning(1200, 90),
    "good": NotifyTuning(2400, 90),
}
HEAVY_NOTIFY: Dict[str, NotifyTuning] = {
    "medium": NotifyTuning(1800, 60),
    "good": NotifyTuning(3600, 120),
}

SYSTEM_BACKUP_MAX_SIZE_MB: Dict[str, int] = {
    "extreme-low": 256,
    "low": 512,
    "medium": 1024,
    "good": 4096,
}
HEAVY_SYSTEM_BACKUP_MAX_SIZE_MB: Dict[str, int] = {
    "medium": 2048,
    "good": 8192,
}

MIDDLEWARE: Dict[str, MiddlewareTuning] = {
    "extreme-low": MiddlewareTuning(
        ip_window_secs=60,
        ip_max_requests=60,
        client_window_secs=60,
        client_max_requests=80,
        client_max_cid=80,
        user_window_secs=60,
        user_max_requests=120,
        user_max_id=50,
        brute_force_enabled=True,
        brute_force_max_failures_per_user_ip=3,
        brute_force_max_failures_per_ip_global=10,
        brute_force_lockout_secs=600,
        brute_force_backoff_enabled=True,
    ),
    "low": MiddlewareTuning(
        ip_window_secs=60,
        ip_max_requests=90,
        client_window_secs=60,
        client_max_requests=120,
        client_max_cid=150,
        user_window_secs=60,
        user_max_requests=160,
        user_max_id=80,
        brute_force_enabled=True,
        brute_force_max_failures_per_user_ip=4,
        brute_force_max_failures_per_ip_global=15,
        brute_force_lockout_secs=480,
        brute_force_backoff_enabled=True,
    ),
    "medium": MiddlewareTuning(
        ip_window_secs=60,
        ip_max_requests=180,
        client_window_secs=60,
        client_max_requests=220,
        client_max_cid=700,
        user_window_secs=60,
        user_max_requests=260,
        user_max_id=300,
        brute_force_enabled=True,
        brute_force_max_failures_per_user_ip=5,
        brute_force_max_failures_per_ip_global=20,
        brute_force_lockout_secs=360,
        brute_force_backoff_enabled=True,
    ),
    "good": MiddlewareTuning(
        ip_window_secs=60,
        ip_max_requests=300,
        client_window_secs=60,
        client_max_requests=360,
        client_max_cid=2500,
        user_window_secs=60,
        user_max_requests=420,
        user_max_id=1200,
        brute_force_enabled=True,
        brute_force_max_failures_per_user_ip=6,
        brute_force_max_failures_per_ip_global=24,
        brute_force_lockout_secs=240,
        brute_force_backoff_enabled=True,
    ),
}
HEAVY_MIDDLEWARE: Dict[str, MiddlewareTuning] = {
    "medium": MiddlewareTuning(
        ip_window_secs=60,
        ip_max_requests=220,
        client_window_secs=60,
        client_max_requests=260,
        client_max_cid=1000,
        user_window_secs=60,
        user_max_requests=320,
        user_max_id=500,
        brute_force_enabled=True,
        brute_force_max_failures_per_user_ip=6,
        brute_force_max_failures_per_ip_global=24,
        brute_force_lockout_secs=300,
        brute_force_backoff_enabled=True,
    ),
    "good": MiddlewareTuning(
        ip_window_secs=60,
        ip_max_requests=500,
        client_window_secs=60,
        client_max_requests=600,
        client_max_cid=5000,
        user_window_secs=60,
        user_max_requests=700,
        user_max_id=3000,
        brute_force_enabled=True,
        brute_force_max_failures_per_user_ip=8,
        brute_force_max_failures_per_ip_global=30,
        brute_force_lockout_secs=180,
        brute_force_backoff_enabled=True,
    ),
}

SCHEDULER: Dict[str, SchedulerIntervals] = {
    "extreme-low": SchedulerIntervals(critical=10, maintenance=30, low_priority=60, health_check=15),
    "low": SchedulerIntervals(critical=5, maintenance=20, low_priority=40, health_check=10),
    "medium": SchedulerIntervals(critical=2, maintenance=8, low_priority=20, health_check=3),
    "good": SchedulerIntervals(critical=1, maintenance=6, low_priority=15, health_check=2),
}
HEAVY_SCHEDULER: Dict[str, SchedulerIntervals] = {
    "medium": SchedulerIntervals(critical=2, maintenance=12, low_priority=30, health_check=5),
    "good": SchedulerIntervals(critical=1, maintenance=10, low_priority=20, health_check=3),
}

BLOOM_WARMUP: Dict[str, BloomWarmupTuning] = {
    "extreme-low": BloomWarmupTuning(100_000, 5_000, 20, 8),
    "low": BloomWarmupTuning(200_000, 20_000, 40, 5),
    "medium": BloomWarmupTuning(500_000, 60_000, 100, 2),
    "good": BloomWarmupTuning(1_000_000, 120_000, 150, 0),
}
HEAVY_BLOOM_WARMUP: Dict[str, BloomWarmupTuning] = {
    "medium": BloomWarmupTuning(300_000, 40_000, 80, 3),
    "good": BloomWarmupTuning(600_000, 80_000, 120, 1),
}

QUOTA_CALIBRATION: Dict[str, UserBatchTuning] = {
    "extreme-low": UserBatchTuning(200, 20, 20),
    "low": UserBatchTuning(1000, 40, 10),
    "medium": UserBatchTuning(4000, 80, 4),
    "good": UserBatchTuning(8000, 120, 1),
}
HEAVY_QUOTA_CALIBRATION: Dict[str, UserBatchTuning] = {
    "medium": UserBatchTuning(2500, 60, 6),
    "good": UserBatchTuning(5000, 100, 2),
}

FILE_INDEX_SYNC: Dict[str, UserBatchTuning] = {
    "extreme-low": UserBatchTuning(50, 10, 80),
    "low": UserBatchTuning(300, 20, 50),
    "medium": UserBatchTuning(1000, 40, 20),
    "good": UserBatchTuning(3000, 80, 5),
}
HEAVY_FILE_INDEX_SYNC: Dict[str, UserBatchTuning] = {
    "medium": UserBatchTuning(600, 30, 30),
    "good": UserBatchTuning(1500, 60, 10),
}

CAPTCHA_PREHEAT: Dict[str, CaptchaPreheatTuning] = {
    "extreme-low": CaptchaPreheatTuning(20, 1, 1, 5, 1),
    "low": CaptchaPreheatTuning(50, 2, 2, 3, 2),
    "medium": CaptchaPreheatTuning(80, 2, 3, 2, 2),
    "good": CaptchaPreheatTuning(180, 3, 6, 1, 2),
}
HEAVY_CAPTCHA_PREHEAT: Dict[str, CaptchaPreheatTuning] = {
    "medium": CaptchaPreheatTuning(120, 2, 3, 2, 2),
    "good": CaptchaPreheatTuning(300, 4, 8, 1, 3),
}

CAPTCHA_POOL_FLOOR = 20
CAPTCHA_MEMORY_POOL_RATIO = 0.6
CAPTCHA_THROUGHPUT_POOL_RATIO = 1.4

# Compression-gated rows: used only while the compression feature is enabled.
COMPRESSION_CONCURRENCY: Dict[str, ConcurrencyVariants] = {
    "extreme-low": ConcurrencyVariants(1, 1, 2),
    "low": ConcurrencyVariants(1, 1, 2),
    "medium": ConcurrencyVariants(2, 1, 3),
    "good": ConcurrencyVariants(4, 1, 6),
}
HEAVY_COMPRESSION_CONCURRENCY: Dict[str, ConcurrencyVariants] = {
    "good": ConcurrencyVariants(2, 1, 4),
}

COMPRESSION_MAX_CPU_THREADS: Dict[str, ConcurrencyVariants] = {
    "extreme-low": ConcurrencyVariants(1, 1, 2),
    "low": ConcurrencyVariants(1, 1, 2),
    "medium": ConcurrencyVariants(2, 1, 4),
    "good": ConcurrencyVariants(3, 1, 6),
}
HEAVY_COMPRESSION_MAX_CPU_THREADS: Dict[str, ConcurrencyVariants] = {
    "good": ConcurrencyVariants(4, 1, 8),
}

# Only the ``normal`` variant is compression-gated here.
VFS_BATCH_MAX_CONCURRENT_TASKS: Dict[str, ConcurrencyVariants] = {
    "extreme-low": ConcurrencyVariants(2, 1, 2),
    "low": ConcurrencyVariants(2, 1, 2),
    "medium": ConcurrencyVariants(3, 1, 4),
    "good": ConcurrencyVariants(6, 1, 8),
}
HEAVY_VFS_BATCH_MAX_CONCURRENT_TASKS: Dict[str, ConcurrencyVariants] = {
    "good": ConcurrencyVariants(4, 1, 6),
}

FILE_INDEX_MAX_CONCURRENT_REFRESH: Dict[str, ConcurrencyVariants] = {
    "extreme-low": ConcurrencyVariants(2, 1, 3),
    "low": ConcurrencyVariants(2, 1, 3),
    "medium": ConcurrencyVariants(3, 1, 5),
    "good": ConcurrencyVariants(5, 1, 8),
}
HEAVY_FILE_INDEX_MAX_CONCURRENT_REFRESH: Dict[str, ConcurrencyVariants] = {
    "good": ConcurrencyVariants(6, 1, 10),
}

TASK_RETENTION_DAYS: Dict[str, int] = {
    "extreme-low": 30,
    "low": 30,
    "medium": 45,
    "good": 90,
}

JOURNAL_LOG: Dict[str, JournalLogTuning] = {
    "extreme-low": JournalLogTuning(30, 20, 1800, 2),
    "low": JournalLogTuning(30, 40, 1200, 2),
    "medium": JournalLogTuning(90, 80, 900, 3),
    "good": JournalLogTuning(180, 200, 500, 4),
}
HEAVY_JOURNAL_LOG: Dict[str, JournalLogTuning] = {
    "medium": JournalLogTuning(90, 120, 700, 3),
    "good": JournalLogTuning(180, 400, 300, 4),
}

WEBAPI_UPLOAD_MAX_FILE_SIZE: Dict[str, int] = {
    "extreme-low": 256 * MIB,
    "low": 256 * MIB,
    "medium": 512 * MIB,
    "good": 1 * GIB,
}

# (max_connections, worker_threads) for an enabled protocol server
PROTOCOL_SERVER_LIMITS: Dict[str, tuple[int, int]] = {
    "extreme-low": (20, 2),
    "low": (20, 2),
    "medium": (20, 2),
    "good": (100, 4),
}
DISABLED_PROTOCOL_SERVER_LIMITS: tuple[int, int] = (1, 1)

PLUS_STARTUP_PARALLELISM: Dict[str, StartupParallelism] = {
    "extreme-low": StartupParallelism(low_memory=1, throughput=2),
    "low": StartupParallelism(low_memory=1, throughput=2),
    "medium": StartupParallelism(low_memory=2, throughput=2),
    "good": StartupParallelism(low_memory=2, throughput=4),
}
HEAVY_PLUS_STARTUP_PARALLELISM: Dict[str, StartupParallelism] = {
    "good": StartupParallelism(low_memory=2, throughput=6),
}
