import pytest

from setupwiz.mapping.draft import DEFAULT_DRAFT, select_performance_tier, update_draft
from setupwiz.presets.resolver import resolve_effective_preset
from setupwiz.tuning import tables
from setupwiz.tuning.builder import (
    allocator_profile_for,
    apply_captcha_preheat_mode,
    build_tuning_plan,
    every_minutes_cron,
    tier_row,
)
from setupwiz.tuning.models import CaptchaPreheatTuning, ConcurrencyVariants


def _plan(tier: str, profile: str = "heavy", **changes):
    draft = update_draft(select_performance_tier(DEFAULT_DRAFT, tier), load_profile=profile, **changes)
    return build_tuning_plan(draft, resolve_effective_preset(draft))


def test_every_minutes_cron_has_floor_of_one() -> None:
    assert every_minutes_cron(6) == "0 */6 * * * *"
    assert every_minutes_cron(0) == "0 */1 * * * *"
    assert every_minutes_cron(-5) == "0 */1 * * * *"


def test_tier_row_prefers_heavy_only_for_profile_tiers() -> None:
    base = {"extreme-low": 1, "low": 2, "medium": 3, "good": 4}
    heavy = {"good": 40, "low": 20}
    assert tier_row(base, heavy, "good", True) == 40
    assert tier_row(base, heavy, "good", False) == 4
    assert tier_row(base, heavy, "medium", True) == 3
    assert tier_row(base, heavy, "low", True) == 2
    assert tier_row(base, heavy, "unknown", False) == 1


def test_good_heavy_plan() -> None:
    plan = _plan("good", "heavy")
    assert plan.db_max_connections == 200
    assert plan.db_min_connections == 20
    assert plan.cache_memory_mb == 384
    assert plan.cache_memory_bytes == 384 * 1024 * 1024
    assert plan.kv == tables.HEAVY_KV["good"]
    assert plan.middleware == tables.HEAVY_MIDDLEWARE["good"]
    assert plan.scheduler.maintenance_cron == "0 */10 * * * *"
    assert plan.allocator_profile == "throughput"
    assert plan.log_enable_async is True
    assert plan.plus_startup_parallelism.throughput == 6


def test_compression_disabled_collapses_variants() -> None:
    plan = _plan("good", "heavy")
    assert plan.compression_concurrency == ConcurrencyVariants(1, 1, 1)
    assert plan.compression_max_cpu_threads == ConcurrencyVariants(1, 1, 1)
    assert plan.vfs_batch_max_concurrent_tasks == ConcurrencyVariants(1, 1, 6)


def test_compression_enabled_uses_tier_variants() -> None:
    plan = _plan("good", "light")
    assert plan.compression_concurrency == ConcurrencyVariants(4, 1, 6)
    assert plan.compression_max_cpu_threads == ConcurrencyVariants(3, 1, 6)
    assert plan.vfs_batch_max_concurrent_tasks == ConcurrencyVariants(6, 1, 8)
    assert plan.file_index_max_concurrent_refresh == ConcurrencyVariants(5, 1, 8)


def test_protocol_servers_follow_features() -> None:
    servers = _plan("good", "heavy").protocol_servers
    assert (servers.sftp_max_connections, servers.sftp_worker_threads) == (100, 4)
    assert servers.ftp_max_connections == 1
    assert servers.s3_max_connections == 100

    servers = _plan("medium", "light").protocol_servers
    assert servers.ftp_max_connections == 20
    assert (servers.sftp_max_connections, servers.sftp_worker_threads) == (1, 1)


def test_heavy_cache_bonus_only_on_profile_tiers() -> None:
    assert _plan("medium", "heavy").cache_memory_mb == 48
    assert _plan("medium", "light").cache_memory_mb == 32
    assert _plan("low", "heavy").cache_memory_mb == 16


def test_embedded_db_plan_for_extreme_low() -> None:
    plan = _plan("extreme-low")
    assert plan.db_max_connections == 2
    assert plan.db_min_connections == 1
    assert plan.embedded_db.cache_size == 256
    assert plan.embedded_db.mmap_size == 32 * 1024 * 1024
    assert plan.allocator_profile == "low_memory"
    assert plan.log_enable_async is False


def test_min_connections_for_postgres_never_below_one() -> None:
    plan = _plan("extreme-low", database_type="postgres")
    assert plan.db_max_connections == 2
    assert plan.db_min_connections == 1


@pytest.mark.parametrize(
    ("mode", "expected"),
    [
        ("balanced", CaptchaPreheatTuning(300, 4, 8, 1, 3)),
        ("memory", CaptchaPreheatTuning(180, 3, 7, 2, 2)),
        ("throughput", CaptchaPreheatTuning(420, 5, 10, 1, 4)),
    ],
)
def test_captcha_preheat_modes_good_heavy(mode, expected) -> None:
    assert _plan("good", "heavy", captcha_preheat_mode=mode).captcha_preheat == expected


def test_captcha_memory_mode_respects_pool_floor() -> None:
    base = tables.CAPTCHA_PREHEAT["extreme-low"]
    shrunk = apply_captcha_preheat_mode(base, "memory")
    assert shrunk.graphic_cache_size == 20
    assert shrunk.graphic_gen_concurrency == 1
    assert shrunk.pool_check_interval_secs == 6


def test_allocator_profile_for() -> None:
    assert allocator_profile_for("low", "heavy") == "low_memory"
    assert allocator_profile_for("good", "heavy") == "throughput"
    assert allocator_profile_for("good", "light") == "balanced"
    assert allocator_profile_for("medium", "heavy") == "balanced"


def test_build_tuning_plan_is_deterministic() -> None:
    for tier in ("extreme-low", "low", "medium", "good"):
        for profile in ("light", "heavy"):
            assert _plan(tier, profile) == _plan(tier, profile)


def test_unknown_tier_builds_lowest_tier_plan() -> None:
    draft = update_draft(
        DEFAULT_DRAFT, performance_tier="mystery", database_type="sqlite", captcha_preheat_mode="memory"
    )
    plan = build_tuning_plan(draft, resolve_effective_preset(draft))
    assert plan == _plan("extreme-low", database_type="sqlite")
