import copy
from dataclasses import replace

import pytest

from setupwiz.mapping.apply import apply_draft
from setupwiz.mapping.draft import DEFAULT_DRAFT, select_performance_tier, update_draft
from setupwiz.mapping.extract import extract_draft
from setupwiz.mapping.tree import get_value
from setupwiz.presets.constants import CAPTCHA_PREHEAT_MODES, LOAD_PROFILES, PERFORMANCE_TIERS
from setupwiz.presets.resolver import resolve_effective_preset
from setupwiz.tuning.builder import build_tuning_plan


def _plan(draft):
    return build_tuning_plan(draft, resolve_effective_preset(draft))


def test_apply_does_not_mutate_input(foreign_tree, good_heavy_draft) -> None:
    before = copy.deepcopy(foreign_tree)
    apply_draft(foreign_tree, good_heavy_draft, "jemalloc")
    assert foreign_tree == before


def test_apply_preserves_foreign_keys(foreign_tree, good_heavy_draft) -> None:
    result = apply_draft(foreign_tree, good_heavy_draft, "jemalloc")
    assert result["server"] == foreign_tree["server"]
    assert result["log"]["level"] == "info"
    assert result["database"]["postgres_config"]["statement_timeout"] == 30
    assert list(result)[: len(foreign_tree)] == list(foreign_tree)


def test_apply_keeps_existing_list_and_key_prefix(foreign_tree, good_heavy_draft) -> None:
    kv = apply_draft(foreign_tree, good_heavy_draft, "jemalloc")["fast_kv_storage_hub"]
    assert kv["dashmap_indexed_prefixes"] == ["user:"]
    assert kv["key_prefix"] == "custom:"


def test_apply_creates_defaults_for_absent_or_blank_values(good_heavy_draft) -> None:
    kv = apply_draft({}, good_heavy_draft, "jemalloc")["fast_kv_storage_hub"]
    assert kv["dashmap_indexed_prefixes"] == []
    assert kv["key_prefix"] == "fileuni:"

    tree = {"fast_kv_storage_hub": {"key_prefix": "   ", "dashmap_indexed_prefixes": "bad"}}
    kv = apply_draft(tree, good_heavy_draft, "jemalloc")["fast_kv_storage_hub"]
    assert kv["key_prefix"] == "fileuni:"
    assert kv["dashmap_indexed_prefixes"] == []


def test_apply_writes_plan_values(good_heavy_draft) -> None:
    tree = apply_draft({}, good_heavy_draft, "jemalloc")
    assert get_value(tree, "database.db_type") == "postgres"
    assert get_value(tree, "database.postgres_config.max_connections") == 200
    assert get_value(tree, "database.postgres_config.min_connections") == 20
    assert get_value(tree, "fast_kv_storage_hub.dashmap_mem_max_bytes") == 384 * 1024 * 1024
    assert get_value(tree, "memory_allocator.policy") == "jemalloc"
    assert get_value(tree, "memory_allocator.profile") == "throughput"
    assert get_value(tree, "vfs_storage_hub.enable_sftp") is True
    assert get_value(tree, "vfs_storage_hub.file_compress.enable") is False
    assert get_value(tree, "task_registry.trash_cleanup.cron_expression") == "0 */10 * * * *"
    assert get_value(tree, "task_registry.database_health_check.enabled") is True
    assert get_value(tree, "middleware.client_id_rate_limit.client_id_blacklist_enabled") is False
    assert get_value(tree, "log.enable_async") is True
    assert get_value(tree, "database.sqlite_config.max_connections") is None


def test_apply_embedded_database(extreme_low_draft) -> None:
    tree = apply_draft({}, extreme_low_draft, "mimalloc")
    sqlite = tree["database"]["sqlite_config"]
    assert sqlite["database_dsn"] == "sqlite://./fileuni.db"
    assert sqlite["temp_store"] == 2
    assert sqlite["max_connections"] == 2
    assert tree["fast_kv_storage_hub"]["kv_type"] == "database"
    assert "max_connections" not in tree["database"]["postgres_config"]


def test_apply_invalid_numeric_text_uses_defaults() -> None:
    draft = update_draft(DEFAULT_DRAFT, db_health_timeout_seconds="soon", captcha_code_length="-1", captcha_expires_in="")
    tree = apply_draft({}, draft, "mimalloc")
    assert tree["database"]["health_check_timeout_seconds"] == 5
    assert tree["captcha_code"]["code_length"] == 6
    assert tree["captcha_code"]["expires_in"] == 300


def test_apply_blank_connection_strings_use_defaults() -> None:
    draft = update_draft(DEFAULT_DRAFT, cache_type=" ")
    draft = replace(draft, postgres_dsn="", cache_redis_url="")
    tree = apply_draft({}, draft, "mimalloc")
    assert tree["database"]["postgres_config"]["database_dsn"] == DEFAULT_DRAFT.postgres_dsn
    assert tree["fast_kv_storage_hub"]["redis_url"] == DEFAULT_DRAFT.cache_redis_url
    assert tree["fast_kv_storage_hub"]["kv_type"] == "valkey"


def test_apply_unknown_tier_falls_back_without_error() -> None:
    draft = update_draft(DEFAULT_DRAFT, performance_tier="ultra")
    tree = apply_draft({}, draft, "mimalloc")
    assert tree["memory_allocator"]["profile"] == "low_memory"


def test_apply_replaces_non_mapping_sections(good_heavy_draft) -> None:
    tree = apply_draft({"middleware": "legacy", "log": None}, good_heavy_draft, "mimalloc")
    assert tree["middleware"]["brute_force"]["enabled"] is True
    assert tree["log"] == {"enable_async": True}


def test_apply_is_idempotent(foreign_tree, good_heavy_draft, extreme_low_draft) -> None:
    for draft in (good_heavy_draft, extreme_low_draft):
        once = apply_draft(foreign_tree, draft, "jemalloc")
        twice = apply_draft(once, draft, "jemalloc")
        assert twice == once


@pytest.mark.parametrize("tier", PERFORMANCE_TIERS)
@pytest.mark.parametrize("database_type", ["postgres", "sqlite"])
def test_round_trip_recovers_tuning_plan(tier, database_type) -> None:
    for profile in LOAD_PROFILES:
        for mode in CAPTCHA_PREHEAT_MODES:
            draft = update_draft(
                select_performance_tier(DEFAULT_DRAFT, tier),
                load_profile=profile,
                captcha_preheat_mode=mode,
                database_type=database_type,
            )
            tree = apply_draft({}, draft, "jemalloc")
            recovered = extract_draft(tree, "jemalloc")
            assert recovered.performance_tier == tier
            assert _plan(recovered) == _plan(draft)


def test_round_trip_through_yaml_text(yaml_codec, foreign_tree) -> None:
    draft = update_draft(select_performance_tier(DEFAULT_DRAFT, "good"), load_profile="light")
    text = yaml_codec.serialize(apply_draft(foreign_tree, draft, "mimalloc"))
    reparsed = yaml_codec.parse(text)
    recovered = extract_draft(reparsed, "mimalloc")
    assert _plan(recovered) == _plan(draft)
    assert yaml_codec.serialize(apply_draft(reparsed, recovered, "mimalloc")) == text
