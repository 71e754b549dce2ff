from setupwiz.mapping.draft import DEFAULT_DRAFT, update_draft
from setupwiz.mapping.owned import draft_writes, non_empty, positive_int, tuning_writes
from setupwiz.presets.resolver import resolve_effective_preset
from setupwiz.tuning.builder import build_tuning_plan
from setupwiz.tuning.tables import CRITICAL_TASK_KEYS, LOW_PRIORITY_TASK_KEYS, MAINTENANCE_TASK_KEYS


def _writes(draft, policy="mimalloc"):
    effective = resolve_effective_preset(draft)
    return tuning_writes(draft, effective, build_tuning_plan(draft, effective), policy)


def test_positive_int_parsing() -> None:
    assert positive_int(" 7 ", "5") == 7
    assert positive_int("0", "5") == 5
    assert positive_int("-2", "5") == 5
    assert positive_int("abc", "5") == 5
    assert positive_int("", "6") == 6


def test_non_empty() -> None:
    assert non_empty("  ", "x") == "x"
    assert non_empty(" v ", "x") == "v"


def test_draft_writes_copy_toggles() -> None:
    draft = update_draft(DEFAULT_DRAFT, enable_registration=True, plus_capture_logs=False)
    writes = dict(draft_writes(draft))
    assert writes["user_center.enable_registration"] is True
    assert writes["extension_manager.plus.capture_logs"] is False
    assert writes["extension_manager.plus.enabled"] is True
    assert writes["captcha_code.code_length"] == 6


def test_tuning_write_paths_are_unique(good_heavy_draft, extreme_low_draft) -> None:
    for draft in (good_heavy_draft, extreme_low_draft):
        paths = [path for path, _ in _writes(draft)]
        assert len(paths) == len(set(paths))


def test_tuning_writes_cover_every_scheduled_task(good_heavy_draft) -> None:
    writes = dict(_writes(good_heavy_draft))
    for key in CRITICAL_TASK_KEYS + MAINTENANCE_TASK_KEYS + LOW_PRIORITY_TASK_KEYS + ("database_health_check",):
        assert writes[f"task_registry.{key}.enabled"] is True
        assert writes[f"task_registry.{key}.cron_expression"].startswith("0 */")
    assert writes["task_registry.process_timeout_check.cron_expression"] == "0 */1 * * * *"
    assert writes["task_registry.bloom_filter_warmup.enabled"] is False


def test_tuning_writes_use_given_policy(good_heavy_draft) -> None:
    writes = dict(_writes(good_heavy_draft, policy="system"))
    assert writes["memory_allocator.policy"] == "system"


def test_tuning_writes_database_branch(good_heavy_draft, extreme_low_draft) -> None:
    postgres = dict(_writes(good_heavy_draft))
    sqlite = dict(_writes(extreme_low_draft))
    assert "database.postgres_config.max_connections" in postgres
    assert not any(path.startswith("database.sqlite_config") for path in postgres)
    assert sqlite["database.sqlite_config.temp_store"] == 2
    assert not any(path.startswith("database.postgres_config") for path in sqlite)
