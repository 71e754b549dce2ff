from __future__ import annotations

from typing import Any, Dict, List

import pytest

from setupwiz.controller import ReconciliationController, WizardState, WizardStateError
from setupwiz.mapping.tree import get_value


class RecordingCodec:
    """Wraps a codec and counts parse calls."""

    name = "recording"

    def __init__(self, inner) -> None:
        self.inner = inner
        self.parse_calls = 0

    def parse(self, text: str) -> Dict[str, Any]:
        self.parse_calls += 1
        return self.inner.parse(text)

    def serialize(self, tree: Dict[str, Any]) -> str:
        return self.inner.serialize(tree)


class ExplodingCodec:
    name = "exploding"

    def parse(self, text: str) -> Dict[str, Any]:
        raise RuntimeError("codec\nfailure")

    def serialize(self, tree: Dict[str, Any]) -> str:
        return ""


class ListCodec:
    name = "list"

    def parse(self, text: str):
        return ["not", "a", "mapping"]

    def serialize(self, tree: Dict[str, Any]) -> str:
        return ""


@pytest.fixture
def controller(yaml_codec) -> ReconciliationController:
    return ReconciliationController(yaml_codec, recommended_policy="jemalloc")


def test_starts_uninitialized(controller) -> None:
    assert controller.state == WizardState.UNINITIALIZED
    assert controller.draft is None
    assert controller.preview == []


def test_open_extracts_draft(controller, yaml_codec, foreign_tree) -> None:
    state = controller.open(yaml_codec.serialize(foreign_tree))
    assert state == WizardState.SYNCED
    assert controller.parse_error is None
    assert controller.draft.db_host == "db.internal"
    assert controller.draft.allocator_policy == "jemalloc"
    assert controller.preview


def test_open_invalid_text_enters_error(controller) -> None:
    assert controller.open("a: [1, 2") == WizardState.ERROR
    assert "ConfigParseError" in controller.parse_error
    assert controller.draft is None


def test_injected_codec_failures_are_reported() -> None:
    controller = ReconciliationController(ExplodingCodec(), recommended_policy="mimalloc")
    assert controller.open("anything") == WizardState.ERROR
    assert controller.parse_error == "RuntimeError: codec failure"

    controller = ReconciliationController(ListCodec(), recommended_policy="mimalloc")
    assert controller.open("anything") == WizardState.ERROR
    assert controller.parse_error == "Configuration root must be a mapping"


def test_edit_requires_loaded_draft(controller) -> None:
    with pytest.raises(WizardStateError):
        controller.edit(enable_registration=True)
    controller.open("a: [")
    with pytest.raises(WizardStateError):
        controller.select_tier("good")


def test_edit_emits_text_and_marks_dirty(yaml_codec) -> None:
    emitted: List[str] = []
    controller = ReconciliationController(yaml_codec, recommended_policy="jemalloc", on_content_change=emitted.append)
    controller.open("")
    text = controller.edit(enable_registration=True)

    assert emitted == [text]
    assert controller.state == WizardState.DIRTY_INTERNAL
    assert controller.content == text
    tree = yaml_codec.parse(text)
    assert get_value(tree, "user_center.enable_registration") is True
    assert get_value(tree, "memory_allocator.policy") == "jemalloc"


def test_echo_is_ignored(yaml_codec) -> None:
    codec = RecordingCodec(yaml_codec)
    controller = ReconciliationController(codec, recommended_policy="jemalloc")
    controller.open("")
    text = controller.edit(db_host="db2")
    draft = controller.draft
    calls = codec.parse_calls

    assert controller.on_external_text(text) is False
    assert codec.parse_calls == calls
    assert controller.draft is draft
    assert controller.state == WizardState.SYNCED


def test_delayed_echoes_of_two_edits_are_both_ignored(yaml_codec) -> None:
    codec = RecordingCodec(yaml_codec)
    controller = ReconciliationController(codec, recommended_policy="jemalloc")
    controller.open("")
    first = controller.edit(db_host="db2")
    second = controller.edit(db_port="7000")
    draft = controller.draft
    calls = codec.parse_calls

    assert controller.on_external_text(first) is False
    assert controller.state == WizardState.DIRTY_INTERNAL
    assert controller.draft is draft
    assert controller.content == second

    assert controller.on_external_text(second) is False
    assert controller.state == WizardState.SYNCED
    assert codec.parse_calls == calls
    assert controller.draft.db_port == "7000"


def test_later_echo_supersedes_older_pending_texts(yaml_codec) -> None:
    codec = RecordingCodec(yaml_codec)
    controller = ReconciliationController(codec, recommended_policy="jemalloc")
    controller.open("")
    first = controller.edit(db_host="db2")
    second = controller.edit(db_port="7000")

    assert controller.on_external_text(second) is False
    assert controller.state == WizardState.SYNCED
    calls = codec.parse_calls
    assert controller.on_external_text(first) is True
    assert codec.parse_calls == calls + 1
    assert controller.draft.db_port == "5432"


def test_synchronous_echo_from_listener(yaml_codec) -> None:
    controller = ReconciliationController(yaml_codec, recommended_policy="jemalloc")
    controller.on_content_change = controller.on_external_text
    controller.open("")
    controller.edit(db_host="db2")
    assert controller.state == WizardState.SYNCED
    assert controller.draft.db_host == "db2"


def test_foreign_text_replaces_draft(controller, yaml_codec) -> None:
    controller.open("")
    controller.edit(db_host="db2")
    other = yaml_codec.serialize({"database": {"postgres_config": {"database_dsn": "postgres://u:p@db3:5432/x"}}})

    assert controller.on_external_text(other) is True
    assert controller.state == WizardState.SYNCED
    assert controller.draft.db_host == "db3"
    assert controller.content == other


def test_parse_failure_keeps_previous_draft_and_tree(controller) -> None:
    controller.open("")
    controller.edit(db_host="db2")
    draft, tree = controller.draft, controller.tree

    assert controller.on_external_text("a: [") is True
    assert controller.state == WizardState.ERROR
    assert controller.draft is draft
    assert controller.tree is tree

    assert controller.on_external_text("") is True
    assert controller.state == WizardState.SYNCED


def test_closed_controller_only_tracks_text(controller, yaml_codec) -> None:
    controller.open("")
    controller.close()
    text = yaml_codec.serialize({"database": {"postgres_config": {"database_dsn": "postgres://u:p@db9:5432/x"}}})

    assert controller.on_external_text(text) is False
    assert controller.draft is None
    assert controller.open(controller.content) == WizardState.SYNCED
    assert controller.draft.db_host == "db9"


def test_reopen_discards_stale_draft(controller) -> None:
    controller.open("")
    controller.edit(enable_registration=True)
    controller.close()
    controller.open("")
    assert controller.draft.enable_registration is False


def test_select_tier_writes_embedded_stack(controller, yaml_codec) -> None:
    controller.open("")
    tree = yaml_codec.parse(controller.select_tier("extreme-low"))
    assert controller.draft.database_type == "sqlite"
    assert get_value(tree, "database.db_type") == "sqlite"
    assert get_value(tree, "fast_kv_storage_hub.kv_type") == "database"
    assert get_value(tree, "vfs_storage_hub.enable_webdav") is True
    assert get_value(tree, "vfs_storage_hub.enable_sftp") is False


def test_tls_toggle_rebuilds_cache_url(controller, yaml_codec) -> None:
    controller.open("")
    controller.edit(cache_user="", cache_pass="secret")
    tree = yaml_codec.parse(controller.edit(cache_use_tls=True))
    assert get_value(tree, "fast_kv_storage_hub.redis_url") == "rediss://:secret@127.0.0.1:6379"


def test_reopening_emitted_text_recovers_tier(controller) -> None:
    controller.open("")
    controller.select_tier("medium")
    text = controller.edit(load_profile="light")
    controller.close()
    controller.open(text)
    assert controller.draft.performance_tier == "medium"
    assert controller.draft.load_profile == "light"


def test_diff_against_saved_content(controller) -> None:
    saved = "server:\n  port: 8080\n"
    controller.open(saved)
    controller.edit()
    stats = controller.diff_against(saved)
    assert stats.has_changes
    assert controller.diff_against(controller.content).total == 0


def test_policy_from_runtime_os(yaml_codec) -> None:
    assert ReconciliationController(yaml_codec, runtime_os="linux").recommended_policy == "jemalloc"
    assert ReconciliationController(yaml_codec, runtime_os="windows").recommended_policy == "mimalloc"
