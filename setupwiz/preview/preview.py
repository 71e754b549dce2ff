"""
Preview rows, group counts and summary cards for a draft.

Rows come from the same owned-path write list ``apply_draft`` uses, so the
preview always shows exactly what applying the draft would write.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from setupwiz.mapping.draft import Draft
from setupwiz.mapping.owned import tuning_writes
from setupwiz.mapping.tree import is_number, number_to_text
from setupwiz.presets.resolver import resolve_effective_preset
from setupwiz.tuning.builder import build_tuning_plan

OTHER_GROUP = "other"

GROUP_LABELS: Dict[str, str] = {
    "database": "Database",
    "fast_kv_storage_hub": "Cache",
    "internal_notify": "Scheduler",
    "system_backup": "Scheduler",
    "task_registry": "Scheduler",
    "middleware": "Middleware",
    "captcha_code": "Captcha",
    "memory_allocator": "Allocator",
    "vfs_storage_hub": "VFS",
    "file_manager_serv_sftp": "SFTP",
    "file_manager_serv_ftp": "FTP",
    "file_manager_serv_s3": "S3",
    "chat_manager": "Chat",
    "email_manager": "Email",
}
OTHER_GROUP_LABEL = "Other"


@dataclass(frozen=True)
class ConfigPreviewItem:
    path: str
    value: str


@dataclass(frozen=True)
class ConfigPreviewGroupStat:
    key: str
    label: str
    count: int


@dataclass(frozen=True)
class PreviewSummaryCard:
    label: str
    value: str
    enabled: Optional[bool] = None
    """Set for feature cards only."""


def format_preview_value(value: Any) -> str:
    """Render a tree value for display; booleans read ``true``/``false``."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return number_to_text(value, str(value))
    return str(value)


def build_preview_items(draft: Draft, allocator_policy: Optional[str] = None) -> List[ConfigPreviewItem]:
    """
    One row per tuning/feature value the apply step writes, in write order.

    Args:
        draft: Wizard draft
        allocator_policy: Policy that will be written; defaults to the draft's own
    """
    effective = resolve_effective_preset(draft)
    plan = build_tuning_plan(draft, effective)
    policy = allocator_policy if allocator_policy is not None else draft.allocator_policy
    return [
        ConfigPreviewItem(path=path, value=format_preview_value(value))
        for path, value in tuning_writes(draft, effective, plan, policy)
    ]


def build_preview_group_stats(items: Sequence[ConfigPreviewItem]) -> List[ConfigPreviewGroupStat]:
    """Count rows per top-level section, largest group first."""
    counts: Dict[str, int] = {}
    for item in items:
        key = item.path.split(".")[0] or OTHER_GROUP
        counts[key] = counts.get(key, 0) + 1
    # sorted() is stable, so equal counts keep first-seen order
    ordered = sorted(counts.items(), key=lambda entry: -entry[1])
    return [
        ConfigPreviewGroupStat(key=key, label=GROUP_LABELS.get(key, OTHER_GROUP_LABEL), count=count)
        for key, count in ordered
    ]


def _on_off(flag: bool) -> str:
    return "Enabled" if flag else "Disabled"


def build_preview_summary(draft: Draft) -> List[PreviewSummaryCard]:
    """
    Short human-facing summary of the derived settings.

    Protocol connection cards are only included for enabled protocols.
    """
    effective = resolve_effective_preset(draft)
    plan = build_tuning_plan(draft, effective)
    features = effective.features
    middleware = plan.middleware
    captcha = plan.captcha_preheat

    cards = [
        PreviewSummaryCard(label, _on_off(flag), enabled=flag)
        for label, flag in (
            ("S3", features.s3),
            ("SFTP", features.sftp),
            ("FTP", features.ftp),
            ("WebDAV", features.webdav),
            ("Chat", features.chat),
            ("Email", features.email),
            ("Compression", features.compression),
            ("Bloom warmup", features.bloom_warmup),
        )
    ]
    cards += [
        PreviewSummaryCard("DB pool", f"{plan.db_min_connections}-{plan.db_max_connections}"),
        PreviewSummaryCard("Cache memory", f"{plan.cache_memory_mb} MB"),
        PreviewSummaryCard("IP rate limit", f"{middleware.ip_max_requests}/{middleware.ip_window_secs}s"),
        PreviewSummaryCard(
            "Client rate limit", f"{middleware.client_max_requests}/{middleware.client_window_secs}s"
        ),
        PreviewSummaryCard("User rate limit", f"{middleware.user_max_requests}/{middleware.user_window_secs}s"),
        PreviewSummaryCard("Brute-force lockout", f"{middleware.brute_force_lockout_secs}s"),
        PreviewSummaryCard("Captcha preheat mode", draft.captcha_preheat_mode),
        PreviewSummaryCard("Captcha preheat pool", str(captcha.graphic_cache_size)),
        PreviewSummaryCard(
            "Captcha gen concurrency", f"{captcha.graphic_gen_concurrency}/{captcha.max_gen_concurrency}"
        ),
        PreviewSummaryCard("Captcha pool check", f"{captcha.pool_check_interval_secs}s"),
        PreviewSummaryCard("Critical cron", plan.scheduler.critical_cron),
        PreviewSummaryCard("Maintenance cron", plan.scheduler.maintenance_cron),
        PreviewSummaryCard("Low priority cron", plan.scheduler.low_priority_cron),
        PreviewSummaryCard("VFS concurrency", str(plan.vfs_batch_max_concurrent_tasks.normal)),
        PreviewSummaryCard("Compression concurrency", str(plan.compression_concurrency.normal)),
    ]

    servers = plan.protocol_servers
    if features.sftp:
        cards.append(PreviewSummaryCard("SFTP max connections", str(servers.sftp_max_connections)))
    if features.ftp:
        cards.append(PreviewSummaryCard("FTP max connections", str(servers.ftp_max_connections)))
    if features.s3:
        cards.append(PreviewSummaryCard("S3 max connections", str(servers.s3_max_connections)))
    return cards
