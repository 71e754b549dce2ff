"""
Draft to tree application.
"""

from __future__ import annotations

from typing import Any

from setupwiz.presets.resolver import resolve_effective_preset
from setupwiz.tuning.builder import build_tuning_plan

from .draft import Draft
from .owned import DEFAULT_KEY_PREFIX, draft_writes, tuning_writes
from .tree import ConfigTree, clone_tree, ensure_section, set_value


def apply_draft(tree: Any, draft: Draft, recommended_policy: str) -> ConfigTree:
    """
    Write a draft and its tuning plan onto a copy of ``tree``.

    Only owned paths are written; every other key keeps its value and
    position. The input tree is never mutated, and applying the same draft
    twice yields the same tree as applying it once.

    Args:
        tree: Current configuration tree
        draft: Wizard draft
        recommended_policy: Host-recommended allocator policy, written in
            place of the draft's own policy

    Returns:
        New configuration tree
    """
    result = clone_tree(tree)
    effective = resolve_effective_preset(draft)
    plan = build_tuning_plan(draft, effective)

    for path, value in draft_writes(draft):
        set_value(result, path, value)
    for path, value in tuning_writes(draft, effective, plan, recommended_policy):
        set_value(result, path, value)

    kv_hub = ensure_section(result, "fast_kv_storage_hub")
    if not isinstance(kv_hub.get("dashmap_indexed_prefixes"), list):
        kv_hub["dashmap_indexed_prefixes"] = []
    key_prefix = kv_hub.get("key_prefix")
    if not isinstance(key_prefix, str) or not key_prefix.strip():
        kv_hub["key_prefix"] = DEFAULT_KEY_PREFIX
    return result
