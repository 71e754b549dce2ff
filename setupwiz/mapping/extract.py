"""
Tree to draft extraction.

Extraction never raises: every owned path is read with a typed accessor that
falls back to the default draft when the path is absent, wrong-typed or the
tree itself is malformed.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterator, Optional, Tuple

from setupwiz.codecs.connection import parse_postgres_dsn, parse_redis_url, parse_sqlite_path
from setupwiz.logging import get_logger
from setupwiz.presets.constants import (
    ALLOCATOR_POLICIES,
    ALLOCATOR_PROFILES,
    CAPTCHA_PREHEAT_MODES,
    LOAD_PROFILES,
    PERFORMANCE_TIERS,
)
from setupwiz.presets.resolver import resolve_effective_preset
from setupwiz.tuning.builder import build_tuning_plan

from .draft import DEFAULT_DRAFT, Draft
from .owned import HOST_DERIVED_PATHS, tuning_writes
from .tree import get_bool, get_number, get_str, get_value, is_record, number_to_text, same_value

logger = get_logger(__name__)

DEFAULT_CAPTCHA_POOL_SIZE = 100
DEFAULT_CAPTCHA_MAX_CONCURRENCY = 8


def infer_captcha_preheat_mode(tree: Any) -> str:
    """
    Guess the preheat mode from the captcha pool size and max concurrency.

    A small pool with low concurrency reads as ``memory``; a large pool or high
    concurrency reads as ``throughput``; anything in between is ``balanced``.
    """
    pool = get_number(tree, "captcha_code.graphic_cache_size", DEFAULT_CAPTCHA_POOL_SIZE)
    concurrency = get_number(tree, "captcha_code.max_gen_concurrency", DEFAULT_CAPTCHA_MAX_CONCURRENCY)
    if pool <= 50 and concurrency <= 2:
        return "memory"
    if pool >= 200 or concurrency >= 6:
        return "throughput"
    return "balanced"


def _candidates(heuristic_mode: str) -> Iterator[Tuple[str, str, str]]:
    modes = (heuristic_mode,) + tuple(mode for mode in CAPTCHA_PREHEAT_MODES if mode != heuristic_mode)
    profiles = ("heavy",) + tuple(profile for profile in LOAD_PROFILES if profile != "heavy")
    for tier in PERFORMANCE_TIERS:
        for profile in profiles:
            for mode in modes:
                yield tier, profile, mode


def _matches_tree(tree: Any, draft: Draft) -> bool:
    effective = resolve_effective_preset(draft)
    plan = build_tuning_plan(draft, effective)
    for path, value in tuning_writes(draft, effective, plan, draft.allocator_policy):
        if path in HOST_DERIVED_PATHS:
            continue
        if not same_value(get_value(tree, path), value):
            return False
    return True


def infer_performance_profile(tree: Any, draft: Draft) -> Optional[Tuple[str, str, str]]:
    """
    Find the (tier, load profile, captcha mode) whose tuning writes the tree holds.

    Tier and load profile are not stored in the tree, so a tree written by
    ``apply_draft`` is recognized by recomputing each candidate plan and
    comparing every owned tuning value. Returns None when nothing matches,
    e.g. for hand-edited trees.
    """
    if not is_record(tree):
        return None
    for tier, profile, mode in _candidates(draft.captcha_preheat_mode):
        candidate = replace(draft, performance_tier=tier, load_profile=profile, captcha_preheat_mode=mode)
        if _matches_tree(tree, candidate):
            logger.debug("Inferred tier=%s profile=%s captcha=%s from tree", tier, profile, mode)
            return tier, profile, mode
    logger.debug("No preset matches the tree tuning values; keeping defaults")
    return None


def _choice(value: str, allowed: tuple[str, ...], fallback: str) -> str:
    normalized = value.strip().lower()
    return normalized if normalized in allowed else fallback


def extract_draft(tree: Any, fallback_allocator_policy: str) -> Draft:
    """
    Build a draft from an arbitrary configuration tree.

    Args:
        tree: Parsed configuration (any shape; non-mappings read as empty)
        fallback_allocator_policy: Policy used when the tree has none or an
            unrecognized one

    Returns:
        Draft with composite connection fields parsed from the DSN/URL strings
    """
    if not is_record(tree):
        tree = {}

    database_type = "sqlite" if get_str(tree, "database.db_type", DEFAULT_DRAFT.database_type) == "sqlite" else "postgres"
    postgres_dsn = get_str(tree, "database.postgres_config.database_dsn", DEFAULT_DRAFT.postgres_dsn)
    sqlite_dsn = get_str(tree, "database.sqlite_config.database_dsn", DEFAULT_DRAFT.sqlite_dsn)
    redis_url = get_str(tree, "fast_kv_storage_hub.redis_url", DEFAULT_DRAFT.cache_redis_url)
    db = parse_postgres_dsn(postgres_dsn)
    cache = parse_redis_url(redis_url)

    draft = Draft(
        performance_tier=DEFAULT_DRAFT.performance_tier,
        load_profile=DEFAULT_DRAFT.load_profile,
        captcha_preheat_mode=infer_captcha_preheat_mode(tree),
        database_type=database_type,
        postgres_dsn=postgres_dsn,
        sqlite_dsn=sqlite_dsn,
        db_host=db.host,
        db_port=db.port,
        db_user=db.user,
        db_pass=db.password,
        db_name=db.name,
        sqlite_path=parse_sqlite_path(sqlite_dsn),
        db_health_timeout_seconds=number_to_text(
            get_value(tree, "database.health_check_timeout_seconds"),
            DEFAULT_DRAFT.db_health_timeout_seconds,
        ),
        cache_type=get_str(tree, "fast_kv_storage_hub.kv_type", DEFAULT_DRAFT.cache_type),
        cache_redis_url=redis_url,
        cache_host=cache.host,
        cache_port=cache.port,
        cache_user=cache.user,
        cache_pass=cache.password,
        cache_use_tls=cache.use_tls,
        enable_registration=get_bool(tree, "user_center.enable_registration", DEFAULT_DRAFT.enable_registration),
        plus_enabled=get_bool(tree, "extension_manager.plus.enabled", DEFAULT_DRAFT.plus_enabled),
        plus_capture_logs=get_bool(tree, "extension_manager.plus.capture_logs", DEFAULT_DRAFT.plus_capture_logs),
        captcha_code_length=number_to_text(
            get_value(tree, "captcha_code.code_length"), DEFAULT_DRAFT.captcha_code_length
        ),
        captcha_expires_in=number_to_text(
            get_value(tree, "captcha_code.expires_in"), DEFAULT_DRAFT.captcha_expires_in
        ),
        allocator_policy=_choice(
            get_str(tree, "memory_allocator.policy", fallback_allocator_policy),
            ALLOCATOR_POLICIES,
            fallback_allocator_policy,
        ),
        allocator_profile=_choice(
            get_str(tree, "memory_allocator.profile", DEFAULT_DRAFT.allocator_profile),
            ALLOCATOR_PROFILES,
            "balanced",
        ),
    )

    inferred = infer_performance_profile(tree, draft)
    if inferred is not None:
        tier, profile, mode = inferred
        draft = replace(draft, performance_tier=tier, load_profile=profile, captcha_preheat_mode=mode)
    return draft
