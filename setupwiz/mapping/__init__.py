"""
Mapping between configuration trees and the wizard draft.
"""

from .apply import apply_draft
from .draft import DEFAULT_DRAFT, Draft, select_performance_tier, update_draft
from .extract import extract_draft, infer_captcha_preheat_mode, infer_performance_profile
from .owned import draft_writes, tuning_writes
from .tree import ConfigTree, clone_tree, get_value, set_value

__all__ = [
    "ConfigTree",
    "DEFAULT_DRAFT",
    "Draft",
    "apply_draft",
    "clone_tree",
    "draft_writes",
    "extract_draft",
    "get_value",
    "infer_captcha_preheat_mode",
    "infer_performance_profile",
    "select_performance_tier",
    "set_value",
    "tuning_writes",
    "update_draft",
]
