"""
Typed accessors for configuration trees.

Readers never raise: a missing path, a wrong-typed value or a malformed tree
all resolve to the caller's fallback. Writers create intermediate sections as
needed and leave every other key where it was.
"""

from __future__ import annotations

import copy
import math
from typing import Any, Dict, Sequence, Union

ConfigTree = Dict[str, Any]
TreePath = Union[str, Sequence[str]]

_MISSING = object()


def is_record(value: Any) -> bool:
    """True for mapping nodes (not lists, not scalars)."""
    return isinstance(value, dict)


def split_path(path: TreePath) -> tuple[str, ...]:
    if isinstance(path, str):
        return tuple(part for part in path.split(".") if part)
    return tuple(path)


def clone_tree(tree: Any) -> ConfigTree:
    """Structural deep copy; non-mapping input yields an empty tree."""
    if not is_record(tree):
        return {}
    return copy.deepcopy(tree)


def get_value(tree: Any, path: TreePath, default: Any = None) -> Any:
    node = tree
    for key in split_path(path):
        if not is_record(node) or key not in node:
            return default
        node = node[key]
    return node


def has_path(tree: Any, path: TreePath) -> bool:
    return get_value(tree, path, _MISSING) is not _MISSING


def get_section(tree: Any, path: TreePath) -> ConfigTree:
    """Return the mapping at ``path`` or an empty mapping; never creates."""
    value = get_value(tree, path)
    return value if is_record(value) else {}


def get_str(tree: Any, path: TreePath, fallback: str) -> str:
    value = get_value(tree, path)
    return value if isinstance(value, str) else fallback


def is_number(value: Any) -> bool:
    """Finite int/float; booleans are not numbers here."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def get_number(tree: Any, path: TreePath, fallback: float) -> float:
    value = get_value(tree, path)
    return value if is_number(value) else fallback


def get_bool(tree: Any, path: TreePath, fallback: bool) -> bool:
    value = get_value(tree, path)
    return value if isinstance(value, bool) else fallback


def number_to_text(value: Any, fallback: str) -> str:
    """Render a numeric tree value for a text field (``5.0`` reads as ``5``)."""
    if not is_number(value):
        return fallback
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def ensure_section(tree: ConfigTree, path: TreePath) -> ConfigTree:
    """
    Return the mapping at ``path``, creating it (or replacing a non-mapping
    value) when needed.
    """
    node = tree
    for key in split_path(path):
        child = node.get(key)
        if not is_record(child):
            child = {}
            node[key] = child
        node = child
    return node


def set_value(tree: ConfigTree, path: TreePath, value: Any) -> None:
    parts = split_path(path)
    if not parts:
        raise ValueError("Tree path must not be empty")
    parent = ensure_section(tree, parts[:-1])
    parent[parts[-1]] = value


def same_value(left: Any, right: Any) -> bool:
    """Equality that keeps booleans and numbers apart (``True != 1``)."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if is_number(left) and is_number(right):
        return left == right
    return type(left) is type(right) and left == right
