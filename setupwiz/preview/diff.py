"""
Line-level diff statistics between two configuration texts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_LINE_BREAK = re.compile(r"\r?\n")


@dataclass(frozen=True)
class LineDiffStats:
    changed: int = 0
    added: int = 0
    removed: int = 0

    @property
    def total(self) -> int:
        return self.changed + self.added + self.removed

    @property
    def has_changes(self) -> bool:
        return self.total > 0


def calculate_line_diff_stats(before: str, after: str) -> LineDiffStats:
    """
    Count changed, added and removed lines by position.

    Lines are compared index by index rather than aligned: inserting one line
    near the top marks every following line as changed.
    """
    before_lines = _LINE_BREAK.split(before)
    after_lines = _LINE_BREAK.split(after)
    changed = added = removed = 0

    for index in range(max(len(before_lines), len(after_lines))):
        if index >= len(before_lines):
            added += 1
        elif index >= len(after_lines):
            removed += 1
        elif before_lines[index] != after_lines[index]:
            changed += 1

    return LineDiffStats(changed=changed, added=added, removed=removed)
