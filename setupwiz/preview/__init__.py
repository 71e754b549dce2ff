"""
Diff statistics and preview rendering.
"""

from .diff import LineDiffStats, calculate_line_diff_stats
from .preview import (
    ConfigPreviewGroupStat,
    ConfigPreviewItem,
    PreviewSummaryCard,
    build_preview_group_stats,
    build_preview_items,
    build_preview_summary,
    format_preview_value,
)

__all__ = [
    "LineDiffStats",
    "calculate_line_diff_stats",
    "ConfigPreviewGroupStat",
    "ConfigPreviewItem",
    "PreviewSummaryCard",
    "build_preview_group_stats",
    "build_preview_items",
    "build_preview_summary",
    "format_preview_value",
]
