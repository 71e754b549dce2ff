"""
Tuning plan computation.
"""

from .builder import build_tuning_plan, every_minutes_cron
from .models import ConcurrencyVariants, PerformanceTuningPlan

__all__ = [
    "ConcurrencyVariants",
    "PerformanceTuningPlan",
    "build_tuning_plan",
    "every_minutes_cron",
]
