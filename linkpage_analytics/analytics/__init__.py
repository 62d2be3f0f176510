"""
Daily analytics jobs and click tracking for link pages.
"""

from .aggregator import DailyAggregator
from .clicks import ClickRecorder, ClickRollup
from .models import (
    AggregationResult,
    ClickEvent,
    DailyLinkClickStat,
    DailyStat,
    PruneResult,
    RollupResult,
)
from .pruner import RetentionPruner

__all__ = [
    "AggregationResult",
    "ClickEvent",
    "ClickRecorder",
    "ClickRollup",
    "DailyAggregator",
    "DailyLinkClickStat",
    "DailyStat",
    "PruneResult",
    "RetentionPruner",
    "RollupResult",
]
