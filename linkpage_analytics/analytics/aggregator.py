"""
Daily view aggregation for link pages.

Responsibilities:
    - Turn each link page's lifetime view counter into a daily increment
    - Write today's increment with overwrite semantics (safe to re-run)
    - Keep going when a single link page fails

How the increment is computed:
    increment = lifetime_total - sum(daily views before today)

    Rows before today are final; today's row is recomputed on every run and
    overwritten, so two runs on the same day with no new views leave the same
    row behind. A non-positive increment writes nothing. That also covers a
    counter that went backwards (reset): history is not corrected downwards.
"""

import logging
from datetime import date
from typing import Optional

from ..config import AnalyticsConfig
from ..storage.base import BaseCounterSource, BaseStatStore
from .models import AggregationResult

log = logging.getLogger(__name__)


class DailyAggregator:
    """
    Aggregates lifetime view counters into the daily view table.

    Args:
        stat_store (BaseStatStore): Where the daily rows live.
        counters (BaseCounterSource): Read-only lifetime counters.
        config (AnalyticsConfig, optional): Run configuration (timezone for "today").
    """

    def __init__(
        self,
        stat_store: BaseStatStore,
        counters: BaseCounterSource,
        config: Optional[AnalyticsConfig] = None,
    ):
        self.stat_store = stat_store
        self.counters = counters
        self.config = config or AnalyticsConfig()

    def daily_increment(self, subject_id: int, today: date) -> int:
        """Views attributable to `today` for one link page (may be <= 0)."""
        current_total = self.counters.cumulative_total(subject_id) or 0
        historical_total = self.stat_store.historical_view_total(subject_id, before=today)
        return int(current_total) - int(historical_total)

    def run_daily_aggregation(self, today: Optional[date] = None) -> AggregationResult:
        """
        Aggregate every link page for `today`.

        Args:
            today (date, optional): Day to write. Defaults to the current date
                in the configured timezone.

        Returns:
            AggregationResult: Written/unchanged/failed tallies. Never raises
            for store errors; those are logged and the link page is skipped.
        """
        today = today or self.config.today()
        result = AggregationResult(stat_date=today)

        try:
            subject_ids = list(self.counters.subject_ids())
        except Exception as exc:
            result.error = str(exc)
            log.error("[Analytics Aggregation] Error listing link pages: %s", exc)
            return result

        for subject_id in subject_ids:
            try:
                increment = self.daily_increment(subject_id, today)
                if increment <= 0:
                    result.unchanged += 1
                    continue
                self.stat_store.upsert_daily_views(subject_id, today, increment)
                result.aggregated += 1
            except Exception as exc:
                log.error(
                    "[Analytics Aggregation] Error aggregating link page %s: %s",
                    subject_id,
                    exc,
                )
                result.failed.append(subject_id)

        log.info(
            "[Analytics Aggregation] Aggregated daily views for %d link pages.",
            result.aggregated,
        )
        return result
