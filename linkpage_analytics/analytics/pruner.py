"""
Retention pruning for the daily analytics tables.

Deletes daily view rows and daily per-link click rows older than the
retention window. The two deletions are independent: a failure on one table
is logged and the other is still attempted.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from ..config import AnalyticsConfig
from ..storage.base import BaseStatStore
from .models import PruneResult

log = logging.getLogger(__name__)

VIEWS = "daily_views"
LINK_CLICKS = "daily_link_clicks"


def _cutoff(today: date, days: int) -> date:
    # A window reaching past year 1 keeps everything
    try:
        return today - timedelta(days=days)
    except OverflowError:
        return date.min


class RetentionPruner:
    def __init__(self, stat_store: BaseStatStore, config: Optional[AnalyticsConfig] = None):
        self.stat_store = stat_store
        self.config = config or AnalyticsConfig()

    def prune_older_than(
        self,
        cutoff_days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> PruneResult:
        """
        Delete rows with stat_date < today - cutoff_days from both tables.

        Args:
            cutoff_days (int, optional): Retention window; defaults to
                `config.retention_days`.
            today (date, optional): Defaults to the current date in the
                configured timezone.

        Raises:
            ValueError: If cutoff_days is negative.
        """
        if cutoff_days is None:
            cutoff_days = self.config.retention_days
        if cutoff_days < 0:
            raise ValueError("cutoff_days must be non-negative")

        today = today or self.config.today()
        # TODO: carry pruned view totals forward; once old rows are gone the next
        # aggregation attributes their views to the current day.
        cutoff = _cutoff(today, cutoff_days)
        result = PruneResult(cutoff=cutoff)

        try:
            result.views_deleted = self.stat_store.delete_views_before(cutoff)
            log.info("[Analytics Pruning] Pruned %d rows from %s.", result.views_deleted, VIEWS)
        except Exception as exc:
            result.errors[VIEWS] = str(exc)
            log.error("[Analytics Pruning] Error pruning daily views: %s", exc)

        try:
            result.clicks_deleted = self.stat_store.delete_link_clicks_before(cutoff)
            log.info("[Analytics Pruning] Pruned %d rows from %s.", result.clicks_deleted, LINK_CLICKS)
        except Exception as exc:
            result.errors[LINK_CLICKS] = str(exc)
            log.error("[Analytics Pruning] Error pruning daily link clicks: %s", exc)

        return result
