"""
Daily job runner for Link Page Analytics.

Runs the three daily jobs once per scheduler tick:

    1. view aggregation for today
    2. click rollup for the last few complete days (yesterday included)
    3. retention pruning

Each step is independent: one failing (or raising unexpectedly) never stops the
next. At-least-once delivery from the scheduler is fine; every step either
overwrites or deletes by cutoff. The click rollup covers the last
ROLLUP_CATCHUP_DAYS complete days, so a skipped tick is caught up on the next.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional

from .analytics.aggregator import DailyAggregator
from .analytics.clicks import ClickRollup
from .analytics.models import AggregationResult, PruneResult, RollupResult
from .analytics.pruner import RetentionPruner
from .config import AnalyticsConfig

log = logging.getLogger(__name__)

ROLLUP_CATCHUP_DAYS = 3


@dataclass
class DailyJobsReport:
    today: date
    aggregation: Optional[AggregationResult] = None
    rollups: List[RollupResult] = field(default_factory=list)
    pruning: Optional[PruneResult] = None
    crashed: List[str] = field(default_factory=list)

    @property
    def rollup(self) -> Optional[RollupResult]:
        """Rollup of the most recent day (yesterday), if it ran."""
        return self.rollups[-1] if self.rollups else None

    @property
    def ok(self) -> bool:
        steps = (self.aggregation, self.pruning, *self.rollups)
        return not self.crashed and all(step.ok for step in steps if step is not None)


def run_daily_jobs(
    stat_store,
    counters,
    config: Optional[AnalyticsConfig] = None,
    today: Optional[date] = None,
    aggregate: bool = True,
    rollup_clicks: bool = True,
    prune: bool = True,
    rollup_days: int = ROLLUP_CATCHUP_DAYS,
) -> DailyJobsReport:
    """
    Run the enabled daily jobs against one storage backend.

    Args:
        stat_store: Storage implementing both the stat store and click sink contracts.
        counters: Lifetime view counter source.
        config (AnalyticsConfig, optional): Shared run configuration.
        today (date, optional): Defaults to the current date in `config.timezone`.
        rollup_days (int): Complete days before `today` whose clicks are
            (re)rolled up, oldest first.
    """
    config = config or AnalyticsConfig()
    today = today or config.today()
    report = DailyJobsReport(today=today)

    if aggregate:
        try:
            report.aggregation = DailyAggregator(stat_store, counters, config).run_daily_aggregation(today)
        except Exception as exc:
            report.crashed.append(f"aggregation: {exc}")
            log.exception("[Analytics Jobs] View aggregation crashed")

    if rollup_clicks:
        rollup = ClickRollup(stat_store, stat_store, config)
        for days_back in range(rollup_days, 0, -1):
            day = today - timedelta(days=days_back)
            try:
                report.rollups.append(rollup.rollup_day(day))
            except Exception as exc:
                report.crashed.append(f"rollup {day}: {exc}")
                log.exception("[Analytics Jobs] Click rollup crashed for %s", day)

    if prune:
        try:
            report.pruning = RetentionPruner(stat_store, config).prune_older_than(config.retention_days, today)
        except Exception as exc:
            report.crashed.append(f"pruning: {exc}")
            log.exception("[Analytics Jobs] Retention pruning crashed")

    log.info("[Analytics Jobs] Daily jobs for %s finished (ok=%s).", today, report.ok)
    return report
