"""
Base storage interfaces for Link Page Analytics.

Purpose:
    Define small, stable contracts that the in-memory and Postgres backends
    implement, so the aggregator, pruner and click recorder never need to
    know where the data lives.

Contracts:
    - BaseStatStore     : the two daily tables (views, per-link clicks)
    - BaseClickSink     : append-only click events
    - BaseCounterSource : read-only lifetime view counters (owned elsewhere)

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from ..analytics.models import ClickEvent, DailyLinkClickStat, DailyStat


class BaseStatStore(ABC):
    """Abstract base class for the daily stat tables."""

    @abstractmethod  # pragma: no cover
    def historical_view_total(self, subject_id: int, before: date) -> int:
        """
        Sum of daily view counts for a link page strictly before `before`.

        Returns:
            int: 0 when the link page has no rows in range.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def upsert_daily_views(self, subject_id: int, stat_date: date, count: int) -> None:
        """
        Insert or overwrite the (subject_id, stat_date) view row.

        Must be a single atomic insert-or-replace keyed on the uniqueness
        constraint, never read-then-write, and never additive.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_daily_views(
        self,
        subject_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[DailyStat]:
        """Return view rows for a link page in [start, end], ordered by date."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete_views_before(self, cutoff: date) -> int:
        """Delete view rows with stat_date < cutoff. Returns rows removed."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def upsert_daily_link_clicks(
        self, subject_id: int, stat_date: date, link_url: str, count: int
    ) -> None:
        """Insert or overwrite the (subject_id, stat_date, link_url) click row."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_daily_link_clicks(
        self,
        subject_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[DailyLinkClickStat]:
        """Return per-link click rows for a link page in [start, end]."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def delete_link_clicks_before(self, cutoff: date) -> int:
        """Delete click rows with stat_date < cutoff. Returns rows removed."""
        raise NotImplementedError


class BaseClickSink(ABC):
    """Abstract base class for the append-only click event log."""

    @abstractmethod  # pragma: no cover
    def append_click(self, event: ClickEvent) -> None:
        """Append one click event. Events are never updated."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def count_clicks_between(
        self, start: datetime, end: datetime
    ) -> Dict[Tuple[int, str], int]:
        """
        Count events with start <= clicked_at < end.

        Returns:
            Dict[Tuple[int, str], int]: (subject_id, link_url) -> clicks.
        """
        raise NotImplementedError


class BaseCounterSource(ABC):
    """Abstract base class for the external lifetime view counters."""

    @abstractmethod  # pragma: no cover
    def subject_ids(self) -> Iterable[int]:
        """Every link page that should be aggregated."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def cumulative_total(self, subject_id: int) -> Optional[int]:
        """Lifetime views for a link page, or None if never counted."""
        raise NotImplementedError
