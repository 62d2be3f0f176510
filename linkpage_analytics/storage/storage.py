"""
Storage module for Link Page Analytics (in-memory implementation).

Responsibilities:
    - Keep the daily view table and the daily per-link click table
    - Keep the append-only click event log
    - Provide a dictionary-backed lifetime counter source

Design:
    - This is an in-memory reference implementation of the storage contracts.
    - It is intentionally simple to keep unit/integration tests fast and deterministic.
    - Dictionary keys mirror the unique constraints of the Postgres tables, so
      an upsert is a single assignment and can never produce duplicates.
    - A single lock serializes access so overlapping job runs in threads are safe.
"""

import threading
from collections import Counter
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from ..analytics.models import ClickEvent, DailyLinkClickStat, DailyStat
from .base import BaseClickSink, BaseCounterSource, BaseStatStore


def _in_range(day: date, start: Optional[date], end: Optional[date]) -> bool:
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


class Storage(BaseStatStore, BaseClickSink):
    def __init__(self):
        """
        Initialize empty tables.

        Internal schema:
            self.daily_views       = {(link_page_id, stat_date): view_count}
            self.daily_link_clicks = {(link_page_id, stat_date, link_url): click_count}
            self.click_events      = [ClickEvent, ...]
        """
        self.daily_views: Dict[Tuple[int, date], int] = {}
        self.daily_link_clicks: Dict[Tuple[int, date, str], int] = {}
        self.click_events: List[ClickEvent] = []
        self._lock = threading.Lock()

    # ---- Daily views ------------------------------------------------------

    def historical_view_total(self, subject_id: int, before: date) -> int:
        with self._lock:
            return sum(
                count
                for (page_id, stat_date), count in self.daily_views.items()
                if page_id == subject_id and stat_date < before
            )

    def upsert_daily_views(self, subject_id: int, stat_date: date, count: int) -> None:
        if count < 0:
            raise ValueError("view_count must be non-negative")
        with self._lock:
            self.daily_views[(subject_id, stat_date)] = count

    def get_daily_views(
        self,
        subject_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[DailyStat]:
        with self._lock:
            rows = [
                DailyStat(subject_id=page_id, stat_date=stat_date, count=count)
                for (page_id, stat_date), count in self.daily_views.items()
                if page_id == subject_id and _in_range(stat_date, start, end)
            ]
        return sorted(rows, key=lambda row: row.stat_date)

    def delete_views_before(self, cutoff: date) -> int:
        with self._lock:
            stale = [key for key in self.daily_views if key[1] < cutoff]
            for key in stale:
                del self.daily_views[key]
        return len(stale)

    # ---- Daily link clicks -----------------------------------------------

    def upsert_daily_link_clicks(
        self, subject_id: int, stat_date: date, link_url: str, count: int
    ) -> None:
        if count < 0:
            raise ValueError("click_count must be non-negative")
        with self._lock:
            self.daily_link_clicks[(subject_id, stat_date, link_url)] = count

    def get_daily_link_clicks(
        self,
        subject_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[DailyLinkClickStat]:
        with self._lock:
            rows = [
                DailyLinkClickStat(subject_id=page_id, stat_date=stat_date, link_url=url, count=count)
                for (page_id, stat_date, url), count in self.daily_link_clicks.items()
                if page_id == subject_id and _in_range(stat_date, start, end)
            ]
        return sorted(rows, key=lambda row: (row.stat_date, row.link_url))

    def delete_link_clicks_before(self, cutoff: date) -> int:
        with self._lock:
            stale = [key for key in self.daily_link_clicks if key[1] < cutoff]
            for key in stale:
                del self.daily_link_clicks[key]
        return len(stale)

    # ---- Click events -----------------------------------------------------

    def append_click(self, event: ClickEvent) -> None:
        with self._lock:
            self.click_events.append(event)

    def count_clicks_between(
        self, start: datetime, end: datetime
    ) -> Dict[Tuple[int, str], int]:
        with self._lock:
            counts = Counter(
                (event.subject_id, event.link_url)
                for event in self.click_events
                if start <= event.clicked_at < end
            )
        return dict(counts)


class CounterSource(BaseCounterSource):
    """
    Dictionary-backed lifetime counters.

    Args:
        counters (Dict[int, int]): link_page_id -> lifetime views.
        subjects (Iterable[int], optional): Link pages to aggregate. Defaults to
            the counter keys; pass it explicitly to include pages never viewed.
    """

    def __init__(
        self,
        counters: Optional[Dict[int, int]] = None,
        subjects: Optional[Iterable[int]] = None,
    ):
        self.counters: Dict[int, int] = dict(counters or {})
        self._subjects = list(subjects) if subjects is not None else None

    def subject_ids(self) -> List[int]:
        if self._subjects is not None:
            return list(self._subjects)
        return sorted(self.counters)

    def cumulative_total(self, subject_id: int) -> Optional[int]:
        return self.counters.get(subject_id)

    def record_view(self, subject_id: int, views: int = 1) -> int:
        """Bump a lifetime counter (stands in for the page-view tracker)."""
        self.counters[subject_id] = self.counters.get(subject_id, 0) + views
        return self.counters[subject_id]
