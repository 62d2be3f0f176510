"""
Domain records for Link Page Analytics.

Responsibilities:
    - Describe the rows kept in the daily stat tables
    - Describe a single recorded click event
    - Describe the outcome of each daily job run

All records are plain dataclasses so the storage backends (in-memory, Postgres)
can build and return them without any ORM in between.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional


@dataclass(frozen=True)
class DailyStat:
    """Views attributed to one link page on one calendar day."""
    subject_id: int
    stat_date: date
    count: int


@dataclass(frozen=True)
class DailyLinkClickStat:
    """Clicks on one outbound link of a link page on one calendar day."""
    subject_id: int
    stat_date: date
    link_url: str
    count: int


@dataclass(frozen=True)
class ClickEvent:
    """
    One click on a link page, as received from the browser.

    `clicked_at` is assigned by the server, never by the client.
    """
    subject_id: int
    link_url: str
    client_address: str
    user_agent: str
    referrer: str
    clicked_at: datetime


@dataclass
class AggregationResult:
    """
    Outcome of one daily view aggregation.

    Attributes:
        stat_date (date): Day the increments were written for.
        aggregated (int): Link pages for which a row was written or overwritten.
        unchanged (int): Link pages with a non-positive increment (no write).
        failed (List[int]): Link pages skipped because of a store error.
        error (str, optional): Set when the link pages could not be listed at all.
    """
    stat_date: date
    aggregated: int = 0
    unchanged: int = 0
    failed: List[int] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.failed and self.error is None


@dataclass
class PruneResult:
    """
    Outcome of one retention pass.

    A table whose deletion failed reports `None` and has its error message
    under `errors[<table>]`.
    """
    cutoff: date
    views_deleted: Optional[int] = None
    clicks_deleted: Optional[int] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class RollupResult:
    """Outcome of rolling one day's click events into the daily click table."""
    stat_date: date
    written: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
