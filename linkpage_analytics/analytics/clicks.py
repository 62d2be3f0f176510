"""
Click tracking for public link pages.

Responsibilities:
    - Record one click event per outbound link click (append-only)
    - Roll a day's click events into the daily per-link click table

Attributes:
    ClickRecorder: validates input and stamps the server-side timestamp.
    ClickRollup: counts events per (link page, url) for one calendar day and
        overwrites the matching daily rows, so re-running a day is harmless.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional
from urllib.parse import urlparse

from ..config import AnalyticsConfig
from ..storage.base import BaseClickSink, BaseStatStore
from .models import ClickEvent, RollupResult

log = logging.getLogger(__name__)

MAX_URL_LENGTH = 2083


def normalize_link_url(link_url: str) -> str:
    """
    Strip and validate an outbound link URL.

    Raises:
        ValueError: If the URL is empty, too long, not http(s) or has no host.
    """
    url = (link_url or "").strip()
    if not url:
        raise ValueError("Missing link URL")
    if len(url) > MAX_URL_LENGTH:
        raise ValueError("Link URL too long")
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid link URL")
    return url


class ClickRecorder:
    def __init__(self, sink: BaseClickSink, config: Optional[AnalyticsConfig] = None):
        self.sink = sink
        self.config = config or AnalyticsConfig()

    def record(
        self,
        subject_id: int,
        link_url: str,
        client_address: str = "",
        user_agent: str = "",
        referrer: str = "",
    ) -> ClickEvent:
        """
        Append one click event and return it.

        Args:
            subject_id (int): Link page the click happened on.
            link_url (str): Outbound link that was clicked.
            client_address (str): Remote address of the visitor.
            user_agent (str): Visitor's User-Agent header.
            referrer (str): Visitor's Referer header.

        Raises:
            ValueError: On a non-positive link page id or an invalid URL.
        """
        if isinstance(subject_id, bool) or not isinstance(subject_id, int) or subject_id <= 0:
            raise ValueError("Invalid link page id")

        event = ClickEvent(
            subject_id=subject_id,
            link_url=normalize_link_url(link_url),
            client_address=client_address or "",
            user_agent=user_agent or "",
            referrer=referrer or "",
            clicked_at=self.config.now(),
        )
        self.sink.append_click(event)
        return event


class ClickRollup:
    def __init__(
        self,
        stat_store: BaseStatStore,
        sink: BaseClickSink,
        config: Optional[AnalyticsConfig] = None,
    ):
        self.stat_store = stat_store
        self.sink = sink
        self.config = config or AnalyticsConfig()

    def day_window(self, day: date):
        """[start, end) of `day` as aware datetimes in the configured timezone."""
        start = datetime.combine(day, time.min, tzinfo=self.config.tzinfo)
        end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=self.config.tzinfo)
        return start, end

    def rollup_day(self, day: Optional[date] = None) -> RollupResult:
        """
        Write the daily per-link click rows for `day`.

        Defaults to yesterday, the last complete day in the configured timezone.

        Returns:
            RollupResult: Rows written plus any errors met along the way.
        """
        day = day or self.config.today() - timedelta(days=1)
        start, end = self.day_window(day)
        result = RollupResult(stat_date=day)

        try:
            counts = self.sink.count_clicks_between(start, end)
        except Exception as exc:
            result.errors.append(str(exc))
            log.error("[Analytics Click Rollup] Error reading click events for %s: %s", day, exc)
            return result

        for (subject_id, link_url), count in sorted(counts.items()):
            try:
                self.stat_store.upsert_daily_link_clicks(subject_id, day, link_url, count)
                result.written += 1
            except Exception as exc:
                result.errors.append(str(exc))
                log.error(
                    "[Analytics Click Rollup] Error writing clicks for link page %s: %s",
                    subject_id,
                    exc,
                )

        log.info("[Analytics Click Rollup] Rolled up %d link click rows for %s.", result.written, day)
        return result
