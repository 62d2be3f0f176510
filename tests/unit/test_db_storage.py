from datetime import date, datetime, timezone

import pytest
import psycopg.rows

from linkpage_analytics.analytics.models import ClickEvent, DailyLinkClickStat, DailyStat
from linkpage_analytics.storage import db_storage
from linkpage_analytics.storage.db_storage import DBCounterSource, DBStorage


class DummyCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = conn.rowcount

    def execute(self, query, params=None):
        self.conn.executed.append((" ".join(query.split()), params))
        return True

    def fetchone(self):
        if self.conn.results:
            return self.conn.results.pop(0)
        return None

    def fetchall(self):
        rows, self.conn.results = self.conn.results, []
        return rows

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class DummyConnection:
    def __init__(self, results=None, rowcount=1):
        self.results = list(results or [])
        self.rowcount = rowcount
        self.autocommit = False
        self.executed = []
        self.row_factories = []
        self.closed = False

    def cursor(self, row_factory=None):
        self.row_factories.append(row_factory)
        return DummyCursor(self)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


@pytest.fixture
def patch_connect(monkeypatch):
    def _patch(**kwargs):
        conn = DummyConnection(**kwargs)
        monkeypatch.setattr("psycopg.connect", lambda dsn: conn)
        return conn
    return _patch


# ---------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------

def test_connection_is_autocommit_and_closed(patch_connect):
    conn = patch_connect(results=[(0,)])
    DBStorage("fake").historical_view_total(1, date(2024, 5, 1))
    assert conn.autocommit is True
    assert conn.closed is True


def test_historical_view_total(patch_connect):
    conn = patch_connect(results=[(117,)])
    total = DBStorage("fake").historical_view_total(7, date(2024, 5, 1))
    assert total == 117
    sql, params = conn.executed[0]
    assert "SUM(view_count)" in sql and "stat_date < %s" in sql
    assert params == (7, date(2024, 5, 1))


def test_upsert_daily_views_overwrites_on_conflict(patch_connect):
    conn = patch_connect()
    DBStorage("fake").upsert_daily_views(7, date(2024, 5, 1), 20)
    sql, params = conn.executed[0]
    assert "ON CONFLICT (link_page_id, stat_date) DO UPDATE SET view_count = EXCLUDED.view_count" in sql
    assert params == (7, date(2024, 5, 1), 20)


def test_get_daily_views_maps_rows(patch_connect):
    conn = patch_connect(results=[
        {"link_page_id": 7, "stat_date": date(2024, 5, 1), "view_count": 3},
        {"link_page_id": 7, "stat_date": date(2024, 5, 2), "view_count": 4},
    ])
    rows = DBStorage("fake").get_daily_views(7, start=date(2024, 5, 1))
    assert rows == [DailyStat(7, date(2024, 5, 1), 3), DailyStat(7, date(2024, 5, 2), 4)]
    assert conn.row_factories == [psycopg.rows.dict_row]
    assert conn.executed[0][1] == (7, date(2024, 5, 1), date(2024, 5, 1), None, None)


def test_delete_views_before_returns_rowcount(patch_connect):
    conn = patch_connect(rowcount=12)
    assert DBStorage("fake").delete_views_before(date(2024, 2, 1)) == 12
    assert conn.executed[0][0].startswith("DELETE FROM link_page_daily_views")


def test_delete_link_clicks_before_returns_rowcount(patch_connect):
    conn = patch_connect(rowcount=3)
    assert DBStorage("fake").delete_link_clicks_before(date(2024, 2, 1)) == 3
    assert conn.executed[0][0].startswith("DELETE FROM link_page_daily_link_clicks")


def test_upsert_and_get_link_clicks(patch_connect):
    conn = patch_connect()
    DBStorage("fake").upsert_daily_link_clicks(7, date(2024, 5, 1), "https://a.example", 2)
    assert "ON CONFLICT (link_page_id, stat_date, link_url)" in conn.executed[0][0]

    patch_connect(results=[
        {"link_page_id": 7, "stat_date": date(2024, 5, 1), "link_url": "https://a.example", "click_count": 2},
    ])
    rows = DBStorage("fake").get_daily_link_clicks(7)
    assert rows == [DailyLinkClickStat(7, date(2024, 5, 1), "https://a.example", 2)]


def test_append_click_and_count(patch_connect):
    when = datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
    conn = patch_connect()
    DBStorage("fake").append_click(ClickEvent(7, "https://a.example", "1.2.3.4", "ua", "ref", when))
    sql, params = conn.executed[0]
    assert sql.startswith("INSERT INTO link_page_analytics")
    assert params == (7, "https://a.example", "1.2.3.4", "ua", "ref", when)

    patch_connect(results=[(7, "https://a.example", 5)])
    counts = DBStorage("fake").count_clicks_between(when, when)
    assert counts == {(7, "https://a.example"): 5}


def test_ensure_schema_skips_when_current(patch_connect):
    conn = patch_connect(results=[(db_storage.SCHEMA_VERSION,)])
    assert DBStorage("fake").ensure_schema() is False
    assert len(conn.executed) == 2  # meta table + version lookup


def test_ensure_schema_runs_ddl_when_outdated(patch_connect):
    conn = patch_connect(results=[("1.0",)])
    assert DBStorage("fake").ensure_schema() is True
    statements = [sql for sql, _ in conn.executed]
    assert any("CREATE TABLE IF NOT EXISTS link_page_daily_views" in s for s in statements)
    assert any("CREATE TABLE IF NOT EXISTS link_page_daily_link_clicks" in s for s in statements)
    assert conn.executed[-1][1] == (db_storage.SCHEMA_VERSION_KEY, db_storage.SCHEMA_VERSION)


def test_counter_source(patch_connect):
    patch_connect(results=[(1,), (2,)])
    assert DBCounterSource("fake").subject_ids() == [1, 2]

    patch_connect(results=[(40,)])
    assert DBCounterSource("fake").cumulative_total(1) == 40

    patch_connect(results=[])
    assert DBCounterSource("fake").cumulative_total(1) is None


def test_counter_source_connection_is_autocommit_and_closed(patch_connect):
    conn = patch_connect(results=[(3,)])
    DBCounterSource("fake").subject_ids()
    assert conn.autocommit is True
    assert conn.closed is True
