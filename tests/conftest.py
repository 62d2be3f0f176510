"""
Global pytest fixtures for the Link Page Analytics test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide isolated in-memory Storage and CounterSource fixtures
    - Provide aggregator / pruner / recorder fixtures wired to those stores

Why an app factory?
    Using `create_app()` ensures each test gets fresh in-memory state,
    eliminating cross-test flakiness.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from main import create_app
from linkpage_analytics.analytics.aggregator import DailyAggregator
from linkpage_analytics.analytics.clicks import ClickRecorder, ClickRollup
from linkpage_analytics.analytics.pruner import RetentionPruner
from linkpage_analytics.config import AnalyticsConfig
from linkpage_analytics.storage.storage import CounterSource, Storage


TODAY = date(2024, 5, 15)


@pytest.fixture
def today() -> date:
    """Fixed 'today' so no test depends on the wall clock."""
    return TODAY


@pytest.fixture
def config() -> AnalyticsConfig:
    return AnalyticsConfig(retention_days=90, timezone="UTC")


@pytest.fixture
def storage() -> Storage:
    """Provide a fresh in-memory Storage backend."""
    return Storage()


@pytest.fixture
def counters() -> CounterSource:
    """Provide an empty in-memory lifetime counter source."""
    return CounterSource()


@pytest.fixture
def aggregator(storage, counters, config) -> DailyAggregator:
    return DailyAggregator(storage, counters, config)


@pytest.fixture
def pruner(storage, config) -> RetentionPruner:
    return RetentionPruner(storage, config)


@pytest.fixture
def recorder(storage, config) -> ClickRecorder:
    return ClickRecorder(storage, config)


@pytest.fixture
def rollup(storage, config) -> ClickRollup:
    return ClickRollup(storage, storage, config)


@pytest.fixture
def client(storage, config) -> TestClient:
    """
    Provide a fresh TestClient with a new app instance.

    The app records into the `storage` fixture so tests can inspect events.
    """
    app = create_app(storage=storage, config=config)
    return TestClient(app)
