"""
Storage factory – switch storage backend from config (lazy env version)
======================================================================

This module centralizes selection of the storage backend (in-memory vs DB)
so the daily jobs and the click endpoint stay ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the DB backend **only if** the selected backend is "postgres".

Environment variables
---------------------
- LPA_STORAGE_BACKEND: "memory" (default) or "postgres"
- LPA_DB_DSN:          DSN string if backend=="postgres"
"""

import logging
import os
from typing import Dict, Optional

from linkpage_analytics.storage.storage import CounterSource, Storage

log = logging.getLogger(__name__)


def _resolve(backend: Optional[str]) -> str:
    return (backend or os.getenv("LPA_STORAGE_BACKEND", "memory")).strip().lower()


def _resolve_dsn(kwargs: dict) -> str:
    dsn = kwargs.get("dsn") or os.getenv("LPA_DB_DSN", "")
    if not dsn:
        raise ValueError("DB_DSN is required for postgres backend (env LPA_DB_DSN)")
    return dsn


def get_storage(backend: Optional[str] = None, **kwargs):
    """
    Return a stat store / click sink based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory" (default) or "postgres". If omitted, reads LPA_STORAGE_BACKEND.
    kwargs : dict
        Extra args passed to the backend constructor. For postgres, use dsn="...".
    """
    be = _resolve(backend)
    log.debug("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "postgres":
        dsn = _resolve_dsn(kwargs)
        # Local import to avoid hard dependency when not using postgres
        from linkpage_analytics.storage.db_storage import DBStorage
        return DBStorage(dsn=dsn)

    raise ValueError(f"Unknown storage backend: {be!r}")


def get_counter_source(
    backend: Optional[str] = None,
    counters: Optional[Dict[int, int]] = None,
    **kwargs,
):
    """
    Return the lifetime counter source matching the storage backend.

    For "memory", `counters` seeds the in-memory source (link_page_id -> views).
    """
    be = _resolve(backend)

    if be == "memory":
        return CounterSource(counters=counters)

    if be == "postgres":
        dsn = _resolve_dsn(kwargs)
        from linkpage_analytics.storage.db_storage import DBCounterSource
        return DBCounterSource(dsn=dsn)

    raise ValueError(f"Unknown storage backend: {be!r}")
