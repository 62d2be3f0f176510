"""
Main API module for Link Page Analytics.

Responsibilities:
    - Expose the click-tracking endpoint used by public link pages
    - Record each click (link page, url, visitor metadata) as an append-only event
    - Health check for the process supervisor

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - In-memory storage by default; LPA_STORAGE_BACKEND=postgres switches to Postgres.
    - Daily aggregation/pruning do not run here; see `run_daily_jobs.py`.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from linkpage_analytics.analytics.clicks import ClickRecorder
from linkpage_analytics.config import AnalyticsConfig, settings
from linkpage_analytics.storage.storage_factory import get_storage


class ClickRequest(BaseModel):
    """Payload sent by the link page tracking script."""
    link_page_id: Optional[int] = None
    link_url: Optional[str] = None


def create_app(storage=None, config: Optional[AnalyticsConfig] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage: Click sink to record into. Defaults to `get_storage()`.
        config (AnalyticsConfig, optional): Timezone used for click timestamps.

    Returns:
        FastAPI: A configured application with its own storage instance.
    """
    app = FastAPI(
        title="Link Page Analytics",
        description="Click tracking for artist link pages",
        docs_url="/docs",
    )
    log = logging.getLogger("linkpage_analytics")

    # basic console logging (optional)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    storage = storage if storage is not None else get_storage()
    recorder = ClickRecorder(storage, config or AnalyticsConfig.from_settings())
    app.state.storage = storage
    app.state.recorder = recorder

    log.info("Link page analytics storage backend: %s", settings.STORAGE_BACKEND)

    @app.exception_handler(RequestValidationError)
    async def invalid_payload(request: Request, exc: RequestValidationError):
        # Malformed JSON or wrongly typed fields are treated like missing ones
        log.debug("Rejected click payload: %s", exc.errors())
        return JSONResponse(status_code=400, content={"detail": "Invalid request"})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.post("/link-page/click")
    def track_click(req: ClickRequest, request: Request) -> Dict[str, Any]:
        """
        Record a click on an outbound link of a link page.

        Raises:
            HTTPException: 400 if link_page_id or link_url is missing or invalid.
        """
        if req.link_page_id is None or not req.link_url:
            raise HTTPException(status_code=400, detail="Invalid request")

        try:
            recorder.record(
                req.link_page_id,
                req.link_url,
                client_address=request.client.host if request.client else "",
                user_agent=request.headers.get("user-agent", ""),
                referrer=request.headers.get("referer", ""),
            )
        except ValueError as ve:
            raise HTTPException(status_code=400, detail=str(ve))

        return {"status": "success"}

    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
