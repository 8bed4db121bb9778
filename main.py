"""
Main API module for Tidylink.

Responsibilities:
    - Expose endpoints for creating short links and redirecting
    - Canonicalize incoming URLs before they are stored
    - Run the retention sweep in the background while the app is up

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - All collaborators live in an AppContext built at startup and captured by
      the route closures; handlers never reach for module globals.
    - Canonicalizer and LinkStore hold the rules; this module only maps
      their results and errors onto HTTP.

Run:
    python main.py            # logging + storage from TIDYLINK_* env vars
    uvicorn main:app --reload
"""

import asyncio
import contextlib
import logging
import sys
from typing import Any, Dict, Optional, Tuple

import uvicorn
from fastapi import FastAPI, HTTPException, Query, status
from fastapi.responses import PlainTextResponse, RedirectResponse
from pydantic import BaseModel

from tidylink.config import settings
from tidylink.context import AppContext, build_context
from tidylink.errors import InvalidURLError, StorageError
from tidylink.logging_config import setup_logging
from tidylink.sweeper import periodic_sweep

log = logging.getLogger("tidylink")


class URLRequest(BaseModel):
    """Request payload for creating a new short link."""
    url: str


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        context (Optional[AppContext]): Pre-built collaborators. When omitted,
            one is built from environment settings.

    Returns:
        FastAPI: A configured application bound to that context.

    Why an app factory?
        - Enables per-test isolation in pytest (fresh in-memory storage each time).
        - Storage backend and settings are injected, not imported.
    """
    ctx = context or build_context()

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        interval = ctx.settings.SWEEP_INTERVAL_SECONDS
        if interval > 0:
            task = asyncio.create_task(periodic_sweep(ctx, interval))
            log.info("Scheduled link sweep every %ss (retention %d days)", interval, ctx.settings.RETENTION_DAYS)
        yield
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    app = FastAPI(
        title="Tidylink",
        description="URL shortener that strips tracking parameters and unwraps redirector links",
        lifespan=lifespan,
    )
    app.state.context = ctx

    # ----------------------------------------------------------------
    # Utilities
    # ----------------------------------------------------------------
    def _issue(raw_url: Optional[str]) -> Tuple[str, str]:
        """
        Canonicalize `raw_url` and store it under a new code.

        Returns:
            tuple: (code, canonical_url)

        Raises:
            HTTPException: 400 for missing/invalid input, 500 on storage failure.
        """
        if not raw_url:
            raise HTTPException(status_code=400, detail="Missing 'url' parameter")
        try:
            canonical = ctx.canonicalizer.canonicalize(raw_url)
        except InvalidURLError as exc:
            ctx.logger.info("Rejected URL %r: %s", raw_url, exc)
            raise HTTPException(status_code=400, detail="Invalid URL")
        try:
            code = ctx.links.create(canonical)
        except StorageError as exc:
            ctx.logger.error("Error creating link: %s", exc)
            raise HTTPException(status_code=500, detail="Database error")
        return code, canonical

    def _short_url(code: str) -> str:
        return f"{ctx.settings.SHORT_DOMAIN}/{code}"

    # Health check (underscore keeps it out of the code alphabet)
    @app.get("/_health")
    def health():
        return {"status": "ok"}

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.api_route("/shorten", methods=["GET", "POST"], response_class=PlainTextResponse)
    def shorten(url: Optional[str] = Query(None, description="URL to shorten")) -> PlainTextResponse:
        """
        Shorten `url` and answer with the short URL as plain text.

        Example:
            GET /shorten?url=https://example.com/a?utm_source=x&id=5
            -> "http://localhost/Ab3xZ9"
        """
        code, _ = _issue(url)
        return PlainTextResponse(_short_url(code))

    @app.post("/api/links", status_code=status.HTTP_201_CREATED)
    def create_link(req: URLRequest) -> Dict[str, Any]:
        """
        JSON variant of /shorten.

        Returns:
            dict: code, short_url and the canonical url that was stored.
        """
        code, canonical = _issue(req.url)
        return {"code": code, "short_url": _short_url(code), "url": canonical}

    @app.get("/")
    def root():
        raise HTTPException(status_code=404, detail="Not Found")

    @app.get("/{code}")
    def redirect_link(code: str) -> RedirectResponse:
        """
        Redirect to the URL stored under `code`.

        Raises:
            HTTPException: 404 if the code is unknown or has been swept,
                500 on storage failure.
        """
        try:
            target = ctx.links.resolve(code)
        except StorageError as exc:
            ctx.logger.error("Error resolving %r: %s", code, exc)
            raise HTTPException(status_code=500, detail="Database error")
        if target is None:
            raise HTTPException(status_code=404, detail="Not Found")
        return RedirectResponse(url=target, status_code=302)

    return app


def run() -> None:
    """Configure logging, open storage (fatal on failure) and serve."""
    setup_logging(settings.LOG_LEVEL, settings.LOG_PATH or None)
    log.info("Logger initialised.")
    try:
        context = build_context(settings)
    except (StorageError, ValueError) as exc:
        log.critical("Cannot initialise storage: %s", exc)
        sys.exit(1)
    log.info("Starting HTTP server on %s:%d", settings.HOST, settings.PORT)
    uvicorn.run(create_app(context), host=settings.HOST, port=settings.PORT, log_config=None)


# `uvicorn main:app` and `from main import app` keep working.
app = create_app()

if __name__ == "__main__":
    run()
