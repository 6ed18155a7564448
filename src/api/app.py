# src/api/app.py

"""HTTP surface: serves the cached feed, its status and manual refresh."""

import asyncio
import html
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse, Response

from src.config.settings import Settings
from src.models.rendered_document import iso_utc
from src.services.scheduler import RefreshScheduler
from src.storage.document_cache import DocumentCache

logger = logging.getLogger("catalog_feed.api")

XML_MEDIA_TYPE = "application/xml; charset=utf-8"


def create_app(
    cache: DocumentCache,
    scheduler: RefreshScheduler | None = None,
    initial_refresh: bool = True,
    schema_name: str = "",
    stock_policy: str = "",
) -> FastAPI:
    """Build the FastAPI app around an existing cache.

    On startup the first refresh runs before the scheduler starts, so
    the first scheduled refresh happens one interval after it.
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if initial_refresh:
            await asyncio.to_thread(cache.refresh)
        if scheduler is not None:
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None:
                await scheduler.stop()

    app = FastAPI(
        title="Catalog XML Feed",
        description="Serves the remote product catalog as a fixed-schema XML feed",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.get("/products.xml")
    async def products_xml() -> Response:
        document = cache.current_document()
        return Response(
            content=document.content,
            media_type=XML_MEDIA_TYPE,
            headers={"Cache-Control": "no-cache"},
        )

    @app.get("/status")
    async def status() -> dict[str, object]:
        snapshot = cache.status()
        query = snapshot.active_query
        return {
            "status": "running",
            "lastUpdate": iso_utc(snapshot.last_success_at),
            "nextUpdate": iso_utc(snapshot.next_scheduled_at),
            "config": {
                "updateIntervalMinutes": Settings.UPDATE_INTERVAL_MINUTES,
                "productType": query.product_type,
                "categories": query.category or "all",
                "schema": schema_name,
                "stockPolicy": stock_policy,
                "query": query.describe(),
            },
        }

    @app.post("/refresh")
    async def refresh() -> JSONResponse:
        outcome = await asyncio.to_thread(cache.refresh)
        if outcome.success:
            return JSONResponse(
                {
                    "success": True,
                    "message": "XML updated successfully.",
                    "updatedAt": iso_utc(outcome.updated_at),
                    "recordCount": outcome.record_count,
                }
            )
        return JSONResponse(
            {
                "success": False,
                "error": outcome.error,
                "previousPreserved": outcome.previous_preserved,
            },
            status_code=500,
        )

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        last = cache.last_success_at
        last_text = (
            last.strftime("%Y-%m-%d %H:%M:%S UTC") if last else "Not updated yet"
        )
        return f"""
      <html>
        <head><title>Catalog XML Feed</title></head>
        <body style="font-family: Arial, sans-serif; max-width: 800px; margin: 50px auto; padding: 20px;">
          <h1>Catalog XML Feed</h1>
          <p>This service pulls products from the catalog API and serves them as XML.</p>
          <h2>Endpoints:</h2>
          <ul>
            <li><a href="/products.xml">/products.xml</a> - Product XML</li>
            <li><a href="/status">/status</a> - Service status (JSON)</li>
            <li><strong>POST /refresh</strong> - Manual XML refresh</li>
          </ul>
          <h2>Status:</h2>
          <p>Last update: {html.escape(last_text)}</p>
          <p>Update interval: {Settings.UPDATE_INTERVAL_MINUTES} minutes</p>
        </body>
      </html>
    """

    return app
