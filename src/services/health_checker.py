# src/services/health_checker.py

"""Catalog API connectivity health checker."""

import logging
import time
from dataclasses import dataclass, replace
from typing import Any

from src.clients.catalog_client import CatalogClient, UpstreamError
from src.models.catalog_query import CatalogQuery

logger = logging.getLogger("catalog_feed.health")

_SLOW_THRESHOLD_MS = 5000


@dataclass
class HealthResult:
    """Result of a single catalog health probe."""

    source_id: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_catalog(
    client: Any,
    query: CatalogQuery,
    source_id: str = "catalog",
) -> HealthResult:
    """Request page 1 of the first category and classify the result."""
    probe_query = replace(query.split_by_category()[0], page=1)

    start = time.monotonic()
    try:
        payload = client.fetch_page(probe_query, 1)
    except UpstreamError as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        message = (
            f"HTTP {exc.status}" if exc.status is not None else str(exc)
        )
        return HealthResult(
            source_id=source_id,
            status="down",
            latency_ms=elapsed_ms,
            message=message[:80],
        )
    elapsed_ms = (time.monotonic() - start) * 1000

    items = payload.get("data")
    count = len(items) if isinstance(items, list) else 0
    page_count = payload.get("pageCount", "?")

    if elapsed_ms > _SLOW_THRESHOLD_MS:
        return HealthResult(
            source_id=source_id,
            status="slow",
            latency_ms=elapsed_ms,
            message="High latency",
        )

    return HealthResult(
        source_id=source_id,
        status="ok",
        latency_ms=elapsed_ms,
        message=f"{count} items on page 1 of {page_count}",
    )


class HealthChecker:
    """Probes the configured catalog endpoint."""

    def __init__(self, client: Any = None) -> None:
        self.client = client if client is not None else CatalogClient()

    def check(self, query: CatalogQuery) -> HealthResult:
        result = probe_catalog(self.client, query)
        logger.info(
            "Health check %s: %s (%.0fms) %s",
            result.source_id,
            result.status,
            result.latency_ms,
            result.message,
        )
        return result
