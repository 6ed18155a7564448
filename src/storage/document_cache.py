# src/storage/document_cache.py

"""In-memory cache of the current feed document with refresh coordination."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.clients.catalog_client import UpstreamError
from src.models.catalog_query import CatalogQuery
from src.models.rendered_document import RenderedDocument

logger = logging.getLogger("catalog_feed.cache")

NOT_READY_MESSAGE = "The catalog XML has not been generated yet. Please wait."


@dataclass(frozen=True)
class CacheState:
    """The published document and when a refresh last succeeded."""

    document: RenderedDocument | None = None
    last_success_at: datetime | None = None


@dataclass(frozen=True)
class RefreshOutcome:
    """Result of one refresh attempt."""

    success: bool
    previous_preserved: bool = False
    first_failure_no_fallback: bool = False
    error: str | None = None
    updated_at: datetime | None = None
    record_count: int = 0


@dataclass(frozen=True)
class CacheStatus:
    """Snapshot of cache metadata for status reporting."""

    last_success_at: datetime | None
    next_scheduled_at: datetime | None
    active_query: CatalogQuery


class DocumentCache:
    """Owns the single current feed document.

    Readers never lock: the published :class:`CacheState` is immutable
    and replaced by one reference assignment. Refreshes are serialized
    by ``_refresh_lock``; a trigger that arrives while a refresh is in
    flight waits for it and reuses its outcome instead of fetching again.
    """

    def __init__(self, builder: Any, query: CatalogQuery) -> None:
        self._builder = builder
        self._query = query
        self._state = CacheState()
        self._refresh_lock = threading.Lock()
        self._completed_refreshes = 0
        self._last_outcome: RefreshOutcome | None = None
        self._next_scheduled_at: datetime | None = None

    # ── Reads ────────────────────────────────────────────

    @property
    def builder(self) -> Any:
        return self._builder

    def current_document(self) -> RenderedDocument:
        """Return the published document, or a not-ready error document."""
        document = self._state.document
        if document is None:
            return self._builder.build_error(NOT_READY_MESSAGE)
        return document

    @property
    def last_success_at(self) -> datetime | None:
        return self._state.last_success_at

    def status(self) -> CacheStatus:
        return CacheStatus(
            last_success_at=self._state.last_success_at,
            next_scheduled_at=self._next_scheduled_at,
            active_query=self._query,
        )

    def set_next_scheduled(self, moment: datetime | None) -> None:
        self._next_scheduled_at = moment

    # ── Refresh ──────────────────────────────────────────

    def refresh(self) -> RefreshOutcome:
        """Run one fetch → normalize → render → publish cycle.

        Never raises for pipeline failures; they are logged and
        reported through the returned outcome.
        """
        seen = self._completed_refreshes
        with self._refresh_lock:
            if (
                self._completed_refreshes != seen
                and self._last_outcome is not None
            ):
                logger.info(
                    "Refresh already completed while waiting; "
                    "reusing its outcome"
                )
                return self._last_outcome

            outcome = self._run_refresh()
            self._last_outcome = outcome
            self._completed_refreshes += 1
            return outcome

    def _run_refresh(self) -> RefreshOutcome:
        logger.info("Refreshing catalog feed")
        try:
            document = self._builder.build(self._query)
        except UpstreamError as exc:
            logger.error(
                "Catalog fetch failed: %s | status=%s %s url=%s params=%s "
                "request_headers=%s response_headers=%s body=%s",
                exc,
                exc.status,
                exc.reason,
                exc.url,
                exc.params,
                exc.request_headers,
                exc.response_headers,
                exc.body,
                exc_info=True,
            )
            return self._fallback(str(exc))
        except Exception as exc:
            logger.error(
                "Feed refresh failed: %s", exc, exc_info=True
            )
            return self._fallback(str(exc) or type(exc).__name__)

        self._state = CacheState(
            document=document,
            last_success_at=document.generated_at,
        )
        logger.info(
            "Feed published: %d records at %s",
            document.record_count,
            document.generated_at.isoformat(),
        )
        return RefreshOutcome(
            success=True,
            updated_at=document.generated_at,
            record_count=document.record_count,
        )

    def _fallback(self, message: str) -> RefreshOutcome:
        """Keep the last good document, or publish an error document."""
        if self._state.last_success_at is not None:
            logger.warning(
                "Keeping previous feed from %s",
                self._state.last_success_at.isoformat(),
            )
            return RefreshOutcome(
                success=False,
                previous_preserved=True,
                error=message,
            )

        self._state = CacheState(
            document=self._builder.build_error(message),
            last_success_at=None,
        )
        logger.warning("No previous feed; publishing error document")
        return RefreshOutcome(
            success=False,
            first_failure_no_fallback=True,
            error=message,
        )
