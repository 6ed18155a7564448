# src/services/scheduler.py

"""Fixed-interval refresh scheduler running on the asyncio loop."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from src.storage.document_cache import DocumentCache

logger = logging.getLogger("catalog_feed.scheduler")


class RefreshScheduler:
    """Periodically refreshes a :class:`DocumentCache`.

    The blocking refresh runs on a worker thread so the event loop keeps
    serving reads. Each cycle waits for the previous refresh to finish
    before sleeping again, so scheduled refreshes never overlap.
    """

    def __init__(
        self,
        cache: DocumentCache,
        interval_minutes: float,
    ) -> None:
        self.cache = cache
        self.interval = timedelta(minutes=interval_minutes)
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while True:
            next_run = datetime.now(timezone.utc) + self.interval
            self.cache.set_next_scheduled(next_run)
            await asyncio.sleep(self.interval.total_seconds())
            logger.info("Scheduled refresh starting")
            outcome = await asyncio.to_thread(self.cache.refresh)
            if not outcome.success:
                logger.warning(
                    "Scheduled refresh failed: %s", outcome.error
                )

    def start(self) -> None:
        """Start the background loop (no-op when already running)."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(
            "Refresh scheduler started (every %.0f minutes)",
            self.interval.total_seconds() / 60,
        )

    async def stop(self) -> None:
        """Cancel the loop; an in-flight refresh thread runs to completion."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self.cache.set_next_scheduled(None)
        logger.info("Refresh scheduler stopped")
