"""
Periodic reclamation of expired cache entries.
"""

import asyncio
from typing import Optional, TYPE_CHECKING

from shared.logging import get_logger
from .cache_store import CacheStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class ExpirySweeper:
    """Removes entries that expired but were never read again.

    Lazy expiry in `CacheStore.get` already keeps reads correct; the sweeper
    only bounds memory held by dead entries.
    """

    def __init__(
        self,
        store: CacheStore,
        interval_seconds: float = 60.0,
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.store = store
        self.interval_seconds = interval_seconds
        self.metrics = metrics
        self.logger = get_logger("storefront.cache_sweeper")
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Start the sweep loop on the running event loop."""
        if self.running:
            return self._task
        self._task = asyncio.create_task(self._run(), name="cache-expiry-sweeper")
        self.logger.info("Expiry sweeper started", interval_seconds=self.interval_seconds)
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self.logger.info("Expiry sweeper stopped")

    def sweep_once(self) -> int:
        """Run a single sweep and return the number of entries removed."""
        removed = self.store.purge_expired()
        if self.metrics:
            self.metrics.increment_counter("cache_swept_entries_total", removed)
            self.metrics.set_gauge("cache_entries", len(self.store))
        if removed:
            self.logger.debug("Swept expired cache entries", removed=removed, remaining=len(self.store))
        return removed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.sweep_once()
            except Exception as exc:
                self.logger.error("Cache sweep failed", error=str(exc))
