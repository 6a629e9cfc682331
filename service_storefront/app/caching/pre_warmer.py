"""
Scheduled pre-warming of the hot product listing.
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from shared.logging import get_logger
from .cache_manager import QUICK_PRODUCTS_KEY, QUICK_PRODUCTS_TTL

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..catalog.service import ProductCatalogService
    from shared.metrics import MetricsCollector


DEFAULT_SCHEDULE = "*/4 * * * *"
DEFAULT_INITIAL_DELAY_SECONDS = 5.0

INITIAL_JOB_ID = "prewarm-initial"
SCHEDULED_JOB_ID = "prewarm-scheduled"


class ProductPreWarmer:
    """Keeps `products:quick:v1` populated ahead of user traffic.

    A pass that fails is logged and leaves whatever is cached untouched; the
    next scheduled pass is the only retry.
    """

    def __init__(
        self,
        catalog: "ProductCatalogService",
        *,
        schedule: str = DEFAULT_SCHEDULE,
        initial_delay_seconds: float = DEFAULT_INITIAL_DELAY_SECONDS,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.catalog = catalog
        self.schedule = schedule
        self.initial_delay_seconds = initial_delay_seconds
        self.metrics = metrics
        self.logger = get_logger("storefront.pre_warmer")
        # Rejects malformed expressions at construction time
        self._trigger = CronTrigger.from_crontab(schedule, timezone=timezone.utc)
        self._scheduler: Optional[AsyncIOScheduler] = None
        self.last_summary: Optional[Dict[str, Any]] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> AsyncIOScheduler:
        """Schedule the initial pass and the recurring passes.

        Must be called from within the running event loop.
        """
        if self.running:
            return self._scheduler

        scheduler = AsyncIOScheduler(timezone=timezone.utc)
        run_date = datetime.now(timezone.utc) + timedelta(seconds=self.initial_delay_seconds)
        scheduler.add_job(
            self.warm_once,
            DateTrigger(run_date=run_date),
            id=INITIAL_JOB_ID,
            misfire_grace_time=None,
        )
        scheduler.add_job(
            self.warm_once,
            self._trigger,
            id=SCHEDULED_JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler

        self.logger.info(
            "Cache pre-warming scheduled",
            schedule=self.schedule,
            initial_delay_seconds=self.initial_delay_seconds,
        )
        return scheduler

    def stop(self) -> None:
        """Drop pending passes. A pass already awaiting the upstream finishes on its own."""
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        self.logger.info("Cache pre-warming stopped")

    async def warm_once(self) -> Dict[str, Any]:
        """Run one population pass and return its summary."""
        self.logger.info("Pre-warming product cache", key=QUICK_PRODUCTS_KEY)
        start = time.perf_counter()
        summary: Dict[str, Any] = {
            "key": QUICK_PRODUCTS_KEY,
            "ttl_seconds": QUICK_PRODUCTS_TTL,
            "warmed": 0,
            "error": None,
        }

        try:
            products = await self.catalog.refresh_quick_products()
            summary["warmed"] = len(products)
            result = "success"
            self.logger.info("Cache pre-warmed", key=QUICK_PRODUCTS_KEY, products=len(products))
        except Exception as exc:
            summary["error"] = str(exc)
            result = "error"
            self.logger.error("Cache pre-warming failed", key=QUICK_PRODUCTS_KEY, error=str(exc))
        finally:
            summary["duration_ms"] = round((time.perf_counter() - start) * 1000, 2)

        self._record_metrics(result, summary["duration_ms"] / 1000)
        self.last_summary = summary
        return summary

    def _record_metrics(self, result: str, duration: float) -> None:
        if not self.metrics:
            return
        self.metrics.increment_counter("cache_prewarm_total", result=result)
        self.metrics.observe_histogram("cache_prewarm_duration_seconds", duration)
