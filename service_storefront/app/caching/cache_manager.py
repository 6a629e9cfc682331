"""
Read-through caching for request handlers and the pre-warmer.

Hot keys and their TTLs are defined here once. The quick-list request
handler and the pre-warmer both write `QUICK_PRODUCTS_KEY` with
`QUICK_PRODUCTS_TTL`; diverging values would make one path see a miss right
after the other populated the key.
"""

from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TYPE_CHECKING

from shared.logging import get_logger
from .cache_store import CacheStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


QUICK_PRODUCTS_KEY = "products:quick:v1"
QUICK_PRODUCTS_TTL = 300
PRODUCT_DETAIL_TTL = 600


def product_id_key(product_id: str) -> str:
    return f"product:id:{product_id}"


def product_handle_key(handle: str) -> str:
    return f"product:handle:{handle}"


class CacheManager:
    """Wraps upstream loaders with the shared response cache."""

    def __init__(self, store: CacheStore, *, metrics: Optional["MetricsCollector"] = None):
        self.store = store
        self.metrics = metrics
        self.logger = get_logger("storefront.cache_manager")

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        ttl_seconds: int,
        *,
        cache_type: str = "default",
    ) -> Tuple[Any, bool]:
        """Return `(value, hit)`.

        On a miss the loader runs and a non-None result is stored. Loader
        exceptions propagate and leave the key untouched. Concurrent misses on
        the same key may both load; the last write wins.
        """
        cached = self.store.get(key)
        if cached is not None:
            self._record(cache_type, hit=True)
            self.logger.debug("Cache hit", key=key)
            return cached, True

        self._record(cache_type, hit=False)
        value = await loader()
        if value is not None:
            self.put(key, value, ttl_seconds)
        return value, False

    def put(self, key: str, value: Any, ttl_seconds: int) -> None:
        self.store.set(key, value, ttl_seconds)
        if self.metrics:
            self.metrics.set_gauge("cache_entries", len(self.store))

    def invalidate(self, pattern: str) -> int:
        if any(char in pattern for char in "*?["):
            return self.store.delete_pattern(pattern)
        removed = 1 if pattern in self.store else 0
        self.store.delete(pattern)
        return removed

    def clear(self) -> None:
        self.store.clear()
        if self.metrics:
            self.metrics.set_gauge("cache_entries", 0)

    def get_cache_stats(self) -> Dict[str, Any]:
        stats = self.store.stats()
        stats["hot_keys"] = {QUICK_PRODUCTS_KEY: QUICK_PRODUCTS_KEY in self.store}
        stats["default_ttls"] = {
            "quick_products": QUICK_PRODUCTS_TTL,
            "product_detail": PRODUCT_DETAIL_TTL,
        }
        return stats

    def _record(self, cache_type: str, *, hit: bool) -> None:
        if not self.metrics:
            return
        metric = "cache_hits_total" if hit else "cache_misses_total"
        self.metrics.increment_counter(metric, cache_type=cache_type)
