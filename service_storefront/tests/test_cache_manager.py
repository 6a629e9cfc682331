"""
Unit tests for the read-through cache manager.
"""

import pytest
from unittest.mock import AsyncMock

from service_storefront.app.caching.cache_manager import (
    CacheManager,
    QUICK_PRODUCTS_KEY,
    product_handle_key,
    product_id_key,
)


class DummyMetrics:
    """Minimal metrics collector stub."""

    def __init__(self):
        self.counters = []
        self.gauges = []

    def increment_counter(self, metric_name: str, amount: float = 1, **labels):
        self.counters.append((metric_name, labels))

    def set_gauge(self, metric_name: str, value: float, **labels):
        self.gauges.append((metric_name, value))


class TestCacheManager:
    """Test cases for CacheManager."""

    @pytest.fixture
    def metrics(self):
        return DummyMetrics()

    @pytest.fixture
    def cache_manager(self, store, metrics):
        return CacheManager(store, metrics=metrics)

    def test_key_builders(self):
        assert product_id_key("42") == "product:id:42"
        assert product_handle_key("peanut-bar") == "product:handle:peanut-bar"
        assert QUICK_PRODUCTS_KEY == "products:quick:v1"

    @pytest.mark.asyncio
    async def test_miss_loads_and_stores(self, cache_manager, store):
        loader = AsyncMock(return_value={"id": "1"})

        value, hit = await cache_manager.get_or_load("product:id:1", loader, 600, cache_type="product_detail")

        assert value == {"id": "1"}
        assert hit is False
        assert store.get("product:id:1") == {"id": "1"}
        loader.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_hit_skips_loader(self, cache_manager, store, metrics):
        store.set("product:id:1", {"id": "1"}, 600)
        loader = AsyncMock()

        value, hit = await cache_manager.get_or_load("product:id:1", loader, 600, cache_type="product_detail")

        assert value == {"id": "1"}
        assert hit is True
        loader.assert_not_awaited()
        assert metrics.counters == [("cache_hits_total", {"cache_type": "product_detail"})]

    @pytest.mark.asyncio
    async def test_none_result_not_cached(self, cache_manager, store):
        loader = AsyncMock(return_value=None)

        value, hit = await cache_manager.get_or_load("product:id:404", loader, 600)

        assert value is None
        assert hit is False
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_loader_failure_leaves_cache_untouched(self, cache_manager, store, metrics):
        loader = AsyncMock(side_effect=RuntimeError("upstream down"))

        with pytest.raises(RuntimeError):
            await cache_manager.get_or_load("product:id:1", loader, 600)

        assert len(store) == 0
        assert metrics.counters == [("cache_misses_total", {"cache_type": "default"})]

    @pytest.mark.asyncio
    async def test_expired_entry_reloads(self, cache_manager, store, clock):
        loader = AsyncMock(side_effect=[["first"], ["second"]])

        await cache_manager.get_or_load(QUICK_PRODUCTS_KEY, loader, 300)
        clock.advance(301)
        value, hit = await cache_manager.get_or_load(QUICK_PRODUCTS_KEY, loader, 300)

        assert value == ["second"]
        assert hit is False

    def test_invalidate_exact_key(self, cache_manager, store):
        store.set("product:id:1", {}, 600)

        assert cache_manager.invalidate("product:id:1") == 1
        assert cache_manager.invalidate("product:id:1") == 0

    def test_invalidate_pattern(self, cache_manager, store):
        store.set("product:id:1", {}, 600)
        store.set("product:id:2", {}, 600)
        store.set(QUICK_PRODUCTS_KEY, [], 300)

        assert cache_manager.invalidate("product:id:*") == 2
        assert QUICK_PRODUCTS_KEY in store

    def test_clear_resets_gauge(self, cache_manager, store, metrics):
        cache_manager.put("k", "v", 60)
        cache_manager.clear()

        assert len(store) == 0
        assert metrics.gauges == [("cache_entries", 1), ("cache_entries", 0)]

    def test_cache_stats(self, cache_manager, store):
        store.set(QUICK_PRODUCTS_KEY, [], 300)

        stats = cache_manager.get_cache_stats()

        assert stats["size"] == 1
        assert stats["hot_keys"] == {QUICK_PRODUCTS_KEY: True}
        assert stats["default_ttls"] == {"quick_products": 300, "product_detail": 600}

    @pytest.mark.asyncio
    async def test_works_without_metrics(self, store):
        manager = CacheManager(store)
        value, hit = await manager.get_or_load("k", AsyncMock(return_value=1), 60)
        assert (value, hit) == (1, False)
        manager.clear()
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_loaded_value_updates_entry_gauge(self, cache_manager, metrics):
        await cache_manager.get_or_load("product:id:1", AsyncMock(return_value={"id": "1"}), 600)

        assert metrics.gauges == [("cache_entries", 1)]
