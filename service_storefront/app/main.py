"""
Storefront access service: catalog, revenue and customer pass-through with
an in-process response cache.
"""

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from fastapi import Query, Request, Response
from pydantic import BaseModel, Field

from shared.base_service import BaseService
from shared.circuit_breaker import CircuitBreakerManager, CircuitBreakerState
from shared.logging import set_customer_context
from .adapters.graphql_client import CatalogGraphQLClient
from .adapters.orders_client import AdminOrdersClient
from .caching.cache_manager import CacheManager
from .caching.cache_store import CacheStore
from .caching.pre_warmer import ProductPreWarmer
from .caching.sweeper import ExpirySweeper
from .catalog.service import ProductCatalogService
from .customers.service import CustomerInsightsService
from .revenue.service import RevenueService


PRODUCTS_PREFIX = "/api/shopify/products"
CUSTOMERS_PREFIX = "/api/admin/customer"


class BatchProductsRequest(BaseModel):
    identifiers: List[str] = Field(..., min_length=1)
    by: Literal["id", "handle"] = Field(default="id", alias="type")


class InvalidateCacheRequest(BaseModel):
    pattern: str = Field(..., min_length=1)


class StorefrontService(BaseService):
    """Backend-for-frontend in front of the commerce platform."""

    def __init__(
        self,
        *,
        catalog_client: Optional[CatalogGraphQLClient] = None,
        orders_client: Optional[AdminOrdersClient] = None,
        cache_store: Optional[CacheStore] = None,
    ):
        super().__init__("storefront", 5000)

        self.circuit_breakers = CircuitBreakerManager()
        self.catalog_client = catalog_client if catalog_client is not None else CatalogGraphQLClient(
            self.config.shop_domain,
            self.config.admin_access_token,
            self.config.graphql_api_version,
            timeout=self.config.upstream_timeout_seconds,
            circuit_breaker=self.circuit_breakers.get_circuit_breaker(
                "catalog_graphql", failure_threshold=3, recovery_timeout=30.0
            ),
        )
        self.orders_client = orders_client if orders_client is not None else AdminOrdersClient(
            self.config.shop_domain,
            self.config.admin_access_token,
            self.config.rest_api_version,
            timeout=self.config.upstream_timeout_seconds,
            circuit_breaker=self.circuit_breakers.get_circuit_breaker(
                "admin_orders", failure_threshold=3, recovery_timeout=30.0
            ),
        )

        self.cache_store = cache_store if cache_store is not None else CacheStore(
            max_entries=self.config.cache_max_entries
        )
        self.cache_manager = CacheManager(self.cache_store, metrics=self.metrics)
        self.catalog = ProductCatalogService(self.catalog_client, self.cache_manager)
        self.revenue = RevenueService(self.orders_client, currency=self.config.revenue_currency)
        self.customers = CustomerInsightsService(self.orders_client)

        self.sweeper = ExpirySweeper(
            self.cache_store,
            self.config.cache_sweep_interval_seconds,
            metrics=self.metrics,
        )
        self.pre_warmer = ProductPreWarmer(
            self.catalog,
            schedule=self.config.prewarm_schedule,
            initial_delay_seconds=self.config.prewarm_initial_delay_seconds,
            metrics=self.metrics,
        )

        self._setup_cache_headers()
        self._setup_catalog_routes()
        self._setup_revenue_routes()
        self._setup_customer_routes()
        self._setup_cache_routes()

        self.app.state.storefront_service = self

    async def on_startup(self) -> None:
        self.sweeper.start()
        if self.config.prewarm_enabled:
            self.pre_warmer.start()
        self.logger.info(
            "Storefront service started",
            cache_max_entries=self.config.cache_max_entries,
            prewarm_enabled=self.config.prewarm_enabled,
        )

    async def on_shutdown(self) -> None:
        self.pre_warmer.stop()
        await self.sweeper.stop()
        await self.catalog_client.close()
        await self.orders_client.close()

    def _setup_cache_headers(self):
        """Let browsers and CDNs briefly reuse product responses."""

        @self.app.middleware("http")
        async def product_cache_headers(request: Request, call_next):
            response = await call_next(request)
            if request.url.path.startswith(PRODUCTS_PREFIX):
                response.headers.setdefault("Cache-Control", "public, max-age=60")
                response.headers["X-Content-Type-Options"] = "nosniff"
            return response

    def _setup_catalog_routes(self):
        """Set up product catalog routes."""

        @self.app.get("/")
        async def root():
            return {
                "service": self.service_name,
                "message": "Storefront Access Layer - backend API is running",
                "version": "1.0.0",
            }

        @self.app.get("/api/shopify/test-connection")
        async def test_connection():
            """Verify the platform credentials by reading the shop name."""
            shop = await self.catalog.test_connection()
            return {"success": True, "shop": shop, "message": "Upstream connection successful"}

        @self.app.get(f"{PRODUCTS_PREFIX}/quick")
        async def get_quick_products(response: Response):
            """Best-selling products in the lightweight listing shape (cached)."""
            products, hit = await self.catalog.get_quick_products()
            response.headers["X-Cache"] = "HIT" if hit else "MISS"
            return products

        @self.app.get(f"{PRODUCTS_PREFIX}/search")
        async def search_products(
            q: str = Query("", description="Search terms"),
            limit: int = Query(10, ge=1, le=250),
        ):
            return await self.catalog.search_products(q, limit)

        @self.app.post(f"{PRODUCTS_PREFIX}/batch")
        async def batch_products(body: BatchProductsRequest):
            return await self.catalog.batch_products(body.identifiers, body.by)

        @self.app.post(f"{PRODUCTS_PREFIX}/cache/clear")
        async def clear_product_cache():
            self.cache_manager.clear()
            return {"success": True, "message": "Cache cleared"}

        @self.app.get(PRODUCTS_PREFIX)
        async def list_products(
            limit: int = Query(20, ge=1, le=250),
            sort_key: str = Query("UPDATED_AT", alias="sortKey"),
            reverse: bool = Query(True),
            category: Optional[str] = Query(None),
        ):
            return await self.catalog.list_products(
                limit=limit, sort_key=sort_key, reverse=reverse, category=category
            )

        @self.app.get(f"{PRODUCTS_PREFIX}/id/{{product_id}}")
        async def get_product_by_id(product_id: str, response: Response):
            product, hit = await self.catalog.get_product_by_id(product_id)
            response.headers["X-Cache"] = "HIT" if hit else "MISS"
            return product

        @self.app.get(f"{PRODUCTS_PREFIX}/handle/{{handle}}")
        async def get_product_by_handle(handle: str, response: Response):
            product, hit = await self.catalog.get_product_by_handle(handle)
            response.headers["X-Cache"] = "HIT" if hit else "MISS"
            return product

        @self.app.get(f"{PRODUCTS_PREFIX}/{{identifier}}")
        async def get_product(identifier: str, response: Response):
            """Numeric identifiers resolve by id, anything else by handle."""
            product, hit = await self.catalog.get_product(identifier)
            response.headers["X-Cache"] = "HIT" if hit else "MISS"
            return product

    def _setup_revenue_routes(self):
        """Set up admin revenue routes."""

        @self.app.get("/api/admin/revenue/total")
        async def total_revenue():
            return await self.revenue.total_revenue()

        @self.app.get("/api/admin/revenue")
        async def filtered_revenue(
            start_date: Optional[date] = Query(None, alias="startDate"),
            end_date: Optional[date] = Query(None, alias="endDate"),
            customer_id: Optional[str] = Query(None, alias="customerId"),
            product_id: Optional[str] = Query(None, alias="productId"),
        ):
            set_customer_context(customer_id)
            return await self.revenue.filtered_revenue(
                start_date=start_date,
                end_date=end_date,
                customer_id=customer_id,
                product_id=product_id,
            )

    def _setup_customer_routes(self):
        """Set up admin customer routes."""

        @self.app.get(f"{CUSTOMERS_PREFIX}/count")
        async def customer_count():
            return await self.customers.customer_count()

        @self.app.get(f"{CUSTOMERS_PREFIX}/{{customer_id}}/orders")
        async def customer_orders(customer_id: str):
            set_customer_context(customer_id)
            return await self.customers.customer_orders(customer_id)

        @self.app.get(f"{CUSTOMERS_PREFIX}/{{customer_id}}/insights")
        async def customer_insights(customer_id: str):
            """Most purchased product by summed line item quantity."""
            set_customer_context(customer_id)
            return await self.customers.customer_insights(customer_id)

    def _setup_cache_routes(self):
        """Set up operator cache routes."""

        @self.app.get("/api/v1/cache/stats")
        async def get_cache_stats():
            stats = self.cache_manager.get_cache_stats()
            stats["prewarm"] = {
                "running": self.pre_warmer.running,
                "schedule": self.pre_warmer.schedule,
                "last_summary": self.pre_warmer.last_summary,
            }
            stats["sweeper"] = {
                "running": self.sweeper.running,
                "interval_seconds": self.sweeper.interval_seconds,
            }
            return stats

        @self.app.post("/api/v1/cache/invalidate")
        async def invalidate_cache(body: InvalidateCacheRequest):
            removed = self.cache_manager.invalidate(body.pattern)
            return {"pattern": body.pattern, "removed": removed}

        @self.app.post("/api/v1/cache/warm")
        async def warm_cache():
            """Run one pre-warm pass now."""
            summary = await self.pre_warmer.warm_once()
            return {
                "message": "Cache warmed" if summary["error"] is None else "Cache warm failed",
                "summary": summary,
            }

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report upstream reachability from the circuit breakers' point of view."""
        return {
            name: "error" if state["state"] == CircuitBreakerState.OPEN.value else "ok"
            for name, state in self.circuit_breakers.get_all_states().items()
        }

    def _health_details(self) -> Dict[str, Any]:
        return {
            "cache": {
                "size": len(self.cache_store),
                "type": "memory",
                "max_entries": self.cache_store.max_entries,
            }
        }


def create_app():
    """Create FastAPI application."""
    service = StorefrontService()
    return service.app


if __name__ == "__main__":
    service = StorefrontService()
    service.run()
