"""
Product catalog operations backed by the GraphQL adapter and the response cache.
"""

from typing import Any, Dict, List, Optional, Tuple

from shared.errors import ExternalServiceError, NotFoundError, ValidationError
from shared.logging import get_logger
from ..adapters.graphql_client import CatalogGraphQLClient, SERVICE_NAME
from ..caching.cache_manager import (
    CacheManager,
    PRODUCT_DETAIL_TTL,
    QUICK_PRODUCTS_KEY,
    QUICK_PRODUCTS_TTL,
    product_handle_key,
    product_id_key,
)
from . import queries
from .transform import edge_nodes, to_product_gid, to_product_summary, to_quick_product

# URL-friendly category slugs mapped to product types/tags upstream
CATEGORY_ALIASES = {
    "bar-blast": "Bar Blast",
    "fruit-jerky": "Fruit Jerky",
}

SORT_KEYS = {"TITLE", "PRODUCT_TYPE", "VENDOR", "UPDATED_AT", "CREATED_AT", "BEST_SELLING", "PRICE", "ID", "RELEVANCE"}

MALFORMED_PAYLOAD_ERRORS = (KeyError, TypeError, ValueError)


def malformed_payload(what: str, exc: Exception) -> ExternalServiceError:
    return ExternalServiceError(
        service=SERVICE_NAME,
        message=f"Malformed {what}",
        details={"error": str(exc)}
    )


class ProductCatalogService:
    """Read operations over the upstream product catalog."""

    def __init__(self, client: CatalogGraphQLClient, cache_manager: CacheManager):
        self.client = client
        self.cache_manager = cache_manager
        self.logger = get_logger("storefront.catalog")

    async def fetch_quick_products(self) -> List[Dict[str, Any]]:
        """Query the best-selling page and reshape it to the quick listing shape."""
        data = await self.client.request(
            queries.QUICK_PRODUCTS_QUERY,
            {"first": queries.QUICK_PRODUCTS_PAGE_SIZE},
        )
        try:
            return [to_quick_product(node) for node in edge_nodes(data["products"])]
        except MALFORMED_PAYLOAD_ERRORS as exc:
            raise malformed_payload("product listing", exc) from exc

    async def get_quick_products(self) -> Tuple[List[Dict[str, Any]], bool]:
        products, hit = await self.cache_manager.get_or_load(
            QUICK_PRODUCTS_KEY,
            self.fetch_quick_products,
            QUICK_PRODUCTS_TTL,
            cache_type="quick_products",
        )
        if not hit:
            self.logger.info("Fetched quick products", count=len(products))
        return products, hit

    async def refresh_quick_products(self) -> List[Dict[str, Any]]:
        """Fetch the quick listing and overwrite the hot key."""
        products = await self.fetch_quick_products()
        self.cache_manager.put(QUICK_PRODUCTS_KEY, products, QUICK_PRODUCTS_TTL)
        return products

    async def get_product_by_id(self, product_id: str) -> Tuple[Dict[str, Any], bool]:
        async def load() -> Optional[Dict[str, Any]]:
            data = await self.client.request(queries.PRODUCT_BY_ID_QUERY, {"id": to_product_gid(product_id)})
            return data.get("product")

        product, hit = await self.cache_manager.get_or_load(
            product_id_key(product_id), load, PRODUCT_DETAIL_TTL, cache_type="product_detail"
        )
        if product is None:
            raise NotFoundError("Product not found", details={"id": product_id})
        return product, hit

    async def get_product_by_handle(self, handle: str) -> Tuple[Dict[str, Any], bool]:
        async def load() -> Optional[Dict[str, Any]]:
            data = await self.client.request(queries.PRODUCT_BY_HANDLE_QUERY, {"handle": handle})
            return data.get("productByHandle")

        product, hit = await self.cache_manager.get_or_load(
            product_handle_key(handle), load, PRODUCT_DETAIL_TTL, cache_type="product_detail"
        )
        if product is None:
            raise NotFoundError("Product not found", details={"handle": handle})
        return product, hit

    async def get_product(self, identifier: str) -> Tuple[Dict[str, Any], bool]:
        """Numeric identifiers are product ids, anything else is a handle."""
        if identifier.isascii() and identifier.isdigit():
            return await self.get_product_by_id(identifier)
        return await self.get_product_by_handle(identifier)

    async def list_products(
        self,
        *,
        limit: int = 20,
        sort_key: str = "UPDATED_AT",
        reverse: bool = True,
        category: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        sort_key = sort_key.upper()
        if sort_key not in SORT_KEYS:
            raise ValidationError("Unsupported sort key", details={"sort_key": sort_key})

        variables: Dict[str, Any] = {"first": limit, "sortKey": sort_key, "reverse": reverse, "query": None}
        if category:
            name = CATEGORY_ALIASES.get(category, category)
            variables["query"] = f'product_type:"{name}" OR tag:"{name}"'

        data = await self.client.request(queries.LIST_PRODUCTS_QUERY, variables)
        try:
            products = edge_nodes(data["products"])
        except MALFORMED_PAYLOAD_ERRORS as exc:
            raise malformed_payload("product listing", exc) from exc
        self.logger.info("Fetched products", count=len(products), category=category)
        return products

    async def search_products(self, term: str, limit: int = 10) -> List[Dict[str, Any]]:
        if not term:
            raise ValidationError("Search query 'q' is required")

        data = await self.client.request(queries.SEARCH_PRODUCTS_QUERY, {"query": term, "first": limit})
        try:
            products = [to_product_summary(node) for node in edge_nodes(data["products"])]
        except MALFORMED_PAYLOAD_ERRORS as exc:
            raise malformed_payload("search results", exc) from exc
        self.logger.info("Search returned products", count=len(products))
        return products

    async def batch_products(self, identifiers: List[str], by: str = "id") -> List[Dict[str, Any]]:
        """Fetch several products in one round trip, skipping unknown ones."""
        if not identifiers:
            raise ValidationError("identifiers array is required")
        if by not in ("id", "handle"):
            raise ValidationError("type must be 'id' or 'handle'", details={"type": by})

        if by == "handle":
            variables = {f"handle{i}": value for i, value in enumerate(identifiers)}
        else:
            variables = {f"id{i}": to_product_gid(value) for i, value in enumerate(identifiers)}

        data = await self.client.request(queries.build_batch_query(len(identifiers), by), variables)
        products = [data[f"product{i}"] for i in range(len(identifiers)) if data.get(f"product{i}")]
        self.logger.info("Batch fetched products", requested=len(identifiers), found=len(products))
        return products

    async def test_connection(self) -> Dict[str, Any]:
        data = await self.client.request(queries.SHOP_QUERY)
        try:
            return data["shop"]
        except MALFORMED_PAYLOAD_ERRORS as exc:
            raise malformed_payload("shop details", exc) from exc
