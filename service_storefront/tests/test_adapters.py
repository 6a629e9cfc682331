"""
Unit tests for the upstream GraphQL and orders clients.
"""

import json
import httpx
import pytest

from shared.circuit_breaker import CircuitBreaker, CircuitBreakerState
from shared.errors import ExternalServiceError
from shared.retry import RetryConfig
from service_storefront.app.adapters import AdminOrdersClient, CatalogGraphQLClient


def graphql_client(handler, **kwargs) -> CatalogGraphQLClient:
    return CatalogGraphQLClient(
        "snacks.myshopify.com",
        "shpat_test",
        transport=httpx.MockTransport(handler),
        **kwargs
    )


def orders_client(handler, **kwargs) -> AdminOrdersClient:
    return AdminOrdersClient(
        "snacks.myshopify.com",
        "shpat_test",
        transport=httpx.MockTransport(handler),
        retry_config=RetryConfig(max_attempts=3, base_delay=0.001, jitter=False),
        **kwargs
    )


class TestCatalogGraphQLClient:
    """Test cases for CatalogGraphQLClient."""

    @pytest.mark.asyncio
    async def test_request_returns_data(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["token"] = request.headers["X-Shopify-Access-Token"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"shop": {"name": "Snacks"}}})

        client = graphql_client(handler)
        data = await client.request("query { shop { name } }", {"first": 1})
        await client.close()

        assert data == {"shop": {"name": "Snacks"}}
        assert seen["url"] == "https://snacks.myshopify.com/admin/api/2024-10/graphql.json"
        assert seen["token"] == "shpat_test"
        assert seen["body"] == {"query": "query { shop { name } }", "variables": {"first": 1}}

    @pytest.mark.asyncio
    async def test_graphql_errors_raise(self):
        def handler(request):
            return httpx.Response(200, json={"errors": [{"message": "Field 'x' doesn't exist"}]})

        client = graphql_client(handler)
        with pytest.raises(ExternalServiceError) as exc_info:
            await client.request("query { x }")

        assert "Field 'x' doesn't exist" in exc_info.value.message
        assert exc_info.value.service == "catalog_graphql"
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        client = graphql_client(lambda request: httpx.Response(401, text="Unauthorized"))

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.request("query { shop { name } }")

        assert exc_info.value.details == {"status_code": 401}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, json={"extensions": {}}),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, text="<html>"),
    ])
    async def test_malformed_responses_raise(self, response):
        client = graphql_client(lambda request: response)

        with pytest.raises(ExternalServiceError):
            await client.request("query { shop { name } }")

    @pytest.mark.asyncio
    async def test_transport_failure_is_mapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = graphql_client(handler)
        with pytest.raises(ExternalServiceError) as exc_info:
            await client.request("query { shop { name } }")

        assert "connection refused" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_open_breaker_fails_fast(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=60.0, name="catalog_graphql")
        client = graphql_client(handler, circuit_breaker=breaker)

        for _ in range(3):
            with pytest.raises(ExternalServiceError):
                await client.request("query { shop { name } }")

        assert breaker.state == CircuitBreakerState.OPEN
        assert len(calls) == 2


class TestAdminOrdersClient:
    """Test cases for AdminOrdersClient."""

    @pytest.mark.asyncio
    async def test_list_orders_sends_filters(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"orders": [{"id": 1, "total_price": "10.00"}]})

        client = orders_client(handler)
        orders = await client.list_orders(
            created_at_min="2024-01-01T00:00:00-00:00",
            customer_id="77",
        )
        await client.close()

        assert orders == [{"id": 1, "total_price": "10.00"}]
        assert seen["path"] == "/admin/api/2024-01/orders.json"
        assert seen["params"] == {
            "status": "any",
            "limit": "250",
            "created_at_min": "2024-01-01T00:00:00-00:00",
            "customer_id": "77",
        }

    @pytest.mark.asyncio
    async def test_missing_orders_key_is_empty(self):
        client = orders_client(lambda request: httpx.Response(200, json={}))

        assert await client.list_orders() == []

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, json={"orders": [{"id": 1}]})

        client = orders_client(handler)

        assert await client.list_orders() == [{"id": 1}]
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = orders_client(handler)

        with pytest.raises(ExternalServiceError) as exc_info:
            await client.list_orders()

        assert exc_info.value.service == "admin_orders"

    @pytest.mark.asyncio
    async def test_error_status_not_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            return httpx.Response(403, text="Forbidden")

        client = orders_client(handler)

        with pytest.raises(ExternalServiceError):
            await client.list_orders()

        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_count_customers(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            return httpx.Response(200, json={"count": 42})

        client = orders_client(handler)

        assert await client.count_customers() == 42
        assert seen["path"] == "/admin/api/2024-01/customers/count.json"

    @pytest.mark.asyncio
    async def test_unknown_customer_is_none_and_does_not_trip_breaker(self):
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60.0, name="admin_orders")
        client = orders_client(lambda request: httpx.Response(404, json={"errors": "Not Found"}), circuit_breaker=breaker)

        assert await client.get_customer("404") is None
        assert breaker.state == CircuitBreakerState.CLOSED

    @pytest.mark.asyncio
    async def test_missing_orders_path_is_still_an_error(self):
        client = orders_client(lambda request: httpx.Response(404, text="Not Found"))

        with pytest.raises(ExternalServiceError):
            await client.list_orders()
