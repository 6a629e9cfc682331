"""
REST client for the platform's admin orders and customers endpoints.
"""

from typing import Any, Dict, List, Optional
import httpx

from shared.logging import get_logger
from shared.errors import ExternalServiceError
from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException
from shared.retry import retry_on_exception, RetryConfig, RetryError


SERVICE_NAME = "admin_orders"


class AdminOrdersClient:
    """Client for read-only admin REST calls: orders, customer counts and customer records."""

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str = "2024-01",
        *,
        timeout: float = 10.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
        retry_config: Optional[RetryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = f"https://{shop_domain}/admin/api/{api_version}"
        self.logger = get_logger("storefront.orders_client")
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=3,
            recovery_timeout=30.0,
            name=SERVICE_NAME
        )
        self._fetch = retry_on_exception(
            (httpx.TransportError,),
            config=retry_config or RetryConfig(max_attempts=3, base_delay=0.5)
        )(self._get_json)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
            },
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def list_orders(
        self,
        *,
        created_at_min: Optional[str] = None,
        created_at_max: Optional[str] = None,
        customer_id: Optional[str] = None,
        limit: int = 250,
    ) -> List[Dict[str, Any]]:
        """List orders of any status, optionally bounded by creation time and customer."""
        params: Dict[str, Any] = {"status": "any", "limit": limit}
        if created_at_min:
            params["created_at_min"] = created_at_min
        if created_at_max:
            params["created_at_max"] = created_at_max
        if customer_id:
            params["customer_id"] = customer_id

        payload = await self._call("orders.json", params)
        return payload.get("orders") or []

    async def count_customers(self) -> int:
        payload = await self._call("customers/count.json")
        return int(payload.get("count") or 0)

    async def get_customer(self, customer_id: str) -> Optional[Dict[str, Any]]:
        """Return the customer record, or None when the platform does not know the id."""
        payload = await self._call(f"customers/{customer_id}.json", allow_missing=True)
        if payload is None:
            return None
        return payload.get("customer")

    async def _call(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        allow_missing: bool = False,
    ) -> Optional[Dict[str, Any]]:
        try:
            return await self.circuit_breaker.call(self._fetch, path, params or {}, allow_missing)
        except ExternalServiceError:
            raise
        except CircuitBreakerOpenException as exc:
            raise ExternalServiceError(service=SERVICE_NAME, message=str(exc)) from exc
        except (RetryError, httpx.HTTPError) as exc:
            self.logger.error("Admin request failed", path=path, error=str(exc), params=params)
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message=str(exc),
                details={"path": path, "params": params or {}}
            ) from exc

    async def _get_json(
        self,
        path: str,
        params: Dict[str, Any],
        allow_missing: bool,
    ) -> Optional[Dict[str, Any]]:
        url = f"{self.base_url}/{path}"
        response = await self._client.get(url, params=params)

        if response.status_code == 404 and allow_missing:
            return None

        if response.status_code != 200:
            self.logger.error(
                "Admin request returned error status",
                url=url,
                status_code=response.status_code,
                response=response.text[:500]
            )
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message=f"Unexpected status {response.status_code}",
                details={"status_code": response.status_code}
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ExternalServiceError(service=SERVICE_NAME, message="Malformed JSON response") from exc

        if not isinstance(payload, dict):
            raise ExternalServiceError(service=SERVICE_NAME, message="Malformed JSON response")
        return payload
