"""
GraphQL client for the commerce platform catalog.
"""

from typing import Any, Dict, Optional
import httpx

from shared.logging import get_logger
from shared.errors import ExternalServiceError
from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException


SERVICE_NAME = "catalog_graphql"


class CatalogGraphQLClient:
    """Posts GraphQL documents to the platform and returns the `data` object."""

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str = "2024-10",
        *,
        timeout: float = 10.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = f"https://{shop_domain}/admin/api/{api_version}/graphql.json"
        self.logger = get_logger("storefront.graphql_client")
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=3,
            recovery_timeout=30.0,
            name=SERVICE_NAME
        )
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

    async def request(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute a query and return its `data`.

        Raises ExternalServiceError on transport failures, non-2xx statuses,
        GraphQL errors, or a response without `data`.
        """
        try:
            return await self.circuit_breaker.call(self._post, query, variables or {})
        except ExternalServiceError:
            raise
        except CircuitBreakerOpenException as exc:
            raise ExternalServiceError(service=SERVICE_NAME, message=str(exc)) from exc
        except httpx.HTTPError as exc:
            self.logger.error("Catalog request failed", error=str(exc), endpoint=self.endpoint)
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message=str(exc) or exc.__class__.__name__,
                details={"endpoint": self.endpoint}
            ) from exc

    async def _post(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._client.post(self.endpoint, json={"query": query, "variables": variables})

        if response.status_code >= 300:
            self.logger.error(
                "Catalog request returned error status",
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

        errors = payload.get("errors")
        if errors:
            messages = [error.get("message", str(error)) if isinstance(error, dict) else str(error) for error in errors]
            self.logger.error("Catalog query returned errors", errors=messages)
            raise ExternalServiceError(
                service=SERVICE_NAME,
                message="; ".join(messages),
                details={"errors": errors}
            )

        data = payload.get("data")
        if not isinstance(data, dict):
            raise ExternalServiceError(service=SERVICE_NAME, message="Response missing data")
        return data
