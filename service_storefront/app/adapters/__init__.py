"""
Adapters package for the Storefront Service.

HTTP client wrappers for the upstream commerce platform. Adapters
encapsulate base URLs, auth headers, circuit breakers and the mapping of
upstream failures onto shared errors.
"""

from .graphql_client import CatalogGraphQLClient
from .orders_client import AdminOrdersClient

__all__ = [
    "CatalogGraphQLClient",
    "AdminOrdersClient",
]
