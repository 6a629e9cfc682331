"""
Shared fixtures for Storefront service tests.
"""

import pytest
from typing import Any, Dict, List

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_storefront.app.caching.cache_store import CacheStore


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def product_node(numeric_id: str, title: str, handle: str, amount: str = "4.99",
                 image: Any = "https://cdn.test/img.webp", available: bool = True) -> Dict[str, Any]:
    """Catalog node as returned by the quick products query."""
    return {
        "id": f"gid://shopify/Product/{numeric_id}",
        "title": title,
        "handle": handle,
        "priceRange": {"minVariantPrice": {"amount": amount}},
        "featuredImage": {"url": image} if image else None,
        "availableForSale": available,
    }


def products_payload(nodes: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"products": {"edges": [{"node": node} for node in nodes]}}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return CacheStore(clock=clock)


@pytest.fixture
def three_products():
    return [
        product_node("101", "Peanut Bar", "peanut-bar", "2.50"),
        product_node("102", "Mango Jerky", "mango-jerky", "3.75", image=None),
        product_node("103", "Choco Blast", "choco-blast", "5", available=False),
    ]
