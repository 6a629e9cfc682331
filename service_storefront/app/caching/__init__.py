"""
Storefront caching package.

In-process response cache shared by request handlers, the expiry sweeper
and the product pre-warmer. One store instance is built at startup and
passed to every collaborator.
"""

from .cache_store import CacheEntry, CacheStore
from .cache_manager import CacheManager
from .pre_warmer import ProductPreWarmer
from .sweeper import ExpirySweeper

__all__ = [
    "CacheEntry",
    "CacheStore",
    "CacheManager",
    "ExpirySweeper",
    "ProductPreWarmer",
]
