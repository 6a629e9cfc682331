"""
Catalog package: product queries, reshaping, and cached read operations.
"""

from .service import ProductCatalogService

__all__ = ["ProductCatalogService"]
