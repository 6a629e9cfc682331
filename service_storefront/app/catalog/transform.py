"""
Reshaping of upstream catalog nodes into the payloads the storefront reads.
"""

from typing import Any, Dict, List, Optional

PRODUCT_GID_PREFIX = "gid://shopify/Product/"


def extract_numeric_id(gid: str) -> str:
    """`gid://shopify/Product/123` -> `123`."""
    return gid.rsplit("/", 1)[-1]


def to_product_gid(identifier: str) -> str:
    if identifier.startswith("gid://"):
        return identifier
    return f"{PRODUCT_GID_PREFIX}{identifier}"


def to_quick_product(node: Dict[str, Any]) -> Dict[str, Any]:
    """Lightweight listing shape: id, title, handle, price, image, available."""
    featured_image = node.get("featuredImage") or {}
    return {
        "id": extract_numeric_id(node["id"]),
        "title": node["title"],
        "handle": node["handle"],
        "price": float(node["priceRange"]["minVariantPrice"]["amount"]),
        "image": featured_image.get("url") or None,
        "available": node["availableForSale"],
    }


def to_product_summary(node: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": node["id"],
        "title": node["title"],
        "handle": node["handle"],
        "price": node["priceRange"]["minVariantPrice"],
        "image": first_image(node),
        "availableForSale": node["availableForSale"],
    }


def first_image(node: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    edges = (node.get("images") or {}).get("edges") or []
    return edges[0]["node"] if edges else None


def edge_nodes(connection: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [edge["node"] for edge in connection.get("edges", [])]
