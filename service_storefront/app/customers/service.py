"""
Read-only customer aggregations over the admin REST API.
"""

from typing import Any, Dict, List, Optional

from shared.errors import NotFoundError
from shared.logging import get_logger
from ..adapters.orders_client import AdminOrdersClient


ORDER_FIELDS = (
    "id",
    "order_number",
    "name",
    "total_price",
    "currency",
    "financial_status",
    "fulfillment_status",
    "created_at",
    "processed_at",
    "customer_locale",
    "billing_address",
)

LINE_ITEM_FIELDS = ("title", "quantity", "price", "total_discount")


def simplify_order(order: Dict[str, Any]) -> Dict[str, Any]:
    simplified = {field: order.get(field) for field in ORDER_FIELDS}
    simplified["line_items"] = [
        {field: item.get(field) for field in LINE_ITEM_FIELDS}
        for item in order.get("line_items") or []
    ]
    return simplified


def most_purchased_product(orders: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Product title with the largest summed quantity; the first one seen wins ties."""
    quantities: Dict[str, int] = {}
    for order in orders:
        for item in order.get("line_items") or []:
            title = item.get("title")
            quantities[title] = quantities.get(title, 0) + int(item.get("quantity") or 0)

    if not quantities:
        return None
    title = max(quantities, key=quantities.get)
    return {"title": title, "quantity": quantities[title]}


class CustomerInsightsService:
    """Customer counts, order history and purchase insights."""

    def __init__(self, admin_client: AdminOrdersClient):
        self.admin_client = admin_client
        self.logger = get_logger("storefront.customers")

    async def customer_count(self) -> Dict[str, Any]:
        count = await self.admin_client.count_customers()
        return {"success": True, "count": count}

    async def customer_orders(self, customer_id: str) -> Dict[str, Any]:
        orders = await self.admin_client.list_orders(customer_id=customer_id)
        self.logger.info("Fetched customer orders", order_count=len(orders))
        return {
            "success": True,
            "customer_id": customer_id,
            "orders": [simplify_order(order) for order in orders],
        }

    async def customer_insights(self, customer_id: str) -> Dict[str, Any]:
        customer = await self.admin_client.get_customer(customer_id)
        if not customer:
            raise NotFoundError("Customer not found", details={"id": customer_id})

        orders = await self.admin_client.list_orders(customer_id=customer_id)
        name = " ".join(part for part in (customer.get("first_name"), customer.get("last_name")) if part)
        return {
            "success": True,
            "customer": {"id": customer.get("id"), "name": name},
            "insights": {"mostPurchasedProduct": most_purchased_product(orders)},
        }
