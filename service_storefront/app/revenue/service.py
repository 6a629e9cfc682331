"""
Revenue aggregation over admin orders.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from shared.logging import get_logger
from ..adapters.orders_client import AdminOrdersClient


class RevenueService:
    """Sums order totals. The platform stays the system of record."""

    def __init__(self, orders_client: AdminOrdersClient, currency: str = "INR"):
        self.orders_client = orders_client
        self.currency = currency
        self.logger = get_logger("storefront.revenue")

    async def total_revenue(self) -> Dict[str, Any]:
        orders = await self.orders_client.list_orders()
        return self._summarize(orders)

    async def filtered_revenue(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        customer_id: Optional[str] = None,
        product_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        orders = await self.orders_client.list_orders(
            created_at_min=f"{start_date.isoformat()}T00:00:00-00:00" if start_date else None,
            created_at_max=f"{end_date.isoformat()}T23:59:59-00:00" if end_date else None,
            customer_id=customer_id,
        )
        if product_id:
            orders = [order for order in orders if self._contains_product(order, product_id)]
        return self._summarize(orders)

    @staticmethod
    def _contains_product(order: Dict[str, Any], product_id: str) -> bool:
        return any(str(item.get("product_id")) == str(product_id) for item in order.get("line_items", []))

    def _summarize(self, orders: List[Dict[str, Any]]) -> Dict[str, Any]:
        total = sum(float(order.get("total_price") or 0) for order in orders)
        self.logger.info("Revenue computed", order_count=len(orders), total=total)
        return {
            "success": True,
            "totalRevenue": round(total, 2),
            "currency": self.currency,
            "orderCount": len(orders),
        }
