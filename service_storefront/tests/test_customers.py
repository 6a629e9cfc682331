"""
Unit tests for customer aggregations.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from shared.errors import NotFoundError
from service_storefront.app.customers import CustomerInsightsService
from service_storefront.app.customers.service import most_purchased_product, simplify_order


class TestCustomerInsightsService:
    """Test cases for CustomerInsightsService."""

    @pytest.fixture
    def admin_client(self):
        return MagicMock(
            count_customers=AsyncMock(return_value=12),
            get_customer=AsyncMock(return_value={"id": 77, "first_name": "Asha", "last_name": "Rao"}),
            list_orders=AsyncMock(return_value=[]),
        )

    @pytest.mark.asyncio
    async def test_customer_count(self, admin_client):
        service = CustomerInsightsService(admin_client)

        assert await service.customer_count() == {"success": True, "count": 12}

    @pytest.mark.asyncio
    async def test_no_orders_means_no_most_purchased_product(self, admin_client):
        service = CustomerInsightsService(admin_client)

        result = await service.customer_insights("77")

        assert result["customer"] == {"id": 77, "name": "Asha Rao"}
        assert result["insights"] == {"mostPurchasedProduct": None}
        admin_client.list_orders.assert_awaited_once_with(customer_id="77")

    @pytest.mark.asyncio
    async def test_unknown_customer_raises_not_found(self, admin_client):
        admin_client.get_customer.return_value = None
        service = CustomerInsightsService(admin_client)

        with pytest.raises(NotFoundError):
            await service.customer_insights("404")
        admin_client.list_orders.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_customer_orders_are_simplified(self, admin_client):
        admin_client.list_orders.return_value = [
            {"id": 5, "name": "#1005", "total_price": "9.00", "note": "internal", "line_items": []},
        ]
        service = CustomerInsightsService(admin_client)

        result = await service.customer_orders("77")

        assert result["customer_id"] == "77"
        assert "note" not in result["orders"][0]
        assert result["orders"][0]["total_price"] == "9.00"


class TestMostPurchasedProduct:
    """Test cases for the purchase aggregation helpers."""

    def test_quantities_are_summed_across_orders(self):
        orders = [
            {"line_items": [{"title": "Peanut Bar", "quantity": 2}, {"title": "Mango Jerky", "quantity": 1}]},
            {"line_items": [{"title": "Mango Jerky", "quantity": 4}]},
        ]

        assert most_purchased_product(orders) == {"title": "Mango Jerky", "quantity": 5}

    def test_first_seen_wins_ties(self):
        orders = [{"line_items": [{"title": "Peanut Bar", "quantity": 2}, {"title": "Choco Blast", "quantity": 2}]}]

        assert most_purchased_product(orders)["title"] == "Peanut Bar"

    def test_orders_without_line_items(self):
        assert most_purchased_product([{"id": 1}]) is None

    def test_simplify_order_keeps_line_item_fields(self):
        order = {"id": 1, "line_items": [{"title": "Bar", "quantity": 1, "price": "2.50", "sku": "B-1"}]}

        assert simplify_order(order)["line_items"] == [
            {"title": "Bar", "quantity": 1, "price": "2.50", "total_discount": None}
        ]
