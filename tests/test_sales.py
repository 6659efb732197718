"""
Tests for daily sales aggregation (revenue, cost, profit).
"""

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

from fastapi.testclient import TestClient

from app.database import utcnow
from app.utils.sales import build_sales, filter_sales, summarize


def variant(name, vtype="unit", product="Soda", brand=None):
    return SimpleNamespace(name=name, variant_type=vtype, product=SimpleNamespace(name=product, brand=brand))


def item(id, variant_id, line_total, v, qty_g=None, qty_units=None):
    return SimpleNamespace(
        id=id, variant_id=variant_id, variant=v, line_total=Decimal(line_total),
        unit_price=Decimal("1"), qty_g=qty_g, qty_units=qty_units,
    )


def order(id, total, items, phone="0611"):
    return SimpleNamespace(
        id=id, total=Decimal(total), items=items, customer_phone=phone,
        channel="pos", currency="USD", created_at=datetime(2024, 5, 1, 10, 0),
    )


def movement(order_id, variant_id, cost):
    return SimpleNamespace(order_id=order_id, variant_id=variant_id, cost_total=None if cost is None else Decimal(cost))


# =============================================================================
# AGGREGATION
# =============================================================================

class TestBuildSales:

    def test_line_without_cost_has_profit_equal_to_revenue(self):
        sales = build_sales([order(1, "3", [item(10, 5, "3", variant("Can"), qty_units=3)])], [])
        line = sales[0]["items"][0]
        assert line["cost_line"] == Decimal(0)
        assert line["profit_line"] == line["revenue_line"] == Decimal(3)
        assert sales[0]["profit"] == Decimal(3)

    def test_costs_summed_per_order_and_variant(self):
        o = order(1, "10", [
            item(10, 5, "4", variant("Can"), qty_units=4),
            item(11, 6, "6", variant("Loose", "weight", "Rice", "Pearl"), qty_g=-2500),
        ])
        moves = [movement(1, 5, "1.00"), movement(1, 5, "0.60"), movement(1, 6, "3.00"), movement(2, 5, "9")]
        (sale,) = build_sales([o], moves)

        assert sale["cost"] == Decimal("4.60")
        assert sale["profit"] == Decimal("5.40")

        rice = next(i for i in sale["items"] if i["variant_id"] == 6)
        assert rice["product_name"] == "Rice (Pearl)"
        assert rice["qty_kg"] == Decimal("2.5")
        assert rice["cost_line"] == Decimal("3.00")

        can = next(i for i in sale["items"] if i["variant_id"] == 5)
        assert can["qty_units"] == 4
        assert can["cost_line"] == Decimal("1.60")

    def test_items_sorted_by_profit(self):
        o = order(1, "10", [
            item(10, 5, "2", variant("A"), qty_units=1),
            item(11, 6, "8", variant("B"), qty_units=1),
        ])
        (sale,) = build_sales([o], [])
        assert [i["variant_id"] for i in sale["items"]] == [6, 5]

    def test_missing_cost_rows_are_zero(self):
        (sale,) = build_sales([order(1, "5", [item(10, 5, "5", variant("A"), qty_units=1)])], [movement(1, 5, None)])
        assert sale["cost"] == Decimal(0)

    def test_unknown_variant_labels(self):
        (sale,) = build_sales([order(1, "5", [item(10, 5, "5", None, qty_units=1)])], [])
        line = sale["items"][0]
        assert line["product_name"] == "(Unknown product)"
        assert line["variant_name"] == "(Unknown variant)"

    def test_filter_and_summary(self):
        sales = build_sales([
            order(1, "5", [item(10, 5, "5", variant("Can"), qty_units=1)], phone="0611"),
            order(2, "7", [item(11, 6, "7", variant("Loose", "weight", "Rice"), qty_g=1000)], phone="0622"),
        ], [movement(2, 6, "2")])

        assert [s["order_id"] for s in filter_sales(sales, "rice")] == [2]
        assert [s["order_id"] for s in filter_sales(sales, "0611")] == [1]

        summary = summarize(sales)
        assert summary == {
            "currency": "USD",
            "revenue": Decimal(12),
            "cost": Decimal(2),
            "profit": Decimal(10),
            "count": 2,
        }

    def test_empty_summary_uses_default_currency(self):
        assert summarize([], "KES")["currency"] == "KES"


# =============================================================================
# DAILY SALES ROUTE
# =============================================================================

class TestDailySalesRoute:

    def test_confirmed_pos_order_reports_cost(self, client: TestClient, stocked):
        response = client.post("/api/orders/pos", json={
            "payment_method": "cash",
            "items": [{"variant_id": stocked.soda.id, "qty_units": 2, "unit_price": "1.00"}],
        })
        assert response.status_code == 200

        today = utcnow().date().isoformat()
        data = client.get(f"/api/sales/daily?day={today}").json()

        assert data["summary"]["count"] == 1
        assert Decimal(data["summary"]["revenue"]) == Decimal("2.00")
        assert Decimal(data["summary"]["cost"]) == Decimal("0.80")
        assert Decimal(data["summary"]["profit"]) == Decimal("1.20")
        assert data["orders"][0]["items"][0]["product_name"] == "Soda"

    def test_pending_orders_are_not_sales(self, client: TestClient, stocked):
        client.post("/api/orders/online", json={
            "customer_phone": "0611223344",
            "items": [{"variant_id": stocked.soda.id, "qty_units": 1, "unit_price": "1.00"}],
        })
        today = utcnow().date().isoformat()
        data = client.get(f"/api/sales/daily?day={today}").json()
        assert data["summary"]["count"] == 0
        assert data["summary"]["currency"] == "USD"

    def test_other_day_is_empty(self, client: TestClient, stocked):
        client.post("/api/orders/pos", json={
            "items": [{"variant_id": stocked.soda.id, "qty_units": 1, "unit_price": "1.00"}],
        })
        data = client.get("/api/sales/daily?day=2001-01-01").json()
        assert data["orders"] == []
