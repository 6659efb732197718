"""
Daily sales: joins orders with the cost-bearing "sale" movements written by
confirm_order() to get revenue, cost and profit per line and per order.
"""
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Tuple

from app.models.orders import OrderStatus
from app.utils.credits import to_decimal

SALE_STATUSES = (OrderStatus.CONFIRMED.value, OrderStatus.OUT_FOR_DELIVERY.value, OrderStatus.DELIVERED.value)


def index_costs(movements) -> Tuple[Dict, Dict]:
    """Sums cost_total per order and per (order, variant)."""
    by_order = defaultdict(Decimal)
    by_order_variant = defaultdict(Decimal)

    for m in movements:
        if not m.order_id:
            continue
        cost = to_decimal(m.cost_total)
        by_order[m.order_id] += cost
        by_order_variant[(m.order_id, m.variant_id)] += cost

    return by_order, by_order_variant


def product_label(variant) -> str:
    product = variant.product if variant is not None else None
    if product is None:
        return "(Unknown product)"
    brand = f" ({product.brand})" if product.brand else ""
    return f"{product.name}{brand}".strip()


def build_sale_line(order_id, item, by_order_variant) -> dict:
    variant = item.variant
    v_type = "weight" if variant is not None and (variant.variant_type or "").lower() == "weight" else "unit"

    grams = abs(int(item.qty_g or 0))
    units = abs(int(item.qty_units or 0))

    revenue = to_decimal(item.line_total)
    cost = by_order_variant.get((order_id, item.variant_id), Decimal(0))

    return {
        "order_item_id": item.id,
        "variant_id": item.variant_id,
        "product_name": product_label(variant),
        "variant_name": variant.name if variant is not None else "(Unknown variant)",
        "variant_type": v_type,
        "qty_kg": Decimal(grams) / 1000 if v_type == "weight" else Decimal(0),
        "qty_units": units if v_type == "unit" else 0,
        "unit_price": to_decimal(item.unit_price),
        "revenue_line": revenue,
        "cost_line": cost,
        "profit_line": revenue - cost,
    }


def build_sales(orders, movements, default_currency: str = "USD") -> List[dict]:
    by_order, by_order_variant = index_costs(movements)

    sales = []
    for o in orders:
        items = [build_sale_line(o.id, it, by_order_variant) for it in (o.items or [])]
        items.sort(key=lambda x: x["profit_line"], reverse=True)

        revenue = to_decimal(o.total)
        cost = by_order.get(o.id, Decimal(0))

        sales.append({
            "order_id": o.id,
            "created_at": o.created_at,
            "channel": o.channel,
            "customer": o.customer_phone or None,
            "currency": o.currency or default_currency,
            "items": items,
            "revenue": revenue,
            "cost": cost,
            "profit": revenue - cost,
        })
    return sales


def filter_sales(sales: List[dict], q: str) -> List[dict]:
    needle = (q or "").strip().lower()
    if not needle:
        return sales

    def matches(s: dict) -> bool:
        hay = f"{s['order_id']} {s['customer'] or ''} {s['channel'] or ''}".lower()
        if needle in hay:
            return True
        return any(needle in f"{it['product_name']} {it['variant_name']}".lower() for it in s["items"])

    return [s for s in sales if matches(s)]


def summarize(sales: List[dict], default_currency: str = "USD") -> dict:
    revenue = sum((s["revenue"] for s in sales), Decimal(0))
    cost = sum((s["cost"] for s in sales), Decimal(0))
    return {
        "currency": sales[0]["currency"] if sales else default_currency,
        "revenue": revenue,
        "cost": cost,
        "profit": revenue - cost,
        "count": len(sales),
    }
