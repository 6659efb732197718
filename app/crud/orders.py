import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.crud.catalog import variant_label
from app.models import Order, OrderItem, OrderStatus, ProductVariant
from app.utils.credits import to_decimal
from app.utils.stock import is_weight, kg_to_g, to_int

logger = logging.getLogger(__name__)

ORDER_STATUSES = tuple(s.value for s in OrderStatus)


def normalize_status(value: Optional[str]) -> str:
    s = (value or "").strip().lower()
    return s if s in ORDER_STATUSES else OrderStatus.PENDING.value


def price_cart(db: Session, items) -> List[dict]:
    """
    Resolves cart items against their variants. Weight variants are priced
    per kilogram, unit variants per unit. Unknown variant ids raise KeyError,
    lines without a positive quantity raise ValueError.
    """
    lines = []
    for item in items:
        variant = db.query(ProductVariant).filter(ProductVariant.id == item.variant_id).first()
        if variant is None:
            raise KeyError(item.variant_id)

        price = to_decimal(item.unit_price)
        if is_weight(variant.variant_type):
            qty_kg = to_decimal(item.qty_kg)
            qty_g, qty_units = kg_to_g(qty_kg), None
            if qty_g <= 0:
                raise ValueError(f"{variant_label(variant)}: quantity must be greater than 0 kg")
            line_total = price * qty_kg
            qty_label = f"{qty_kg:.3f}kg"
        else:
            units = to_int(item.qty_units)
            qty_g, qty_units = None, units
            if units <= 0:
                raise ValueError(f"{variant_label(variant)}: quantity must be at least 1 unit")
            line_total = price * units
            qty_label = f"{units}u"

        lines.append({
            "variant": variant,
            "qty_g": qty_g,
            "qty_units": qty_units,
            "unit_price": price,
            "line_total": line_total.quantize(Decimal("0.01")),
            "label": f"{variant_label(variant)} x {qty_label}",
        })
    return lines


def cart_total(lines: List[dict]) -> Decimal:
    return sum((l["line_total"] for l in lines), Decimal(0))


def create_order(db: Session, lines: List[dict], **fields) -> Order:
    """Inserts the order header and its lines in one flush; commit is left to the caller."""
    total = cart_total(lines)
    order = Order(
        subtotal=total,
        delivery_fee=Decimal(0),
        discount=Decimal(0),
        total=total,
        currency=settings.DEFAULT_CURRENCY,
        **fields,
    )
    db.add(order)
    db.flush()

    for l in lines:
        db.add(OrderItem(
            order_id=order.id,
            variant_id=l["variant"].id,
            qty_g=l["qty_g"],
            qty_units=l["qty_units"],
            unit_price=l["unit_price"],
            line_total=l["line_total"],
        ))
    db.flush()
    logger.info("Order %s created (%s, %d lines, total %s)", order.id, order.channel, len(lines), total)
    return order


def get_orders(db: Session, status: str, limit: int = None):
    return (
        db.query(Order)
        .filter(Order.status == status)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit or settings.ORDERS_FETCH_LIMIT)
        .all()
    )


def filter_orders(orders, q: str):
    s = (q or "").strip().lower()
    if not s:
        return orders
    return [
        o for o in orders
        if s in f"{o.customer_phone or ''} {o.note or ''} {o.address or ''} {o.id}".lower()
    ]
