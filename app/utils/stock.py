"""
Stock rules: unit conversions, low-stock flag, valuation and movement deltas.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from app.models.inventory import MovementType
from app.utils.credits import to_decimal

INBOUND_TYPES = (MovementType.RESTOCK.value, MovementType.RETURN.value, MovementType.ADJUSTMENT.value)


def is_weight(variant_type: Optional[str]) -> bool:
    return (variant_type or "").strip().lower() == "weight"


def kg_to_g(kg, clamp: bool = False) -> int:
    """Kilograms (3 d.p.) to whole grams."""
    grams = int((to_decimal(kg) * 1000).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return max(grams, 0) if clamp else grams


def g_to_kg(grams) -> Decimal:
    return (Decimal(int(grams or 0)) / 1000).quantize(Decimal("0.001"))


def to_int(value, clamp: bool = False) -> int:
    n = int(to_decimal(value))  # truncates toward zero
    return max(n, 0) if clamp else n


def is_low_stock(variant_type, row) -> bool:
    # A zero threshold disables the alert
    if is_weight(variant_type):
        qty, level = row.qty_g or 0, row.reorder_level_g or 0
    else:
        qty, level = row.qty_units or 0, row.reorder_level_units or 0
    return level > 0 and qty <= level


def stock_value(qty, avg_cost) -> Optional[Decimal]:
    """None means "no value data", which is not the same as zero."""
    q = to_decimal(qty)
    c = to_decimal(avg_cost)
    if q <= 0 or c <= 0:
        return None
    return q * c


def row_stock_value(variant_type, row) -> Optional[Decimal]:
    if is_weight(variant_type):
        return stock_value(row.qty_g, row.avg_cost_per_g)
    return stock_value(row.qty_units, row.avg_cost_per_unit)


def cost_per_kg(avg_cost_per_g) -> Optional[Decimal]:
    c = to_decimal(avg_cost_per_g)
    if c <= 0:
        return None
    return c * 1000


def movement_delta(movement_type: str, grams: int, units: int) -> Tuple[int, int]:
    """
    Operators always type positive quantities except for adjustments,
    which keep their sign.
    """
    if movement_type in (MovementType.RESTOCK.value, MovementType.RETURN.value):
        return abs(grams), abs(units)
    if movement_type == MovementType.MANUAL_OUT.value:
        return -abs(grams), -abs(units)
    return grams, units


def cost_to_send(movement_type: str, delta_g: int, delta_units: int, cost_total) -> Optional[Decimal]:
    """Cost is only recorded for movements that add stock."""
    if cost_total is None:
        return None
    adds_stock = delta_g > 0 or delta_units > 0
    if adds_stock and movement_type in INBOUND_TYPES:
        return to_decimal(cost_total)
    return None
