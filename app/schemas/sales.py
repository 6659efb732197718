from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal
from datetime import date, datetime


class SaleItem(BaseModel):
    order_item_id: int
    variant_id: int
    product_name: str
    variant_name: str
    variant_type: str
    qty_kg: Decimal
    qty_units: int
    unit_price: Decimal
    revenue_line: Decimal
    cost_line: Decimal
    profit_line: Decimal


class SaleOrder(BaseModel):
    order_id: int
    created_at: datetime
    channel: Optional[str] = None
    customer: Optional[str] = None
    currency: str
    items: List[SaleItem]
    revenue: Decimal
    cost: Decimal
    profit: Decimal


class SalesSummary(BaseModel):
    currency: str
    revenue: Decimal
    cost: Decimal
    profit: Decimal
    count: int


class DailySalesResponse(BaseModel):
    day: date
    summary: SalesSummary
    orders: List[SaleOrder]
