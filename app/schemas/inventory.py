from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


# Upsert of one inventory row (kg are converted to grams)
class InventoryUpsert(BaseModel):
    qty_kg: Decimal = Decimal("0")
    qty_units: Decimal = Decimal("0")
    reorder_kg: Decimal = Decimal("0")
    reorder_units: Decimal = Decimal("0")


class InventoryRead(BaseModel):
    variant_id: int
    variant_name: Optional[str] = None
    variant_type: Optional[str] = None
    product_name: Optional[str] = None

    qty_g: int = 0
    qty_kg: Decimal = Decimal("0")
    qty_units: int = 0
    reorder_level_g: int = 0
    reorder_level_units: int = 0
    avg_cost_per_g: Optional[Decimal] = None
    avg_cost_per_unit: Optional[Decimal] = None
    updated_at: Optional[datetime] = None

    # Computed
    is_low: bool = False
    stock_value: Optional[Decimal] = None  # None = no value data
    cost_per_kg: Optional[Decimal] = None


# Input for a stock movement (positive quantities except adjustments)
class MovementCreate(BaseModel):
    variant_id: int
    type: str = Field("restock", pattern="^(restock|manual_out|return|adjustment)$")
    qty_kg: Decimal = Decimal("0")
    qty_units: Decimal = Decimal("0")
    cost_total: Optional[Decimal] = None
    supplier_name: Optional[str] = None
    note: Optional[str] = None


class MovementRead(BaseModel):
    id: int
    variant_id: int
    order_id: Optional[int] = None
    type: str
    qty_g: int = 0
    qty_units: int = 0
    cost_total: Optional[Decimal] = None
    supplier_name: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime

    variant_name: Optional[str] = None
    product_name: Optional[str] = None

    class Config:
        from_attributes = True
