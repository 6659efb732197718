from pydantic import BaseModel
from typing import Optional
from decimal import Decimal
from datetime import datetime


class SupplierCreate(BaseModel):
    name: str
    phone: Optional[str] = None
    notes: Optional[str] = None


class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


class SupplierRead(SupplierCreate):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Activity computed from inventory_movements.supplier_name
class SupplierActivity(BaseModel):
    supplier_name: str
    supplier_id: Optional[int] = None
    restocks_count: int = 0
    total_cost: Decimal = Decimal("0")
    last_restock_at: Optional[datetime] = None
