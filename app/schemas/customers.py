from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime


class CustomerBase(BaseModel):
    name: Optional[str] = None
    phone: str

    @field_validator("phone")
    @classmethod
    def phone_required(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("Phone number is required")
        return v

    @field_validator("name")
    @classmethod
    def blank_name_is_none(cls, v):
        if v is None:
            return v
        return v.strip() or None


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(CustomerBase):
    pass


class CustomerRead(CustomerBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --- Legacy POS purchase history (grouped by receipt) ---
class PurchaseItem(BaseModel):
    movement_id: int
    variant_id: int
    label: str
    qty_g: Optional[int] = None
    qty_units: Optional[int] = None
    created_at: datetime


class PurchaseGroup(BaseModel):
    receipt: str
    created_at: datetime
    customer_note: str
    items: List[PurchaseItem]
