from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime


# --- Cart input ---
class CartItem(BaseModel):
    variant_id: int
    qty_kg: Decimal = Decimal("0")    # weight variants
    qty_units: Decimal = Decimal("0")  # unit variants
    unit_price: Decimal = Field(Decimal("0"), ge=0)  # per kg for weight variants


class OnlineOrderCreate(BaseModel):
    customer_phone: str
    customer_name: Optional[str] = None
    channel: str = "online"
    status: str = "pending"
    payment_method: str = "cod"
    address: Optional[str] = None
    note: Optional[str] = None
    items: List[CartItem]


class PosCheckout(BaseModel):
    customer_id: Optional[int] = None
    customer_phone: Optional[str] = None
    payment_method: str = Field("cash", pattern="^(cash|transfer|credit)$")
    note: Optional[str] = None
    items: List[CartItem]


class OrderUpdate(BaseModel):
    status: Optional[str] = None
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    address: Optional[str] = None
    note: Optional[str] = None


# --- Reading ---
class OrderItemRead(BaseModel):
    id: int
    order_id: int
    variant_id: int
    qty_g: Optional[int] = None
    qty_units: Optional[int] = None
    unit_price: Decimal
    line_total: Decimal
    created_at: Optional[datetime] = None
    product_name: Optional[str] = None
    variant_name: Optional[str] = None
    variant_type: Optional[str] = None


class OrderRead(BaseModel):
    id: int
    customer_id: Optional[int] = None
    customer_phone: Optional[str] = None
    channel: Optional[str] = None
    status: str
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    currency: Optional[str] = None
    subtotal: Decimal = Decimal("0")
    delivery_fee: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    amount_paid: Decimal = Decimal("0")
    address: Optional[str] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderDetail(OrderRead):
    items: List[OrderItemRead] = []


class OrderTotals(BaseModel):
    count: int
    total: Decimal
    unpaid_count: int


class OrderList(BaseModel):
    status: str
    orders: List[OrderRead]
    totals: OrderTotals


class ConfirmResult(BaseModel):
    order_id: int
    movements_count: Optional[int] = None  # None when the read-back failed
    cost_total: Optional[Decimal] = None


class PosResult(BaseModel):
    receipt_id: str
    order_id: int
    total: Decimal
    credit_id: Optional[int] = None
    message: str
