from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal
from datetime import datetime


class CreditCreate(BaseModel):
    amount: Decimal
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None  # typed name when no customer is linked
    note: Optional[str] = None


class CreditRead(BaseModel):
    id: int
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    amount: Decimal
    amount_paid: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    note: Optional[str] = None
    status: Optional[str] = None
    is_paid_like: bool = False
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None


class CreditGroupRead(BaseModel):
    key: str
    customer_id: Optional[int] = None
    customer_name: str
    customer_phone: str
    total_amount: Decimal
    total_paid: Decimal
    total_balance: Decimal
    last_activity_at: Optional[datetime] = None
    rows: List[CreditRead]  # newest first


class CreditTotals(BaseModel):
    count: int
    total: Decimal


class CreditList(BaseModel):
    tab: str
    totals: CreditTotals
    groups: List[CreditGroupRead]


class PaymentCreate(BaseModel):
    group_key: str
    amount: Decimal
    note: Optional[str] = None


class AllocationRead(BaseModel):
    credit_id: int
    amount: Decimal
    amount_paid: Decimal
    balance: Decimal
    status: str


class PaymentResult(BaseModel):
    group_key: str
    applied: Decimal
    allocations: List[AllocationRead]
    message: str
