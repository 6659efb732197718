from pydantic import BaseModel
from typing import Dict, List, Optional
from decimal import Decimal
from datetime import date, datetime


class ExpenseCreate(BaseModel):
    incurred_at: date
    category: str
    amount: Decimal
    currency: Optional[str] = None
    note: Optional[str] = None


class ExpenseRead(BaseModel):
    id: int
    incurred_at: datetime
    category: str
    amount: Decimal
    currency: str
    note: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExpenseList(BaseModel):
    date_from: date
    date_to: date
    total: Decimal
    totals_by_category: Dict[str, Decimal]
    expenses: List[ExpenseRead]
