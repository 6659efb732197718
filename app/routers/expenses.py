# app/routers/expenses.py
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db, utcnow
from app.models import Expense
from app.schemas.expenses import ExpenseCreate, ExpenseList, ExpenseRead
from app.utils.credits import to_decimal

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=ExpenseList)
def read_expenses(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
):
    """Expenses in [date_from, date_to], both days included. Defaults to month to date."""
    today = utcnow().date()
    date_from = date_from or today.replace(day=1)
    date_to = date_to or today
    if date_to < date_from:
        raise HTTPException(status_code=400, detail="date_to must not be before date_from")

    start = datetime.combine(date_from, time.min)
    end = datetime.combine(date_to + timedelta(days=1), time.min)

    rows = (
        db.query(Expense)
        .filter(Expense.incurred_at >= start, Expense.incurred_at < end)
        .order_by(Expense.incurred_at.desc(), Expense.created_at.desc())
        .limit(settings.EXPENSES_FETCH_LIMIT)
        .all()
    )

    # Every configured category shows up, even with nothing spent
    by_category = {c: Decimal(0) for c in settings.EXPENSE_CATEGORIES}
    for e in rows:
        by_category[e.category] = by_category.get(e.category, Decimal(0)) + to_decimal(e.amount)

    return ExpenseList(
        date_from=date_from,
        date_to=date_to,
        total=sum((to_decimal(e.amount) for e in rows), Decimal(0)),
        totals_by_category=by_category,
        expenses=rows,
    )


@router.post("/", response_model=ExpenseRead)
def create_expense(payload: ExpenseCreate, db: Session = Depends(get_db)):
    if payload.amount is None or payload.amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be greater than 0")
    if payload.category not in settings.EXPENSE_CATEGORIES:
        raise HTTPException(
            status_code=400,
            detail=f"Category must be one of: {', '.join(settings.EXPENSE_CATEGORIES)}"
        )

    expense = Expense(
        incurred_at=datetime.combine(payload.incurred_at, time.min),
        category=payload.category,
        amount=payload.amount,
        currency=(payload.currency or "").strip() or settings.DEFAULT_CURRENCY,
        note=(payload.note or "").strip() or None,
    )
    db.add(expense)
    db.commit()
    db.refresh(expense)
    logger.info("Expense %s: %s %s (%s)", expense.id, expense.amount, expense.currency, expense.category)
    return expense


@router.delete("/{expense_id}")
def delete_expense(expense_id: int, db: Session = Depends(get_db)):
    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    db.delete(expense)
    db.commit()
    return {"message": "Expense deleted"}
