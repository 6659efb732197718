# app/routers/credits.py
import logging
import re
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.credits import (
    AllocationRead, CreditCreate, CreditGroupRead, CreditList, CreditRead,
    CreditTotals, PaymentCreate, PaymentResult
)
from app.crud import credits as crud_credits
from app.crud import customers as crud_customers
from app.utils.credits import (
    credit_balance, credit_paid_amount, filter_groups, group_credits,
    is_outstanding, is_paid_like, money, to_cents
)
from app.utils.pdf_generator import generate_credit_statement_pdf

logger = logging.getLogger(__name__)

router = APIRouter()


# -----------------------------
# Helpers
# -----------------------------
def _credit_read(c) -> CreditRead:
    return CreditRead(
        id=c.id,
        customer_id=c.customer_id,
        customer_name=c.customer_name,
        customer_phone=c.customer_phone,
        amount=c.amount,
        amount_paid=credit_paid_amount(c),
        balance=credit_balance(c),
        note=c.note,
        status=c.status,
        is_paid_like=is_paid_like(c),
        created_at=c.created_at,
        paid_at=c.paid_at,
    )


def _group_read(g) -> CreditGroupRead:
    # Groups keep rows oldest first for allocation; screens show newest first
    return CreditGroupRead(
        key=g.key,
        customer_id=g.customer_id,
        customer_name=g.customer_name,
        customer_phone=g.customer_phone,
        total_amount=g.total_amount,
        total_paid=g.total_paid,
        total_balance=g.total_balance,
        last_activity_at=g.last_activity_at,
        rows=[_credit_read(c) for c in reversed(g.rows)],
    )


# -----------------------------
# 1. Outstanding / paid tabs
# -----------------------------
@router.get("/", response_model=CreditList)
def read_credits(tab: str = "outstanding", q: str = "", db: Session = Depends(get_db)):
    if tab not in ("outstanding", "paid"):
        raise HTTPException(status_code=400, detail="tab must be 'outstanding' or 'paid'")

    rows = crud_credits.get_credits(db)
    keep = is_outstanding if tab == "outstanding" else is_paid_like
    groups = filter_groups(group_credits([c for c in rows if keep(c)]), q)

    if tab == "outstanding":
        total = sum((g.total_balance for g in groups), Decimal(0))
    else:
        total = sum((g.total_paid for g in groups), Decimal(0))

    return CreditList(
        tab=tab,
        totals=CreditTotals(count=len(groups), total=total),
        groups=[_group_read(g) for g in groups],
    )


# -----------------------------
# 2. New credit
# -----------------------------
@router.post("/", response_model=CreditRead)
def create_credit(payload: CreditCreate, db: Session = Depends(get_db)):
    amount = to_cents(payload.amount)
    if amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be greater than 0")

    customer = None
    typed_name = (payload.customer_name or "").strip()
    if payload.customer_id is not None:
        customer = crud_customers.get_customer(db, payload.customer_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
    elif len(typed_name) < 3:
        raise HTTPException(status_code=400, detail="Pick a customer or type a name (3+ characters)")

    credit = crud_credits.create_credit(
        db, amount, customer=customer, customer_name=typed_name, note=payload.note,
    )
    return _credit_read(credit)


# -----------------------------
# 3. Group payment
# -----------------------------
@router.post("/payments", response_model=PaymentResult)
def pay_credit_group(payload: PaymentCreate, db: Session = Depends(get_db)):
    """Applies a payment to a customer's open credits, oldest first."""
    amount = to_cents(payload.amount)
    if amount <= 0:
        raise HTTPException(status_code=400, detail="Amount must be greater than 0")

    group = crud_credits.find_group(crud_credits.outstanding_groups(db), payload.group_key)
    if group is None:
        raise HTTPException(status_code=404, detail="No outstanding credits for this customer")

    applied, allocations = crud_credits.apply_payment(db, group, amount, payload.note)

    return PaymentResult(
        group_key=group.key,
        applied=applied,
        allocations=[
            AllocationRead(
                credit_id=a.credit.id,
                amount=a.amount,
                amount_paid=a.next_paid,
                balance=a.next_balance,
                status=a.credit.status,
            )
            for a in allocations
        ],
        message=f"Payment of ${money(applied)} applied to {len(allocations)} credit(s)",
    )


# -----------------------------
# 4. PDF statement
# -----------------------------
@router.get("/statement.pdf")
def credit_statement(group_key: str, db: Session = Depends(get_db)):
    group = crud_credits.find_group(group_credits(crud_credits.get_credits(db)), group_key)
    if group is None:
        raise HTTPException(status_code=404, detail="Credit group not found")

    pdf_bytes = generate_credit_statement_pdf(group)
    filename = "statement_" + re.sub(r"[^A-Za-z0-9_-]", "_", group.key) + ".pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
