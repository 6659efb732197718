# app/routers/customers.py
import re
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.config import settings
from app.database import get_db
from app.models import InventoryMovement, ProductVariant
from app.schemas.customers import CustomerCreate, CustomerRead, CustomerUpdate, PurchaseGroup
from app.crud import customers as crud_customers
from app.crud.catalog import variant_label

router = APIRouter()

RECEIPT_RE = re.compile(r"POS-\d+")


def _customer_segment(note: Optional[str]) -> str:
    for part in (note or "").split("|"):
        part = part.strip()
        if part.startswith("Customer:"):
            return part
    return ""


def _get_customer_or_404(db: Session, customer_id: int):
    customer = crud_customers.get_customer(db, customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.get("/", response_model=List[CustomerRead])
def read_customers(q: str = "", limit: Optional[int] = None, db: Session = Depends(get_db)):
    return crud_customers.get_customers(db, q=q, limit=limit or settings.CUSTOMERS_FETCH_LIMIT)


@router.post("/", response_model=CustomerRead)
def create_customer(customer: CustomerCreate, db: Session = Depends(get_db)):
    """Saving an existing phone updates that customer instead of failing."""
    return crud_customers.upsert_customer(db, customer)


@router.get("/{customer_id}", response_model=CustomerRead)
def read_customer(customer_id: int, db: Session = Depends(get_db)):
    return _get_customer_or_404(db, customer_id)


@router.put("/{customer_id}", response_model=CustomerRead)
def update_customer(customer_id: int, customer: CustomerUpdate, db: Session = Depends(get_db)):
    db_customer = _get_customer_or_404(db, customer_id)
    other = crud_customers.get_customer_by_phone(db, customer.phone)
    if other and other.id != db_customer.id:
        raise HTTPException(status_code=409, detail="Another customer already uses this phone")
    try:
        return crud_customers.update_customer(db, db_customer, customer)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Another customer already uses this phone")


@router.delete("/{customer_id}")
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    """Credits and orders keep their copy of the name and phone."""
    db_customer = _get_customer_or_404(db, customer_id)
    crud_customers.delete_customer(db, db_customer)
    return {"message": "Customer deleted"}


@router.get("/{customer_id}/purchases", response_model=List[PurchaseGroup])
def read_customer_purchases(customer_id: int, db: Session = Depends(get_db)):
    """
    Legacy POS history: manual_out movements tagged with the customer's
    phone, grouped by receipt.
    """
    customer = _get_customer_or_404(db, customer_id)

    movements = (
        db.query(InventoryMovement)
        .options(joinedload(InventoryMovement.variant).joinedload(ProductVariant.product))
        .filter(
            InventoryMovement.type == "manual_out",
            InventoryMovement.note.icontains(customer.phone, autoescape=True),
        )
        .order_by(InventoryMovement.created_at.desc(), InventoryMovement.id.desc())
        .all()
    )

    groups = {}
    for m in movements:
        match = RECEIPT_RE.search(m.note or "")
        receipt = match.group(0) if match else f"NO-RECEIPT-{m.id}"

        g = groups.get(receipt)
        if g is None:
            g = {
                "receipt": receipt,
                "created_at": m.created_at,
                "customer_note": _customer_segment(m.note),
                "items": [],
            }
            groups[receipt] = g
        elif m.created_at and m.created_at > g["created_at"]:
            g["created_at"] = m.created_at

        g["items"].append({
            "movement_id": m.id,
            "variant_id": m.variant_id,
            "label": variant_label(m.variant),
            "qty_g": abs(m.qty_g) if m.qty_g else None,
            "qty_units": abs(m.qty_units) if m.qty_units else None,
            "created_at": m.created_at,
        })

    return sorted(groups.values(), key=lambda g: g["created_at"], reverse=True)
