# app/routers/suppliers.py
import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload

from app.database import get_db
from app.models import InventoryMovement, ProductVariant, Supplier
from app.routers.movements import movement_read
from app.schemas.inventory import MovementRead
from app.schemas.suppliers import SupplierActivity, SupplierCreate, SupplierRead, SupplierUpdate
from app.utils.credits import to_decimal
from app.utils.stock import INBOUND_TYPES

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_supplier_or_404(db: Session, supplier_id: int) -> Supplier:
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier


def _check_unique_name(db: Session, name: str, exclude_id: int = None) -> None:
    query = db.query(Supplier).filter(Supplier.name == name)
    if exclude_id is not None:
        query = query.filter(Supplier.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail=f"Supplier '{name}' already exists")


# -----------------------------
# 1. Activity summary
# -----------------------------
@router.get("/", response_model=List[SupplierActivity])
def read_supplier_activity(q: str = "", db: Session = Depends(get_db)):
    """Restock count, total cost and last restock per supplier name, optionally filtered by name."""
    movements = db.query(InventoryMovement).filter(InventoryMovement.supplier_name.isnot(None)).all()

    activity = {}
    for m in movements:
        name = (m.supplier_name or "").strip()
        if not name:
            continue
        a = activity.setdefault(name, SupplierActivity(supplier_name=name))
        if m.type in INBOUND_TYPES:
            a.restocks_count += 1
            a.total_cost += to_decimal(m.cost_total)
            if m.created_at and (a.last_restock_at is None or m.created_at > a.last_restock_at):
                a.last_restock_at = m.created_at

    for s in db.query(Supplier).all():
        a = activity.setdefault(s.name, SupplierActivity(supplier_name=s.name))
        a.supplier_id = s.id

    term = q.strip().lower()
    if term:
        activity = {k: a for k, a in activity.items() if term in k.lower()}

    return sorted(
        activity.values(),
        key=lambda a: (a.last_restock_at or datetime.min, a.supplier_name.lower()),
        reverse=True,
    )


# -----------------------------
# 2. Supplier directory
# -----------------------------
@router.post("/", response_model=SupplierRead)
def create_supplier(payload: SupplierCreate, db: Session = Depends(get_db)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Supplier name is required")
    _check_unique_name(db, name)

    supplier = Supplier(
        name=name,
        phone=(payload.phone or "").strip() or None,
        notes=(payload.notes or "").strip() or None,
    )
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    logger.info("Created supplier %s (%s)", supplier.id, supplier.name)
    return supplier


@router.put("/{supplier_id}", response_model=SupplierRead)
def update_supplier(supplier_id: int, payload: SupplierUpdate, db: Session = Depends(get_db)):
    supplier = _get_supplier_or_404(db, supplier_id)
    data = payload.model_dump(exclude_unset=True)

    if "name" in data:
        name = (data["name"] or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="Supplier name is required")
        _check_unique_name(db, name, exclude_id=supplier.id)
        supplier.name = name
    if "phone" in data:
        supplier.phone = (data["phone"] or "").strip() or None
    if "notes" in data:
        supplier.notes = (data["notes"] or "").strip() or None

    db.commit()
    db.refresh(supplier)
    return supplier


@router.delete("/{supplier_id}")
def delete_supplier(supplier_id: int, db: Session = Depends(get_db)):
    """Movements keep the supplier name they were logged with."""
    supplier = _get_supplier_or_404(db, supplier_id)
    db.delete(supplier)
    db.commit()
    return {"message": "Supplier deleted"}


@router.get("/{name}/movements", response_model=List[MovementRead])
def read_supplier_movements(name: str, db: Session = Depends(get_db)):
    rows = (
        db.query(InventoryMovement)
        .options(joinedload(InventoryMovement.variant).joinedload(ProductVariant.product))
        .filter(InventoryMovement.supplier_name == name.strip())
        .order_by(InventoryMovement.created_at.desc(), InventoryMovement.id.desc())
        .all()
    )
    return [movement_read(m) for m in rows]
