# app/routers/movements.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload

from app.config import settings
from app.database import get_db
from app.models import InventoryMovement, ProductVariant
from app.schemas.inventory import MovementCreate, MovementRead
from app.utils.procedures import StoredProcedures, get_procedures
from app.utils.stock import cost_to_send, is_weight, kg_to_g, movement_delta, to_int

logger = logging.getLogger(__name__)

router = APIRouter()


def movement_read(m: InventoryMovement) -> MovementRead:
    m_read = MovementRead.model_validate(m)
    if m.variant is not None:
        m_read.variant_name = m.variant.name
        m_read.product_name = m.variant.product.name if m.variant.product else None
    return m_read


@router.get("/", response_model=List[MovementRead])
def read_movements(
    variant_id: Optional[int] = None,
    type: Optional[str] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """Latest stock movements (kardex), newest first."""
    query = db.query(InventoryMovement).options(
        joinedload(InventoryMovement.variant).joinedload(ProductVariant.product)
    )
    if variant_id is not None:
        query = query.filter(InventoryMovement.variant_id == variant_id)
    if type:
        query = query.filter(InventoryMovement.type == type)

    rows = (
        query.order_by(InventoryMovement.created_at.desc(), InventoryMovement.id.desc())
        .limit(limit or settings.MOVEMENTS_FETCH_LIMIT)
        .all()
    )
    return [movement_read(m) for m in rows]


@router.post("/")
def create_movement(
    payload: MovementCreate,
    db: Session = Depends(get_db),
    procedures: StoredProcedures = Depends(get_procedures),
):
    """
    Registers restocks, manual outs, returns and adjustments.
    Stock and average cost are updated by apply_inventory_movement().
    """
    # 1. Validate input
    variant = db.query(ProductVariant).filter(ProductVariant.id == payload.variant_id).first()
    if not variant:
        raise HTTPException(status_code=404, detail="Variant not found")

    if is_weight(variant.variant_type):
        grams, units = kg_to_g(payload.qty_kg), 0
    else:
        grams, units = 0, to_int(payload.qty_units)

    if grams == 0 and units == 0:
        raise HTTPException(status_code=400, detail="Enter a non-zero quantity")

    # 2. Signed delta and cost
    delta_g, delta_units = movement_delta(payload.type, grams, units)
    cost = cost_to_send(payload.type, delta_g, delta_units, payload.cost_total)

    # 3. Atomic stock update on the database side
    procedures.apply_inventory_movement(
        variant_id=variant.id,
        movement_type=payload.type,
        qty_g=delta_g,
        qty_units=delta_units,
        cost_total=cost,
        supplier_name=(payload.supplier_name or "").strip() or None,
        note=(payload.note or "").strip() or None,
    )
    logger.info("Movement %s on variant %s: %sg / %su", payload.type, variant.id, delta_g, delta_units)

    return {
        "message": "Movement saved",
        "variant_id": variant.id,
        "type": payload.type,
        "qty_g": delta_g,
        "qty_units": delta_units,
        "cost_total": cost,
    }
