# app/routers/inventory.py
import io
import logging
from typing import List

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session, joinedload

from app.database import get_db, utcnow
from app.models import Inventory, ProductVariant
from app.schemas.inventory import InventoryRead, InventoryUpsert
from app.utils.stock import (
    cost_per_kg, g_to_kg, is_low_stock, kg_to_g, row_stock_value, to_int
)

logger = logging.getLogger(__name__)

router = APIRouter()


# -----------------------------
# Helpers
# -----------------------------
def _inventory_read(row: Inventory) -> InventoryRead:
    variant = row.variant
    v_type = variant.variant_type if variant else None
    product = variant.product if variant else None
    return InventoryRead(
        variant_id=row.variant_id,
        variant_name=variant.name if variant else None,
        variant_type=v_type,
        product_name=product.name if product else None,
        qty_g=row.qty_g or 0,
        qty_kg=g_to_kg(row.qty_g),
        qty_units=row.qty_units or 0,
        reorder_level_g=row.reorder_level_g or 0,
        reorder_level_units=row.reorder_level_units or 0,
        avg_cost_per_g=row.avg_cost_per_g,
        avg_cost_per_unit=row.avg_cost_per_unit,
        updated_at=row.updated_at,
        is_low=is_low_stock(v_type, row),
        stock_value=row_stock_value(v_type, row),
        cost_per_kg=cost_per_kg(row.avg_cost_per_g),
    )


def _load_rows(db: Session, low_only: bool) -> List[InventoryRead]:
    rows = (
        db.query(Inventory)
        .options(joinedload(Inventory.variant).joinedload(ProductVariant.product))
        .all()
    )
    result = [_inventory_read(r) for r in rows]
    if low_only:
        result = [r for r in result if r.is_low]
    result.sort(key=lambda r: ((r.product_name or "").lower(), (r.variant_name or "").lower()))
    return result


# -----------------------------
# 1. Stock table
# -----------------------------
@router.get("/", response_model=List[InventoryRead])
def read_inventory(low_only: bool = False, db: Session = Depends(get_db)):
    """Current stock with low-stock flag and valuation per row."""
    return _load_rows(db, low_only)


# -----------------------------
# 2. Upsert one row
# -----------------------------
@router.put("/{variant_id}", response_model=InventoryRead)
def upsert_inventory(variant_id: int, payload: InventoryUpsert, db: Session = Depends(get_db)):
    variant = db.query(ProductVariant).filter(ProductVariant.id == variant_id).first()
    if not variant:
        raise HTTPException(status_code=404, detail="Variant not found")

    row = db.query(Inventory).filter(Inventory.variant_id == variant_id).first()
    if not row:
        row = Inventory(variant_id=variant_id)
        db.add(row)

    row.qty_g = kg_to_g(payload.qty_kg, clamp=True)
    row.qty_units = to_int(payload.qty_units, clamp=True)
    row.reorder_level_g = kg_to_g(payload.reorder_kg, clamp=True)
    row.reorder_level_units = to_int(payload.reorder_units, clamp=True)
    row.updated_at = utcnow()

    db.commit()
    db.refresh(row)
    logger.info("Inventory saved for variant %s: %sg / %su", variant_id, row.qty_g, row.qty_units)
    return _inventory_read(row)


# -----------------------------
# 3. Excel export
# -----------------------------
@router.get("/export/excel")
def export_inventory_excel(low_only: bool = False, db: Session = Depends(get_db)):
    data = []
    for r in _load_rows(db, low_only):
        data.append({
            "Product": r.product_name or "",
            "Variant": r.variant_name or "",
            "Type": r.variant_type or "",
            "Qty (kg)": float(r.qty_kg),
            "Qty (units)": r.qty_units,
            "Reorder (g)": r.reorder_level_g,
            "Reorder (units)": r.reorder_level_units,
            "Low": "YES" if r.is_low else "",
            "Cost/kg": float(r.cost_per_kg) if r.cost_per_kg is not None else None,
            "Stock value": float(r.stock_value) if r.stock_value is not None else None,
        })

    df = pd.DataFrame(data, columns=[
        "Product", "Variant", "Type", "Qty (kg)", "Qty (units)",
        "Reorder (g)", "Reorder (units)", "Low", "Cost/kg", "Stock value",
    ])

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Inventory")
    output.seek(0)

    headers = {"Content-Disposition": 'attachment; filename="inventory.xlsx"'}
    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )
