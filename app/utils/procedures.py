"""
Gateway to the two database-side procedures. Both are owned by the
database; this module only calls them by name with named arguments.
"""
import logging
from decimal import Decimal
from typing import Optional

from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db
from app.utils.errors import ProcedureError, format_error

logger = logging.getLogger(__name__)


class StoredProcedures:
    def __init__(self, db: Session):
        self.db = db

    def call(self, name: str, params: dict) -> None:
        placeholders = ", ".join(f":{k}" for k in params)
        logger.info("Calling %s(%s)", name, ", ".join(f"{k}={v!r}" for k, v in params.items()))
        try:
            self.db.execute(text(f"SELECT {name}({placeholders})"), params)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            message = format_error(exc)
            logger.warning("%s failed: %s", name, message)
            raise ProcedureError(name, message) from exc

    def confirm_order(self, order_id: int) -> None:
        """Deducts stock and writes cost-bearing "sale" movements for the order."""
        self.call("confirm_order", {"p_order_id": order_id})

    def apply_inventory_movement(
        self,
        variant_id: int,
        movement_type: str,
        qty_g: int,
        qty_units: int,
        cost_total: Optional[Decimal],
        supplier_name: Optional[str],
        note: Optional[str],
    ) -> None:
        self.call("apply_inventory_movement", {
            "p_variant_id": variant_id,
            "p_type": movement_type,
            "p_qty_g": qty_g,
            "p_qty_units": qty_units,
            "p_cost_total": cost_total,
            "p_supplier_name": supplier_name,
            "p_note": note,
        })


def get_procedures(db: Session = Depends(get_db)) -> StoredProcedures:
    return StoredProcedures(db)
