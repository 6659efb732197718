# app/routers/sales.py
from datetime import date, datetime, time, timedelta
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from app.config import settings
from app.database import get_db, utcnow
from app.models import InventoryMovement, Order, OrderItem, ProductVariant
from app.schemas.sales import DailySalesResponse
from app.utils.sales import SALE_STATUSES, build_sales, filter_sales, summarize

router = APIRouter()


@router.get("/daily", response_model=DailySalesResponse)
def daily_sales(day: Optional[date] = None, q: str = "", db: Session = Depends(get_db)):
    """
    Revenue, cost and profit for one calendar day. Cost comes from the
    "sale" movements written by confirm_order(); a missing cost counts as 0.
    """
    day = day or utcnow().date()
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1)

    # 1. Confirmed orders of the day
    orders = (
        db.query(Order)
        .options(
            joinedload(Order.items)
            .joinedload(OrderItem.variant)
            .joinedload(ProductVariant.product)
        )
        .filter(
            Order.status.in_(SALE_STATUSES),
            Order.created_at >= start,
            Order.created_at < end,
        )
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(settings.SALES_FETCH_LIMIT)
        .all()
    )

    # 2. Their cost-bearing movements
    order_ids = [o.id for o in orders]
    movements = []
    if order_ids:
        movements = (
            db.query(InventoryMovement)
            .filter(InventoryMovement.type == "sale", InventoryMovement.order_id.in_(order_ids))
            .all()
        )

    # 3. Join in memory
    sales = filter_sales(build_sales(orders, movements, settings.DEFAULT_CURRENCY), q)

    return {
        "day": day,
        "summary": summarize(sales, settings.DEFAULT_CURRENCY),
        "orders": sales,
    }
