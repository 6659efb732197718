# app/routers/orders.py
import logging
import time
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import get_db, utcnow
from app.models import Customer, InventoryMovement, Order, Payment, PaymentStatus
from app.schemas.orders import (
    ConfirmResult, OnlineOrderCreate, OrderDetail, OrderItemRead, OrderList,
    OrderRead, OrderTotals, OrderUpdate, PosCheckout, PosResult
)
from app.crud import credits as crud_credits
from app.crud import customers as crud_customers
from app.crud import orders as crud_orders
from app.utils.credits import money, to_decimal
from app.utils.procedures import StoredProcedures, get_procedures
from app.utils.sales import product_label

logger = logging.getLogger(__name__)

router = APIRouter()


# -----------------------------
# Helpers
# -----------------------------
def _get_order_or_404(db: Session, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


def _price_or_404(db: Session, items):
    if not items:
        raise HTTPException(status_code=400, detail="Add at least 1 item.")
    try:
        return crud_orders.price_cart(db, items)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Variant {exc.args[0]} not found")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _order_detail(order: Order) -> OrderDetail:
    items = sorted(order.items or [], key=lambda it: (it.created_at or utcnow(), it.id))
    rows = [
        OrderItemRead(
            id=it.id,
            order_id=it.order_id,
            variant_id=it.variant_id,
            qty_g=it.qty_g,
            qty_units=it.qty_units,
            unit_price=it.unit_price,
            line_total=it.line_total,
            created_at=it.created_at,
            product_name=product_label(it.variant),
            variant_name=it.variant.name if it.variant else "(Unknown variant)",
            variant_type=it.variant.variant_type if it.variant else None,
        )
        for it in items
    ]
    return OrderDetail(**OrderRead.model_validate(order).model_dump(), items=rows)


def _pos_header(receipt_id: str, customer: Optional[Customer], phone: str, note: str) -> str:
    """ "Customer: Amina (0612345678) | POS-1717000000000 | Note: ..." """
    name = (customer.name or "").strip() if customer else ""
    if name and phone:
        token = f"{name} ({phone})"
    else:
        token = name or phone
    parts = [
        f"Customer: {token}" if token else None,
        receipt_id,
        f"Note: {note}" if note else None,
    ]
    return " | ".join(p for p in parts if p)


# -----------------------------
# 1. Order lists by status
# -----------------------------
@router.get("/", response_model=OrderList)
def read_orders(status: str = "pending", q: str = "", db: Session = Depends(get_db)):
    status = crud_orders.normalize_status(status)
    orders = crud_orders.filter_orders(crud_orders.get_orders(db, status), q)

    totals = OrderTotals(
        count=len(orders),
        total=sum((to_decimal(o.total) for o in orders), Decimal(0)),
        unpaid_count=sum(1 for o in orders if (o.payment_status or "") != PaymentStatus.PAID.value),
    )
    return OrderList(
        status=status,
        orders=[OrderRead.model_validate(o) for o in orders],
        totals=totals,
    )


# -----------------------------
# 2. Checkout: online order
# -----------------------------
@router.post("/online", response_model=OrderDetail)
def create_online_order(payload: OnlineOrderCreate, db: Session = Depends(get_db)):
    phone = payload.customer_phone.strip()
    if len(crud_customers.phone_digits(phone)) < 6:
        raise HTTPException(status_code=400, detail="Enter a valid phone number")

    lines = _price_or_404(db, payload.items)
    customer = crud_customers.find_or_create_by_phone(db, phone, payload.customer_name)

    order = crud_orders.create_order(
        db,
        lines,
        customer_id=customer.id,
        customer_phone=phone,
        channel=(payload.channel or "online").strip() or "online",
        status=crud_orders.normalize_status(payload.status),
        payment_method=payload.payment_method or "cod",
        payment_status="unpaid",
        address=(payload.address or "").strip() or None,
        note=(payload.note or "").strip() or None,
    )
    db.commit()
    db.refresh(order)
    return _order_detail(order)


# -----------------------------
# 3. Checkout: fast POS
# -----------------------------
@router.post("/pos", response_model=PosResult)
def pos_checkout(
    payload: PosCheckout,
    db: Session = Depends(get_db),
    procedures: StoredProcedures = Depends(get_procedures),
):
    """
    Creates a POS order, records the payment (or a credit) and runs
    confirm_order() so inventory and cost are written.
    """
    lines = _price_or_404(db, payload.items)

    # 1. Who is buying
    customer = None
    if payload.customer_id is not None:
        customer = crud_customers.get_customer(db, payload.customer_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
    phone = (payload.customer_phone or "").strip()
    if customer is None and phone:
        customer = crud_customers.get_customer_by_phone(db, phone)

    # 2. Receipt id and note header
    receipt_id = f"POS-{int(time.time() * 1000)}"
    note = (payload.note or "").strip()
    header = _pos_header(receipt_id, customer, phone, note)
    method = payload.payment_method

    # 3. Order + lines
    order = crud_orders.create_order(
        db,
        lines,
        customer_id=customer.id if customer else None,
        customer_phone=phone or (customer.phone if customer else None),
        channel="pos",
        status="pending",
        payment_method=method,
        payment_status="unpaid",
        note=f"{header} | POS payment:{method}\nSource: Fast POS",
        address=None,
    )
    total = to_decimal(order.total)

    # 4. Paid now: payment row and order marked paid
    if method != "credit" and total > 0:
        db.add(Payment(
            order_id=order.id,
            customer_id=customer.id if customer else None,
            amount=total,
            method=method,
            note=f"Fast POS payment ({method})",
        ))
        order.payment_status = PaymentStatus.PAID.value
        order.amount_paid = total
    db.commit()

    # 5. Inventory and cost
    procedures.confirm_order(order.id)

    # 6. Paid later: open a credit
    credit_id = None
    if method == "credit" and total > 0:
        if customer is None and not phone:
            logger.warning("POS %s: credit skipped, no customer info", receipt_id)
        else:
            summary = " | ".join(l["label"] for l in lines[:12])
            credit_note = "\n".join(p for p in [
                header,
                f"Items: {summary}" if summary else None,
                "Source: Fast POS",
            ] if p)
            credit = crud_credits.create_credit(
                db, total, customer=customer, customer_phone=phone, note=credit_note,
            )
            credit_id = credit.id

    message = f"Saved {receipt_id}. Order confirmed (#{order.id}). Inventory + cost recorded."
    if credit_id:
        message += " Credit recorded."
    logger.info("POS checkout %s: order %s, %s %s", receipt_id, order.id, method, money(total))

    return PosResult(receipt_id=receipt_id, order_id=order.id, total=total, credit_id=credit_id, message=message)


# -----------------------------
# 4. One order
# -----------------------------
@router.get("/{order_id}", response_model=OrderDetail)
def read_order(order_id: int, db: Session = Depends(get_db)):
    return _order_detail(_get_order_or_404(db, order_id))


@router.patch("/{order_id}", response_model=OrderRead)
def update_order(order_id: int, payload: OrderUpdate, db: Session = Depends(get_db)):
    order = _get_order_or_404(db, order_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("status"):
        order.status = crud_orders.normalize_status(data["status"])
    if data.get("payment_method"):
        order.payment_method = data["payment_method"].strip()
    if data.get("payment_status"):
        order.payment_status = data["payment_status"].strip()
    if "address" in data:
        order.address = (data["address"] or "").strip() or None
    if "note" in data:
        order.note = (data["note"] or "").strip() or None
    order.updated_at = utcnow()

    db.commit()
    db.refresh(order)
    return order


@router.post("/{order_id}/confirm", response_model=ConfirmResult)
def confirm_order(
    order_id: int,
    db: Session = Depends(get_db),
    procedures: StoredProcedures = Depends(get_procedures),
):
    """Runs confirm_order() then reports the sale movements it wrote."""
    order = _get_order_or_404(db, order_id)
    procedures.confirm_order(order.id)

    try:
        movements = (
            db.query(InventoryMovement)
            .filter(InventoryMovement.order_id == order.id, InventoryMovement.type == "sale")
            .all()
        )
    except SQLAlchemyError as exc:
        # Stock was already written; only the report is missing
        db.rollback()
        logger.warning("Order %s confirmed but movements read-back failed: %s", order.id, exc)
        return ConfirmResult(order_id=order.id)

    return ConfirmResult(
        order_id=order.id,
        movements_count=len(movements),
        cost_total=sum((to_decimal(m.cost_total) for m in movements), Decimal(0)),
    )
