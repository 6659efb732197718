import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models import Customer, Order, Payment
from app.schemas.customers import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)


def phone_digits(phone: Optional[str]) -> str:
    return "".join(ch for ch in (phone or "") if ch.isdigit())


def get_customer(db: Session, customer_id: int):
    return db.query(Customer).filter(Customer.id == customer_id).first()


def get_customer_by_phone(db: Session, phone: str):
    return db.query(Customer).filter(Customer.phone == phone.strip()).first()


def get_customers(db: Session, q: str = "", limit: int = 1000):
    query = db.query(Customer)
    s = (q or "").strip()
    if s:
        like = f"%{s}%"
        query = query.filter(or_(Customer.name.ilike(like), Customer.phone.ilike(like)))
    return query.order_by(Customer.created_at.desc(), Customer.id.desc()).limit(limit).all()


def upsert_customer(db: Session, customer: CustomerCreate):
    """Phone is the natural key: an existing phone gets its name updated."""
    db_customer = get_customer_by_phone(db, customer.phone)
    if db_customer:
        db_customer.name = customer.name
    else:
        db_customer = Customer(name=customer.name, phone=customer.phone)
        db.add(db_customer)
    db.commit()
    db.refresh(db_customer)
    logger.info("Saved customer %s (%s)", db_customer.id, db_customer.phone)
    return db_customer


def update_customer(db: Session, db_customer: Customer, customer: CustomerUpdate):
    db_customer.name = customer.name
    db_customer.phone = customer.phone
    db.commit()
    db.refresh(db_customer)
    return db_customer


def find_or_create_by_phone(db: Session, phone: str, name: Optional[str] = None):
    """Used by checkout; fills in a missing name but never overwrites one."""
    phone = phone.strip()
    name = (name or "").strip() or None

    db_customer = get_customer_by_phone(db, phone)
    if db_customer is None:
        db_customer = Customer(name=name, phone=phone)
        db.add(db_customer)
        db.flush()
    elif name and not db_customer.name:
        db_customer.name = name
    return db_customer


def delete_customer(db: Session, db_customer: Customer) -> None:
    # Orders, payments and credits outlive the customer record
    db.query(Order).filter(Order.customer_id == db_customer.id).update(
        {Order.customer_id: None}, synchronize_session=False
    )
    db.query(Payment).filter(Payment.customer_id == db_customer.id).update(
        {Payment.customer_id: None}, synchronize_session=False
    )
    for credit in db_customer.credits:
        credit.customer_id = None
    db.delete(db_customer)
    db.commit()
    logger.info("Deleted customer %s", db_customer.id)
