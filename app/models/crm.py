# app/models/crm.py
from sqlalchemy import Column, Integer, String, Boolean, Numeric, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from app.database import Base, utcnow


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True, index=True)
    phone = Column(String, nullable=False, unique=True, index=True)
    created_at = Column(DateTime, default=utcnow)

    credits = relationship("Credit", back_populates="customer")


class Credit(Base):
    """
    Goods taken on the slate. Paid down through amount_paid; rows are
    never deleted, a credit is settled once its balance reaches zero.

    customer_name / customer_phone are kept on the row so credits typed
    without a linked customer still group together.
    """
    __tablename__ = "credits"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    customer_name = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)

    amount = Column(Numeric(12, 2), nullable=False)
    amount_paid = Column(Numeric(12, 2), default=0)
    note = Column(String, nullable=True)

    status = Column(String, default="open")   # open, paid (legacy rows: settled, closed)
    is_paid = Column(Boolean, nullable=True)  # legacy flag, may disagree with status
    created_at = Column(DateTime, default=utcnow)
    paid_at = Column(DateTime, nullable=True)

    customer = relationship("Customer", back_populates="credits")
