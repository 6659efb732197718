import enum
from sqlalchemy import Column, Integer, BigInteger, String, ForeignKey, DateTime, Numeric
from sqlalchemy.orm import relationship
from app.database import Base, utcnow


# --- Enums ---
class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"


# --- Order header ---
class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    customer_phone = Column(String, nullable=True, index=True)

    channel = Column(String, default="online")   # online, whatsapp, pos...
    status = Column(String, default=OrderStatus.PENDING.value, index=True)
    payment_method = Column(String, default="cod")
    payment_status = Column(String, default=PaymentStatus.UNPAID.value)
    currency = Column(String, default="USD")

    subtotal = Column(Numeric(12, 2), default=0)
    delivery_fee = Column(Numeric(12, 2), default=0)
    discount = Column(Numeric(12, 2), default=0)
    total = Column(Numeric(12, 2), default=0)
    amount_paid = Column(Numeric(12, 2), default=0)

    address = Column(String, nullable=True)
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    customer = relationship("Customer")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="order")


# --- Order lines ---
class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=False)

    qty_g = Column(BigInteger, nullable=True)
    qty_units = Column(BigInteger, nullable=True)
    unit_price = Column(Numeric(12, 2), nullable=False)
    line_total = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    order = relationship("Order", back_populates="items")
    variant = relationship("ProductVariant")


# --- Payments received against an order ---
class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)

    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(String, default="cash")  # cash, transfer
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    order = relationship("Order", back_populates="payments")
