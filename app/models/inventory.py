from sqlalchemy import Column, Integer, BigInteger, String, ForeignKey, Numeric, DateTime
from sqlalchemy.orm import relationship, backref
from app.database import Base, utcnow
import enum


class MovementType(str, enum.Enum):
    RESTOCK = "restock"          # Supplier delivery
    MANUAL_OUT = "manual_out"    # Manual stock out (waste, legacy POS sale)
    RETURN = "return"            # Customer return
    ADJUSTMENT = "adjustment"    # Count correction (+/-)
    SALE = "sale"                # Written by confirm_order()


class Inventory(Base):
    """
    Current stock per variant. Weight variants are tracked in grams,
    everything else in units.
    """
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True)
    variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=False, unique=True)

    qty_g = Column(BigInteger, default=0)
    qty_units = Column(BigInteger, default=0)
    reorder_level_g = Column(BigInteger, default=0)
    reorder_level_units = Column(BigInteger, default=0)

    avg_cost_per_g = Column(Numeric(14, 6), nullable=True)
    avg_cost_per_unit = Column(Numeric(14, 6), nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    variant = relationship("ProductVariant", backref=backref("inventory_rows", cascade="all, delete-orphan"))


class InventoryMovement(Base):
    __tablename__ = "inventory_movements"

    id = Column(Integer, primary_key=True, index=True)
    variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True, index=True)

    type = Column(String, nullable=False, index=True)
    qty_g = Column(BigInteger, default=0)      # signed: +in / -out
    qty_units = Column(BigInteger, default=0)
    cost_total = Column(Numeric(12, 2), nullable=True)

    supplier_name = Column(String, nullable=True, index=True)
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    variant = relationship("ProductVariant")
