from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base, utcnow


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)  # matched against inventory_movements.supplier_name
    phone = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
