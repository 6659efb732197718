from sqlalchemy import Column, Integer, String, Numeric, DateTime
from app.database import Base, utcnow


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    incurred_at = Column(DateTime, nullable=False, index=True)
    category = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String, default="USD")
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
