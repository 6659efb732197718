"""
Pytest fixtures for API tests.

Every test gets a fresh in-memory SQLite database and an in-process
stand-in for the two database procedures.
"""

import os
import tempfile
from decimal import Decimal
from types import SimpleNamespace

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("MEDIA_DIR", tempfile.mkdtemp(prefix="backoffice-media-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import (
    Customer, Credit, Inventory, InventoryMovement, Order, Product, ProductVariant
)
from app.utils.errors import ProcedureError
from app.utils.procedures import StoredProcedures, get_procedures
from app.utils.storage import ImageBucket, get_image_bucket


# =============================================================================
# PROCEDURE STAND-IN
# =============================================================================

class FakeProcedures(StoredProcedures):
    """
    Same side effects as the real procedures, done with the ORM:
    confirm_order() deducts stock and writes costed "sale" movements,
    apply_inventory_movement() updates stock and the weighted average cost.
    """

    def __init__(self, db):
        super().__init__(db)
        self.calls = []

    def call(self, name, params):
        self.calls.append((name, params))
        if name == "confirm_order":
            self._confirm_order(params["p_order_id"])
        elif name == "apply_inventory_movement":
            self._apply_movement(**params)
        self.db.commit()

    def _stock_row(self, variant_id):
        row = self.db.query(Inventory).filter(Inventory.variant_id == variant_id).first()
        if row is None:
            row = Inventory(variant_id=variant_id, qty_g=0, qty_units=0, reorder_level_g=0, reorder_level_units=0)
            self.db.add(row)
            self.db.flush()
        return row

    def _confirm_order(self, order_id):
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if order is None:
            raise ProcedureError("confirm_order", "order not found")
        if order.status != "pending":
            raise ProcedureError("confirm_order", f"order {order_id} is not pending")

        for item in order.items:
            row = self._stock_row(item.variant_id)
            grams = int(item.qty_g or 0)
            units = int(item.qty_units or 0)
            if (row.qty_g or 0) < grams or (row.qty_units or 0) < units:
                self.db.rollback()
                raise ProcedureError("confirm_order", f"insufficient stock for variant {item.variant_id}")

            cost = None
            if grams and row.avg_cost_per_g:
                cost = Decimal(grams) * Decimal(row.avg_cost_per_g)
            elif units and row.avg_cost_per_unit:
                cost = Decimal(units) * Decimal(row.avg_cost_per_unit)

            row.qty_g = (row.qty_g or 0) - grams
            row.qty_units = (row.qty_units or 0) - units
            self.db.add(InventoryMovement(
                variant_id=item.variant_id,
                order_id=order.id,
                type="sale",
                qty_g=-grams,
                qty_units=-units,
                cost_total=cost.quantize(Decimal("0.01")) if cost is not None else None,
            ))
        order.status = "confirmed"

    def _apply_movement(self, p_variant_id, p_type, p_qty_g, p_qty_units, p_cost_total, p_supplier_name, p_note):
        row = self._stock_row(p_variant_id)
        if p_cost_total is not None:
            if p_qty_g > 0:
                old = Decimal(row.qty_g or 0) * Decimal(row.avg_cost_per_g or 0)
                row.avg_cost_per_g = (old + Decimal(p_cost_total)) / Decimal((row.qty_g or 0) + p_qty_g)
            elif p_qty_units > 0:
                old = Decimal(row.qty_units or 0) * Decimal(row.avg_cost_per_unit or 0)
                row.avg_cost_per_unit = (old + Decimal(p_cost_total)) / Decimal((row.qty_units or 0) + p_qty_units)
        row.qty_g = (row.qty_g or 0) + p_qty_g
        row.qty_units = (row.qty_units or 0) + p_qty_units
        self.db.add(InventoryMovement(
            variant_id=p_variant_id,
            type=p_type,
            qty_g=p_qty_g,
            qty_units=p_qty_units,
            cost_total=p_cost_total,
            supplier_name=p_supplier_name,
            note=p_note,
        ))


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
def engine():
    """Shared in-memory database (one connection for every session)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Session for arranging and inspecting data."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def procedures(db_session):
    return FakeProcedures(db_session)


# =============================================================================
# APPLICATION FIXTURES
# =============================================================================

@pytest.fixture
def client(db_session, procedures, tmp_path):
    """Test client wired to the test database, procedures and image bucket."""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_procedures] = lambda: procedures
    app.dependency_overrides[get_image_bucket] = lambda: ImageBucket(root=str(tmp_path))

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def catalog(db_session):
    """One weight variant (rice, per kg) and one unit variant (soda)."""
    rice = Product(name="Rice", brand="Pearl")
    soda = Product(name="Soda")
    db_session.add_all([rice, soda])
    db_session.flush()

    rice_5kg = ProductVariant(product_id=rice.id, name="Loose", variant_type="weight", sell_price=Decimal("2.50"))
    soda_can = ProductVariant(product_id=soda.id, name="Can 330ml", variant_type="unit", sell_price=Decimal("1.00"))
    db_session.add_all([rice_5kg, soda_can])
    db_session.commit()
    return SimpleNamespace(rice=rice_5kg, soda=soda_can)


@pytest.fixture
def stocked(db_session, catalog):
    """Both variants in stock with a known average cost."""
    db_session.add_all([
        Inventory(
            variant_id=catalog.rice.id, qty_g=10000, qty_units=0,
            reorder_level_g=2000, reorder_level_units=0,
            avg_cost_per_g=Decimal("0.0015"),
        ),
        Inventory(
            variant_id=catalog.soda.id, qty_g=0, qty_units=24,
            reorder_level_g=0, reorder_level_units=6,
            avg_cost_per_unit=Decimal("0.40"),
        ),
    ])
    db_session.commit()
    return catalog


@pytest.fixture
def customer(db_session):
    c = Customer(name="Amina", phone="0612345678")
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture
def make_credit(db_session):
    """Factory for credit rows with explicit timestamps."""
    def _make(amount, created_at, amount_paid=0, **fields):
        credit = Credit(
            amount=Decimal(str(amount)),
            amount_paid=Decimal(str(amount_paid)),
            status=fields.pop("status", "open"),
            created_at=created_at,
            **fields,
        )
        db_session.add(credit)
        db_session.commit()
        return credit
    return _make
