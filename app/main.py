import logging
import os

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.config import settings
from app.database import engine
from app.models import Base
from app.routers import (
    categories, products, inventory, movements, orders,
    sales, customers, credits, expenses, suppliers
)
from app.utils.errors import ProcedureError, format_error

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# 1. AUTOMATIC TABLE CREATION
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Back office for a small shop: stock, orders, customers, credits and expenses",
    version=settings.VERSION
)

# 2. CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 3. UPLOADED MEDIA (product images bucket)
os.makedirs(settings.MEDIA_DIR, exist_ok=True)
app.mount(settings.MEDIA_URL, StaticFiles(directory=settings.MEDIA_DIR), name="media")

# 4. ROUTERS (BACKEND API)
app.include_router(categories.router, prefix="/api/categories", tags=["🗂️ Categories"])
app.include_router(products.router, prefix="/api/products", tags=["📦 Products & Variants"])
app.include_router(inventory.router, prefix="/api/inventory", tags=["🔄 Inventory"])
app.include_router(movements.router, prefix="/api/movements", tags=["📒 Stock Movements"])
app.include_router(orders.router, prefix="/api/orders", tags=["🛒 Orders & POS"])
app.include_router(sales.router, prefix="/api/sales", tags=["📊 Sales"])
app.include_router(customers.router, prefix="/api/customers", tags=["👥 Customers"])
app.include_router(credits.router, prefix="/api/credits", tags=["💳 Credits"])
app.include_router(expenses.router, prefix="/api/expenses", tags=["💸 Expenses"])
app.include_router(suppliers.router, prefix="/api/suppliers", tags=["🚚 Suppliers"])


@app.get("/health")
def health():
    return {"status": "ok"}


# --- 5. ERROR HANDLING ---
@app.exception_handler(ProcedureError)
async def procedure_error_handler(request: Request, exc: ProcedureError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Integrity error on %s: %s", request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": format_error(exc)})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": format_error(exc)})


@app.exception_handler(404)
async def not_found_exception_handler(request: Request, exc):
    # Unknown paths get a generic message; HTTPException(404) keeps its own detail
    detail = getattr(exc, "detail", None)
    if not detail or detail == "Not Found":
        detail = "Resource not found"
    return JSONResponse(status_code=404, content={"detail": detail})
