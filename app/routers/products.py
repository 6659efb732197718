# app/routers/products.py
import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.models import Product, ProductVariant, ProductVariantImage
from app.schemas.catalog import (
    ProductCreate, ProductRead, ProductUpdate,
    VariantCreate, VariantRead, VariantUpdate, VariantImageRead
)
from app.crud import catalog as crud_catalog
from app.utils.storage import ImageBucket, get_image_bucket

logger = logging.getLogger(__name__)

router = APIRouter()


# -----------------------------
# Helpers
# -----------------------------
def _product_read(p: Product) -> ProductRead:
    p_read = ProductRead.model_validate(p)
    p_read.variants_count = len(p.variants or [])
    return p_read


def _variant_read(v: ProductVariant) -> VariantRead:
    v_read = VariantRead.model_validate(v)
    v_read.product_name = v.product.name if v.product else None
    return v_read


def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _get_variant_or_404(db: Session, variant_id: int) -> ProductVariant:
    variant = crud_catalog.get_variant(db, variant_id)
    if not variant:
        raise HTTPException(status_code=404, detail="Variant not found")
    return variant


# -----------------------------
# 1. Variants (global list, edit, delete)
# -----------------------------
@router.get("/variants", response_model=List[VariantRead])
def read_variants(active_only: bool = False, db: Session = Depends(get_db)):
    return [_variant_read(v) for v in crud_catalog.get_variants(db, active_only=active_only)]


@router.put("/variants/{variant_id}", response_model=VariantRead)
def update_variant(variant_id: int, payload: VariantUpdate, db: Session = Depends(get_db)):
    variant = _get_variant_or_404(db, variant_id)
    data = payload.model_dump(exclude_unset=True)
    if "name" in data and not (data["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Variant name is required")
    for key, value in data.items():
        setattr(variant, key, value)
    db.commit()
    db.refresh(variant)
    return _variant_read(variant)


@router.delete("/variants/{variant_id}")
def delete_variant(variant_id: int, db: Session = Depends(get_db)):
    variant = _get_variant_or_404(db, variant_id)
    db.delete(variant)
    db.commit()
    logger.info("Deleted variant %s", variant_id)
    return {"message": "Variant deleted"}


# -----------------------------
# 2. Variant images (bucket upload + row)
# -----------------------------
@router.get("/variants/{variant_id}/images", response_model=List[VariantImageRead])
def read_variant_images(variant_id: int, db: Session = Depends(get_db)):
    _get_variant_or_404(db, variant_id)
    return (
        db.query(ProductVariantImage)
        .filter(ProductVariantImage.variant_id == variant_id)
        .order_by(ProductVariantImage.sort_order, ProductVariantImage.id)
        .all()
    )


@router.post("/variants/{variant_id}/images", response_model=VariantImageRead)
async def upload_variant_image(
    variant_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    bucket: ImageBucket = Depends(get_image_bucket),
):
    variant = _get_variant_or_404(db, variant_id)

    stored = await bucket.upload(file, prefix=f"variants/{variant.id}")

    next_order = db.query(ProductVariantImage).filter(ProductVariantImage.variant_id == variant.id).count()
    image = ProductVariantImage(
        variant_id=variant.id,
        url=stored["url"],
        path=stored["path"],
        sort_order=next_order,
    )
    try:
        db.add(image)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        bucket.remove(stored["path"])
        logger.exception("Image row for variant %s failed, removed %s", variant.id, stored["path"])
        raise
    db.refresh(image)
    return image


@router.delete("/images/{image_id}")
def delete_variant_image(
    image_id: int,
    db: Session = Depends(get_db),
    bucket: ImageBucket = Depends(get_image_bucket),
):
    image = db.query(ProductVariantImage).filter(ProductVariantImage.id == image_id).first()
    if not image:
        raise HTTPException(status_code=404, detail="Image not found")
    bucket.remove(image.path)
    db.delete(image)
    db.commit()
    return {"message": "Image deleted"}


# -----------------------------
# 3. Products
# -----------------------------
@router.get("/", response_model=List[ProductRead])
def read_products(q: str = "", include_inactive: bool = False, db: Session = Depends(get_db)):
    return [_product_read(p) for p in crud_catalog.get_products(db, q=q, include_inactive=include_inactive)]


@router.post("/", response_model=ProductRead)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Product name is required")

    product = Product(**payload.model_dump())
    product.name = name
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Created product %s (%s)", product.id, product.name)
    return _product_read(product)


@router.get("/{product_id}", response_model=ProductRead)
def read_product(product_id: int, db: Session = Depends(get_db)):
    return _product_read(_get_product_or_404(db, product_id))


@router.put("/{product_id}", response_model=ProductRead)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    product = _get_product_or_404(db, product_id)
    data = payload.model_dump(exclude_unset=True)
    if "name" in data and not (data["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Product name is required")
    for key, value in data.items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)
    return _product_read(product)


@router.patch("/{product_id}/toggle", response_model=ProductRead)
def toggle_product(product_id: int, db: Session = Depends(get_db)):
    product = _get_product_or_404(db, product_id)
    product.is_active = not product.is_active
    db.commit()
    db.refresh(product)
    return _product_read(product)


@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    """Deletes the product along with its variants."""
    product = _get_product_or_404(db, product_id)
    db.delete(product)
    db.commit()
    logger.info("Deleted product %s", product_id)
    return {"message": "Product deleted"}


# -----------------------------
# 4. Variants of one product
# -----------------------------
@router.get("/{product_id}/variants", response_model=List[VariantRead])
def read_product_variants(product_id: int, active_only: bool = False, db: Session = Depends(get_db)):
    _get_product_or_404(db, product_id)
    return [_variant_read(v) for v in crud_catalog.get_variants(db, product_id=product_id, active_only=active_only)]


@router.post("/{product_id}/variants", response_model=VariantRead)
def create_variant(product_id: int, payload: VariantCreate, db: Session = Depends(get_db)):
    product = _get_product_or_404(db, product_id)
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Variant name is required")

    variant = ProductVariant(product_id=product.id, **payload.model_dump())
    variant.name = name
    db.add(variant)
    db.commit()
    db.refresh(variant)
    return _variant_read(variant)
