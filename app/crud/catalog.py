import logging
import re

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models import Category, Subcategory, Subsubcategory, Product, ProductVariant

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    """ "Fresh Fruit & Veg" -> "fresh-fruit-veg" """
    s = (name or "").strip().lower()
    s = re.sub(r"[^a-z0-9\s-]", "", s)
    s = re.sub(r"\s+", "-", s)
    s = re.sub(r"-+", "-", s)
    return s.strip("-")


# --- Category tree ---
def get_category_tree(db: Session):
    return db.query(Category).order_by(Category.name).all()


def create_category(db: Session, name: str):
    db_category = Category(name=name, slug=slugify(name))
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category


def create_subcategory(db: Session, category_id: int, name: str):
    db_sub = Subcategory(category_id=category_id, name=name, slug=slugify(name))
    db.add(db_sub)
    db.commit()
    db.refresh(db_sub)
    return db_sub


def create_subsubcategory(db: Session, subcategory_id: int, name: str):
    db_subsub = Subsubcategory(subcategory_id=subcategory_id, name=name, slug=slugify(name))
    db.add(db_subsub)
    db.commit()
    db.refresh(db_subsub)
    return db_subsub


def _delete_subcategory_rows(db: Session, sub: Subcategory) -> int:
    removed = 0
    for subsub in list(sub.subsubcategories):
        db.delete(subsub)
        removed += 1
    db.delete(sub)
    return removed + 1


def delete_category(db: Session, category: Category) -> int:
    """Removes the category with its whole subtree; returns the row count."""
    removed = 0
    for sub in list(category.subcategories):
        removed += _delete_subcategory_rows(db, sub)
    db.delete(category)
    db.commit()
    logger.info("Deleted category %s (%d rows)", category.id, removed + 1)
    return removed + 1


def delete_subcategory(db: Session, sub: Subcategory) -> int:
    removed = _delete_subcategory_rows(db, sub)
    db.commit()
    return removed


# --- Products ---
def get_products(db: Session, q: str = "", include_inactive: bool = False):
    query = db.query(Product)
    if not include_inactive:
        query = query.filter(Product.is_active == True)
    s = (q or "").strip()
    if s:
        like = f"%{s}%"
        query = query.filter(or_(Product.name.ilike(like), Product.brand.ilike(like)))
    return query.order_by(Product.name).all()


def get_variants(db: Session, product_id: int = None, active_only: bool = False):
    query = db.query(ProductVariant)
    if product_id is not None:
        query = query.filter(ProductVariant.product_id == product_id)
    if active_only:
        query = query.filter(ProductVariant.is_active == True)
    return query.order_by(ProductVariant.name).all()


def get_variant(db: Session, variant_id: int):
    return db.query(ProductVariant).filter(ProductVariant.id == variant_id).first()


def variant_label(variant) -> str:
    if variant is None:
        return "(Unknown variant)"
    product = variant.product
    name = product.name if product is not None else "(Unknown product)"
    return f"{name} - {variant.name}" if variant.name else name
