# app/routers/categories.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.models import Category, Subcategory, Subsubcategory
from app.schemas.catalog import CategoryCreate, CategoryRead, SubcategoryRead, SubsubcategoryRead
from app.crud import catalog as crud_catalog

router = APIRouter()


def _clean_name(payload: CategoryCreate) -> str:
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    return name


# -----------------------------
# 1. Tree
# -----------------------------
@router.get("/", response_model=List[CategoryRead])
def read_category_tree(db: Session = Depends(get_db)):
    """Category -> subcategories -> subsubcategories."""
    return crud_catalog.get_category_tree(db)


# -----------------------------
# 2. Create (one endpoint per level)
# -----------------------------
@router.post("/", response_model=CategoryRead)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    return crud_catalog.create_category(db, _clean_name(payload))


@router.post("/{category_id}/subcategories", response_model=SubcategoryRead)
def create_subcategory(category_id: int, payload: CategoryCreate, db: Session = Depends(get_db)):
    name = _clean_name(payload)
    if not db.query(Category).filter(Category.id == category_id).first():
        raise HTTPException(status_code=404, detail="Category not found")
    return crud_catalog.create_subcategory(db, category_id, name)


@router.post("/subcategories/{subcategory_id}/subsubcategories", response_model=SubsubcategoryRead)
def create_subsubcategory(subcategory_id: int, payload: CategoryCreate, db: Session = Depends(get_db)):
    name = _clean_name(payload)
    if not db.query(Subcategory).filter(Subcategory.id == subcategory_id).first():
        raise HTTPException(status_code=404, detail="Subcategory not found")
    return crud_catalog.create_subsubcategory(db, subcategory_id, name)


# -----------------------------
# 3. Delete (cascades down the tree)
# -----------------------------
@router.delete("/{category_id}")
def delete_category(category_id: int, db: Session = Depends(get_db)):
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    removed = crud_catalog.delete_category(db, category)
    return {"message": "Category deleted", "removed": removed}


@router.delete("/subcategories/{subcategory_id}")
def delete_subcategory(subcategory_id: int, db: Session = Depends(get_db)):
    sub = db.query(Subcategory).filter(Subcategory.id == subcategory_id).first()
    if not sub:
        raise HTTPException(status_code=404, detail="Subcategory not found")
    removed = crud_catalog.delete_subcategory(db, sub)
    return {"message": "Subcategory deleted", "removed": removed}


@router.delete("/subsubcategories/{subsubcategory_id}")
def delete_subsubcategory(subsubcategory_id: int, db: Session = Depends(get_db)):
    subsub = db.query(Subsubcategory).filter(Subsubcategory.id == subsubcategory_id).first()
    if not subsub:
        raise HTTPException(status_code=404, detail="Subsubcategory not found")
    db.delete(subsub)
    db.commit()
    return {"message": "Subsubcategory deleted", "removed": 1}
