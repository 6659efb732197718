from typing import Optional, List
from pydantic import BaseModel, field_validator
from decimal import Decimal
from datetime import datetime


# --- Category tree ---
class CategoryCreate(BaseModel):
    name: str


class SubsubcategoryRead(BaseModel):
    id: int
    subcategory_id: int
    name: str
    slug: Optional[str] = None

    class Config:
        from_attributes = True


class SubcategoryRead(BaseModel):
    id: int
    category_id: int
    name: str
    slug: Optional[str] = None
    subsubcategories: List[SubsubcategoryRead] = []

    class Config:
        from_attributes = True


class CategoryRead(BaseModel):
    id: int
    name: str
    slug: Optional[str] = None
    subcategories: List[SubcategoryRead] = []

    class Config:
        from_attributes = True


# --- Products ---
class ProductBase(BaseModel):
    name: str
    brand: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    subsubcategory_id: Optional[int] = None
    is_active: bool = True


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    brand: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    subsubcategory_id: Optional[int] = None
    is_active: Optional[bool] = None


class ProductRead(ProductBase):
    id: int
    created_at: Optional[datetime] = None
    variants_count: int = 0

    class Config:
        from_attributes = True


# --- Variants ---
def _check_variant_type(v):
    v = (v or "").strip().lower()
    if v not in ("unit", "weight"):
        raise ValueError("variant_type must be 'unit' or 'weight'")
    return v


class VariantBase(BaseModel):
    name: str
    variant_type: str = "unit"
    pack_size_g: Optional[int] = None
    sku: Optional[str] = None
    sell_price: Optional[Decimal] = None
    is_active: bool = True

    @field_validator("variant_type")
    @classmethod
    def check_variant_type(cls, v):
        return _check_variant_type(v)


class VariantCreate(VariantBase):
    pass


class VariantUpdate(BaseModel):
    name: Optional[str] = None
    variant_type: Optional[str] = None
    pack_size_g: Optional[int] = None
    sku: Optional[str] = None
    sell_price: Optional[Decimal] = None
    is_active: Optional[bool] = None

    @field_validator("variant_type")
    @classmethod
    def check_variant_type(cls, v):
        if v is None:
            return v
        return _check_variant_type(v)


class VariantImageRead(BaseModel):
    id: int
    variant_id: int
    url: str
    path: str
    sort_order: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VariantRead(VariantBase):
    id: int
    product_id: int
    product_name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
