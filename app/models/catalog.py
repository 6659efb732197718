# app/models/catalog.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric, DateTime
from sqlalchemy.orm import relationship

from app.database import Base, utcnow


# --- Three-level category tree ---
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, index=True)
    created_at = Column(DateTime, default=utcnow)

    subcategories = relationship("Subcategory", back_populates="category")


class Subcategory(Base):
    __tablename__ = "subcategories"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    name = Column(String, nullable=False)
    slug = Column(String, index=True)
    created_at = Column(DateTime, default=utcnow)

    category = relationship("Category", back_populates="subcategories")
    subsubcategories = relationship("Subsubcategory", back_populates="subcategory")


class Subsubcategory(Base):
    __tablename__ = "subsubcategories"

    id = Column(Integer, primary_key=True, index=True)
    subcategory_id = Column(Integer, ForeignKey("subcategories.id"), nullable=False)
    name = Column(String, nullable=False)
    slug = Column(String, index=True)
    created_at = Column(DateTime, default=utcnow)

    subcategory = relationship("Subcategory", back_populates="subsubcategories")


# --- PARENT PRODUCT ---
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    brand = Column(String, nullable=True)
    description = Column(String, nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    subcategory_id = Column(Integer, ForeignKey("subcategories.id"), nullable=True)
    subsubcategory_id = Column(Integer, ForeignKey("subsubcategories.id"), nullable=True)

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    category = relationship("Category")
    variants = relationship("ProductVariant", back_populates="product", cascade="all, delete-orphan")


# --- VARIANTS (sellable pack sizes) ---
class ProductVariant(Base):
    __tablename__ = "product_variants"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    name = Column(String, nullable=False)          # e.g. "1kg bag", "500ml"
    variant_type = Column(String, default="unit")  # "unit" | "weight"
    pack_size_g = Column(Integer, nullable=True)
    sku = Column(String, index=True, nullable=True)
    sell_price = Column(Numeric(12, 2), nullable=True)  # per unit, or per kg for weight variants

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    product = relationship("Product", back_populates="variants")
    images = relationship("ProductVariantImage", back_populates="variant", cascade="all, delete-orphan")


class ProductVariantImage(Base):
    __tablename__ = "product_variant_images"

    id = Column(Integer, primary_key=True, index=True)
    variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=False)

    url = Column(String, nullable=False)   # public URL
    path = Column(String, nullable=False)  # object path inside the bucket
    sort_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=utcnow)

    variant = relationship("ProductVariant", back_populates="images")
