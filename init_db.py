from decimal import Decimal

from app.database import SessionLocal, engine
# Everything comes through app.models so each model is registered once
from app.models import (
    Base, Category, Subcategory, Product, ProductVariant, Inventory, Customer, Supplier
)
from app.crud.catalog import slugify


def init_db():
    print("--- Creating tables ---")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    print("--- Seeding ---")

    # 1. CATEGORIES
    tree = {
        "Grains": ["Rice", "Flour"],
        "Drinks": ["Soft drinks", "Water"],
    }
    for cat_name, subs in tree.items():
        cat = db.query(Category).filter(Category.name == cat_name).first()
        if not cat:
            cat = Category(name=cat_name, slug=slugify(cat_name))
            db.add(cat)
            db.flush()
            for sub_name in subs:
                db.add(Subcategory(category_id=cat.id, name=sub_name, slug=slugify(sub_name)))
    db.commit()
    print("✅ Categories created.")

    # 2. PRODUCTS, VARIANTS AND STOCK
    # (product, brand, variant, type, price, stock, reorder, avg cost)
    products_list = [
        ("Rice", "Pearl", "Loose", "weight", "2.50", 25000, 5000, "0.0015"),
        ("Sugar", None, "Loose", "weight", "1.80", 20000, 4000, "0.0011"),
        ("Soda", "Coca-Cola", "Can 330ml", "unit", "1.00", 48, 12, "0.45"),
        ("Water", None, "Bottle 1L", "unit", "0.60", 60, 24, "0.20"),
    ]

    count = 0
    for name, brand, v_name, v_type, price, qty, reorder, cost in products_list:
        existing = (
            db.query(ProductVariant)
            .join(Product)
            .filter(Product.name == name, ProductVariant.name == v_name)
            .first()
        )
        if existing:
            continue

        prod = Product(name=name, brand=brand)
        db.add(prod)
        db.flush()

        var = ProductVariant(product_id=prod.id, name=v_name, variant_type=v_type, sell_price=Decimal(price))
        db.add(var)
        db.flush()

        if v_type == "weight":
            stock = Inventory(variant_id=var.id, qty_g=qty, qty_units=0,
                              reorder_level_g=reorder, reorder_level_units=0,
                              avg_cost_per_g=Decimal(cost))
        else:
            stock = Inventory(variant_id=var.id, qty_g=0, qty_units=qty,
                              reorder_level_g=0, reorder_level_units=reorder,
                              avg_cost_per_unit=Decimal(cost))
        db.add(stock)
        count += 1

    db.commit()
    print(f"✅ {count} products created.")

    # 3. CUSTOMERS AND SUPPLIERS
    for name, phone in [("Walk-in", "0000000000"), ("Amina", "0612345678")]:
        if not db.query(Customer).filter(Customer.phone == phone).first():
            db.add(Customer(name=name, phone=phone))
    for name in ("Hass Traders", "Dahab Wholesale"):
        if not db.query(Supplier).filter(Supplier.name == name).first():
            db.add(Supplier(name=name))
    db.commit()
    print("✅ Customers and suppliers created.")
    db.close()


if __name__ == "__main__":
    init_db()
