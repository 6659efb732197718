# app/models/__init__.py

# 1. Declarative base
from app.database import Base

# 2. Catalog (category tree, products, variants)
from .catalog import (
    Category,
    Subcategory,
    Subsubcategory,
    Product,
    ProductVariant,
    ProductVariantImage
)

# 3. Stock
from .inventory import Inventory, InventoryMovement, MovementType

# 4. Orders and payments
from .orders import Order, OrderItem, Payment, OrderStatus, PaymentStatus

# 5. Customers and credits
from .crm import Customer, Credit

# 6. Back office
from .expenses import Expense
from .suppliers import Supplier
