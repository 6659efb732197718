# app/routers/__init__.py

# Exposes the modules so "from app.routers import orders" works
from . import categories
from . import products
from . import inventory
from . import movements
from . import orders
from . import sales
from . import customers
from . import credits
from . import expenses
from . import suppliers
