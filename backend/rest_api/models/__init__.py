"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class, TimestampMixin, Money/Quantity column types
- menu: MenuItem
- table: Table, Reservation
- order: Order, OrderItem
- inventory: InventoryItem, Recipe
"""

# Base classes
from .base import Base, TimestampMixin, Money, Quantity, ZERO

# Menu
from .menu import MenuItem

# Tables and reservations
from .table import Table, Reservation

# Orders
from .order import Order, OrderItem

# Inventory and recipes
from .inventory import InventoryItem, Recipe

__all__ = [
    "Base",
    "TimestampMixin",
    "Money",
    "Quantity",
    "ZERO",
    "MenuItem",
    "Table",
    "Reservation",
    "Order",
    "OrderItem",
    "InventoryItem",
    "Recipe",
]
