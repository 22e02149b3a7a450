"""
Seed data for development and demos.
Creates a small dining room, a menu, ingredient stock and the recipes
linking them.
"""

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import InventoryItem, MenuItem, Recipe, Table
from shared.config.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Demo data
# =============================================================================

# (table_number, capacity)
DEMO_TABLES = [(1, 2), (2, 2), (3, 4), (4, 4), (5, 6), (6, 8)]

# name, category, price, track_inventory, current_stock
DEMO_MENU = [
    ("Bruschetta", "appetizer", "6.50", False, 0),
    ("Margherita Pizza", "main", "12.00", False, 0),
    ("Spaghetti Pomodoro", "main", "11.50", False, 0),
    ("Tiramisu", "dessert", "5.00", True, 20),
    ("Draft Beer", "beverage", "3.50", True, 60),
]

# item_name, category, quantity, unit, unit_cost, supplier, min_stock_level, reorder_quantity
DEMO_INVENTORY = [
    ("Flour", "dry goods", "25", "kg", "0.90", "Molino Rossi", "10", "25"),
    ("Tomatoes", "produce", "15", "kg", "2.10", "Green Farm", "8", "20"),
    ("Mozzarella", "dairy", "8", "kg", "7.50", "Latteria Sud", "5", "10"),
    ("Spaghetti", "dry goods", "12", "kg", "1.60", "Molino Rossi", "6", "15"),
    ("Bread", "bakery", "30", "units", "0.40", "Forno Centrale", "15", "40"),
    ("Basil", "produce", "2", "kg", "12.00", "Green Farm", "1", "2"),
]

# menu item name -> [(inventory item name, quantity per unit)]
DEMO_RECIPES = {
    "Bruschetta": [("Bread", "2"), ("Tomatoes", "0.150"), ("Basil", "0.010")],
    "Margherita Pizza": [("Flour", "0.250"), ("Tomatoes", "0.200"), ("Mozzarella", "0.150"), ("Basil", "0.005")],
    "Spaghetti Pomodoro": [("Spaghetti", "0.120"), ("Tomatoes", "0.250"), ("Basil", "0.005")],
}


def seed(db: Session) -> bool:
    """
    Seed the database with demo data.
    Idempotent: only inserts into an empty database.

    Returns True when data was inserted.
    """
    if db.scalar(select(Table.id).limit(1)):
        logger.info("Database already seeded, skipping")
        return False

    logger.info("Seeding database")

    for number, capacity in DEMO_TABLES:
        db.add(Table(table_number=number, capacity=capacity))

    menu: dict[str, MenuItem] = {}
    for name, category, price, track, stock in DEMO_MENU:
        menu[name] = MenuItem(
            name=name,
            category=category,
            price=Decimal(price),
            track_inventory=track,
            current_stock=stock,
            is_available=True,
        )
        db.add(menu[name])

    inventory: dict[str, InventoryItem] = {}
    for name, category, qty, unit, cost, supplier, min_level, reorder in DEMO_INVENTORY:
        inventory[name] = InventoryItem(
            item_name=name,
            category=category,
            quantity=Decimal(qty),
            unit=unit,
            unit_cost=Decimal(cost),
            supplier=supplier,
            min_stock_level=Decimal(min_level),
            reorder_quantity=Decimal(reorder),
        )
        db.add(inventory[name])
    db.flush()

    for dish, ingredients in DEMO_RECIPES.items():
        for ingredient, per_unit in ingredients:
            db.add(
                Recipe(
                    menu_item_id=menu[dish].id,
                    inventory_item_id=inventory[ingredient].id,
                    quantity_required=Decimal(per_unit),
                    unit=inventory[ingredient].unit,
                )
            )

    db.commit()
    logger.info(
        "Database seeded",
        tables=len(DEMO_TABLES),
        menu_items=len(DEMO_MENU),
        inventory_items=len(DEMO_INVENTORY),
    )
    return True
