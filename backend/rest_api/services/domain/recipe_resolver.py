"""
Recipe Resolver.

Maps a menu item to the ingredients one unit of it consumes. Both the
inventory ledger and the availability checks walk recipes through here
instead of following ORM relationships.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, NamedTuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Recipe


class RecipeRequirement(NamedTuple):
    """Quantity of one inventory item needed per unit of a menu item."""

    inventory_item_id: int
    quantity_per_unit: Decimal


class RecipeResolver:
    def __init__(self, db: Session):
        self._db = db

    def resolve(self, menu_item_id: int) -> list[RecipeRequirement]:
        """Ingredients for one unit of ``menu_item_id`` (empty when it has no recipe)."""
        return self.resolve_many([menu_item_id]).get(menu_item_id, [])

    def resolve_many(self, menu_item_ids: Iterable[int]) -> dict[int, list[RecipeRequirement]]:
        """Batch variant of ``resolve``: one query for a whole order."""
        ids = set(menu_item_ids)
        if not ids:
            return {}

        rows = self._db.execute(
            select(Recipe.menu_item_id, Recipe.inventory_item_id, Recipe.quantity_required)
            .where(Recipe.menu_item_id.in_(ids))
            .order_by(Recipe.menu_item_id, Recipe.inventory_item_id)
        ).all()

        resolved: dict[int, list[RecipeRequirement]] = defaultdict(list)
        for menu_item_id, inventory_item_id, quantity_required in rows:
            resolved[menu_item_id].append(
                RecipeRequirement(inventory_item_id, Decimal(quantity_required))
            )
        return dict(resolved)
