"""
Inventory Models: InventoryItem, Recipe.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.utils.validators import utcnow

from .base import Base, Money, Quantity, TimestampMixin, ZERO

if TYPE_CHECKING:
    from .menu import MenuItem


class InventoryItem(TimestampMixin, Base):
    """
    Raw ingredient stock (flour, tomatoes, beer kegs...).
    ``quantity`` never goes below zero: deductions clamp at 0.
    """

    __tablename__ = "inventory"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    quantity: Mapped[Decimal] = mapped_column(Quantity, default=ZERO, nullable=False)
    unit: Mapped[str] = mapped_column(Text, nullable=False)  # kg, l, units
    unit_cost: Mapped[Decimal] = mapped_column(Money, default=ZERO, nullable=False)
    supplier: Mapped[Optional[str]] = mapped_column(Text)
    min_stock_level: Mapped[Decimal] = mapped_column(Quantity, default=ZERO, nullable=False)
    reorder_quantity: Mapped[Decimal] = mapped_column(Quantity, default=ZERO, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="chk_inventory_quantity_non_negative"),
    )

    # Relationships
    recipes: Mapped[list["Recipe"]] = relationship(back_populates="inventory_item")

    def __repr__(self) -> str:
        return f"<InventoryItem(id={self.id}, name='{self.item_name}', quantity={self.quantity} {self.unit})>"


class Recipe(TimestampMixin, Base):
    """
    How much of one inventory item a single unit of a menu item consumes.
    A menu item's full recipe is the set of its Recipe rows.
    """

    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    menu_item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Deleting an ingredient that recipes still use is refused
    inventory_item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("inventory.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    quantity_required: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    unit: Mapped[str] = mapped_column(Text, nullable=False, default="units")

    __table_args__ = (
        UniqueConstraint("menu_item_id", "inventory_item_id", name="uq_recipe_menu_inventory"),
        CheckConstraint("quantity_required > 0", name="chk_recipe_quantity_positive"),
    )

    # Relationships
    menu_item: Mapped["MenuItem"] = relationship(back_populates="recipes")
    inventory_item: Mapped["InventoryItem"] = relationship(back_populates="recipes")
