"""
Menu Models: MenuItem.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, Money, TimestampMixin

if TYPE_CHECKING:
    from .inventory import Recipe


class MenuItem(TimestampMixin, Base):
    """
    A dish or drink that can be ordered.

    When ``track_inventory`` is set the item carries its own unit stock
    (``current_stock``), which is consumed by orders independently of the
    ingredient stock reached through its recipes.
    """

    __tablename__ = "menu_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(Text, index=True)  # appetizer, main, dessert, beverage
    preparation_time: Mapped[Optional[int]] = mapped_column(Integer, default=10)  # minutes
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    track_inventory: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    current_stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    low_stock_threshold: Mapped[int] = mapped_column(Integer, default=10, nullable=False)

    __table_args__ = (
        CheckConstraint("price >= 0", name="chk_menu_item_price_non_negative"),
        CheckConstraint("current_stock >= 0", name="chk_menu_item_stock_non_negative"),
    )

    # Relationships
    recipes: Mapped[list["Recipe"]] = relationship(
        back_populates="menu_item", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<MenuItem(id={self.id}, name='{self.name}', price={self.price})>"
