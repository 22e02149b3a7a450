"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderItemStatus, OrderStatus
from shared.utils.validators import utcnow

from .base import Base, Money, TimestampMixin, ZERO

if TYPE_CHECKING:
    from .menu import MenuItem
    from .table import Table

_ACTIVE_ORDER = text("status IN ('pending', 'in_progress')")


class Order(TimestampMixin, Base):
    """
    An order placed at a table.

    Orders are never deleted: cancellation is a terminal status.
    ``total_amount`` is maintained by the order service and always equals the
    sum of price * quantity over the current items.
    ``inventory_deducted`` records whether stock was consumed for this order,
    so cancellation restores it exactly once.
    """

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    table_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tables.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        Text, default=OrderStatus.PENDING, nullable=False, index=True
    )
    total_amount: Mapped[Decimal] = mapped_column(Money, default=ZERO, nullable=False)
    order_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    customer_notes: Mapped[Optional[str]] = mapped_column(Text)
    preparation_notes: Mapped[Optional[str]] = mapped_column(Text)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text)
    inventory_deducted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="chk_order_total_non_negative"),
        # At most one active order per table
        Index(
            "uq_orders_active_table",
            "table_id",
            unique=True,
            sqlite_where=_ACTIVE_ORDER,
            postgresql_where=_ACTIVE_ORDER,
        ),
        Index("ix_orders_status_time", "status", "order_time"),
    )

    # Relationships
    table: Mapped["Table"] = relationship(back_populates="orders")
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    @property
    def is_active(self) -> bool:
        return self.status in OrderStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, table_id={self.table_id}, status='{self.status}', total={self.total_amount})>"


class OrderItem(TimestampMixin, Base):
    """
    A single line within an order.
    Stores the menu price at the time of order; later price edits do not touch it.
    """

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    menu_item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("menu_items.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    item_status: Mapped[str] = mapped_column(
        Text, default=OrderItemStatus.PENDING, nullable=False, index=True
    )
    special_instructions: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_quantity_positive"),
        CheckConstraint("price >= 0", name="chk_order_item_price_non_negative"),
    )

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")
    menu_item: Mapped["MenuItem"] = relationship()

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
