"""
Table and Reservation Models: Table, Reservation.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import ReservationStatus, TableStatus

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .order import Order


class Table(TimestampMixin, Base):
    """
    Physical table in the dining room.

    ``status`` is the coarse occupancy signal (available, occupied, reserved);
    finer availability also looks at active orders and reservations.
    """

    # "table" is a reserved SQL keyword
    __tablename__ = "tables"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    table_number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        Text, default=TableStatus.AVAILABLE, nullable=False, index=True
    )

    __table_args__ = (
        CheckConstraint("capacity > 0", name="chk_table_capacity_positive"),
        Index("ix_tables_status_capacity", "status", "capacity"),
    )

    # Relationships (weak back-references: orders and reservations outlive status changes)
    orders: Mapped[list["Order"]] = relationship(back_populates="table")
    reservations: Mapped[list["Reservation"]] = relationship(
        back_populates="table", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Table(id={self.id}, number={self.table_number}, status='{self.status}')>"


class Reservation(TimestampMixin, Base):
    """
    A booking for a table at a point in time.
    Pending and confirmed reservations block the table around ``reservation_time``.
    """

    __tablename__ = "reservations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    table_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tables.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_phone: Mapped[str] = mapped_column(Text, nullable=False)
    reservation_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    number_of_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        Text, default=ReservationStatus.PENDING, nullable=False
    )

    __table_args__ = (
        # Conflict search: reservations of one table around a time window
        Index("ix_reservations_table_time", "table_id", "reservation_time"),
    )

    # Relationships
    table: Mapped["Table"] = relationship(back_populates="reservations")
