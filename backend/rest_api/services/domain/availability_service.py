"""
Table Availability Query Service.

Read-only answers to "is table X free at time T for D minutes?" and
"which tables fit a party of N?".

A table is free for [T, T + D) when:
- its status is ``available``,
- it has no active order (pending or in_progress),
- no pending/confirmed reservation interval [R, R + D) overlaps [T, T + D).
"""

from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shared.config.constants import OrderStatus, ReservationStatus, TableStatus
from shared.config.settings import settings
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import (
    AllTablesStatusOutput,
    ImmediateOrderOutput,
    ReservationBriefOutput,
    TableAvailabilityOutput,
    TableOutput,
    TableStatusOutput,
    TableStatusRowOutput,
    TablesSummaryOutput,
)
from shared.utils.validators import to_utc, utcnow
from rest_api.models import Order, Reservation, Table
from rest_api.services.domain.table_service import TableService


def build_table_output(table: Table) -> TableOutput:
    return TableOutput(
        id=table.id,
        table_number=table.table_number,
        capacity=table.capacity,
        status=table.status,
    )


def build_reservation_output(reservation: Reservation) -> ReservationBriefOutput:
    return ReservationBriefOutput(
        id=reservation.id,
        customer_name=reservation.customer_name,
        reservation_time=to_utc(reservation.reservation_time),
        number_of_guests=reservation.number_of_guests,
        status=reservation.status,
    )


class AvailabilityService:
    def __init__(self, db: Session):
        self._db = db
        self._tables = TableService(db)

    def resolve_window(
        self, at: datetime | None, duration_minutes: int | None
    ) -> tuple[datetime, int]:
        start = to_utc(at) if at is not None else utcnow()
        duration = duration_minutes if duration_minutes is not None else settings.default_reservation_minutes
        if duration < 1:
            raise ValidationError("Duration must be at least 1 minute", field="duration_minutes")
        return start, duration

    def _conflicting_reservations(
        self, table_id: int, start: datetime, duration_minutes: int
    ) -> list[Reservation]:
        """Blocking reservations whose own window overlaps [start, start + duration)."""
        span = timedelta(minutes=duration_minutes)
        return list(
            self._db.scalars(
                select(Reservation)
                .where(
                    Reservation.table_id == table_id,
                    Reservation.status.in_(ReservationStatus.BLOCKING),
                    Reservation.reservation_time > start - span,
                    Reservation.reservation_time < start + span,
                )
                .order_by(Reservation.reservation_time)
            ).all()
        )

    def check_table_availability(
        self,
        table_id: int,
        at: datetime | None = None,
        duration_minutes: int | None = None,
    ) -> TableAvailabilityOutput:
        """
        Is the table free for the requested window?

        Checks run cheapest first and stop at the first reason found.

        Raises:
            TableNotFoundError: If the table does not exist
        """
        start, duration = self.resolve_window(at, duration_minutes)
        table = self._tables.get_table(table_id)

        result = TableAvailabilityOutput(
            table_id=table.id,
            table_number=table.table_number,
            available=False,
            requested_time=start,
            duration_minutes=duration,
        )

        if table.status != TableStatus.AVAILABLE:
            result.reason = f"Table is currently {table.status}"
            return result

        conflicts = self._conflicting_reservations(table.id, start, duration)
        if conflicts:
            result.reason = "Table is reserved for that time"
            result.conflicting_reservations = [build_reservation_output(r) for r in conflicts]
            return result

        active_order = self._tables.active_order_for(table.id)
        if active_order:
            result.reason = "Table has active orders"
            result.active_order_id = active_order.id
            return result

        result.available = True
        return result

    def can_accept_immediate_order(self, table_id: int) -> ImmediateOrderOutput:
        """Walk-in check: current status and active orders only, reservations ignored."""
        table = self._tables.get_table(table_id)

        if table.status != TableStatus.AVAILABLE:
            return ImmediateOrderOutput(
                table_id=table_id, can_accept=False, reason=f"Table is {table.status}"
            )

        active_order = self._tables.active_order_for(table.id)
        if active_order:
            return ImmediateOrderOutput(
                table_id=table_id,
                can_accept=False,
                reason="Table has active orders",
                active_order_id=active_order.id,
            )

        return ImmediateOrderOutput(table_id=table_id, can_accept=True)

    def find_available_tables(
        self,
        party_size: int,
        at: datetime | None = None,
        duration_minutes: int | None = None,
    ) -> list[Table]:
        """
        Tables that seat ``party_size`` and are free for the window, smallest first.

        Each candidate is checked on its own for reservations and active orders.
        """
        if party_size is None or party_size < 1:
            raise ValidationError("party_size must be a positive integer", field="party_size")
        start, duration = self.resolve_window(at, duration_minutes)

        candidates = self._db.scalars(
            select(Table)
            .where(Table.capacity >= party_size, Table.status == TableStatus.AVAILABLE)
            .order_by(Table.capacity, Table.table_number)
        ).all()

        return [
            table
            for table in candidates
            if not self._conflicting_reservations(table.id, start, duration)
            and not self._tables.active_order_for(table.id)
        ]

    def get_table_status(self, table_id: int) -> TableStatusOutput:
        """Current status, active order and upcoming reservations of one table."""
        table = self._tables.get_table(table_id)
        active_order = self._tables.active_order_for(table.id)

        upcoming = self._db.scalars(
            select(Reservation)
            .where(
                Reservation.table_id == table.id,
                Reservation.status.in_(ReservationStatus.BLOCKING),
                Reservation.reservation_time >= utcnow(),
            )
            .order_by(Reservation.reservation_time)
        ).all()

        return TableStatusOutput(
            table=build_table_output(table),
            has_active_order=active_order is not None,
            active_order_id=active_order.id if active_order else None,
            is_available=table.status == TableStatus.AVAILABLE and active_order is None,
            upcoming_reservations=[build_reservation_output(r) for r in upcoming],
        )

    def get_all_tables_status(self) -> AllTablesStatusOutput:
        """Every table with its derived availability, plus floor totals."""
        active_orders = dict(
            self._db.execute(
                select(Order.table_id, func.min(Order.id))
                .where(Order.status.in_(OrderStatus.ACTIVE))
                .group_by(Order.table_id)
            ).all()
        )
        tables = self._db.scalars(select(Table).order_by(Table.table_number)).all()

        rows = []
        for table in tables:
            active_order_id = active_orders.get(table.id)
            rows.append(
                TableStatusRowOutput(
                    id=table.id,
                    table_number=table.table_number,
                    capacity=table.capacity,
                    status=table.status,
                    has_active_order=active_order_id is not None,
                    active_order_id=active_order_id,
                    is_available=table.status == TableStatus.AVAILABLE and active_order_id is None,
                )
            )

        summary = TablesSummaryOutput(
            total=len(rows),
            available=sum(1 for r in rows if r.status == TableStatus.AVAILABLE),
            occupied=sum(1 for r in rows if r.status == TableStatus.OCCUPIED),
            reserved=sum(1 for r in rows if r.status == TableStatus.RESERVED),
            with_active_orders=sum(1 for r in rows if r.has_active_order),
        )
        return AllTablesStatusOutput(tables=rows, summary=summary)
