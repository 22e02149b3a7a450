"""
Table Occupancy Service.

Owns Table.status. The order service calls ``occupy``/``free`` inside its
own transactions; these helpers never commit.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.config.constants import OrderStatus, TableStatus, validate_table_status
from shared.config.logging import tables_logger as logger
from shared.infrastructure.db import transactional
from shared.utils.exceptions import TableNotFoundError, ValidationError
from rest_api.models import Order, Table


class TableService:
    """Domain service for table occupancy."""

    def __init__(self, db: Session):
        self._db = db

    def get_table(self, table_id: int, lock: bool = False) -> Table:
        """
        Load a table or raise TableNotFoundError.

        With ``lock`` the row is held FOR UPDATE until the surrounding
        transaction ends, serializing concurrent order placement on it.
        """
        stmt = select(Table).where(Table.id == table_id)
        if lock:
            stmt = stmt.with_for_update()
        table = self._db.scalar(stmt)
        if not table:
            raise TableNotFoundError(table_id)
        return table

    def active_order_for(self, table_id: int) -> Order | None:
        return self._db.scalar(
            select(Order)
            .where(Order.table_id == table_id, Order.status.in_(OrderStatus.ACTIVE))
            .order_by(Order.order_time.desc())
            .limit(1)
        )

    def occupy(self, table: Table, order_id: int | None = None) -> None:
        table.status = TableStatus.OCCUPIED
        logger.info("Table occupied", table_id=table.id, order_id=order_id)

    def free(self, table: Table, order_id: int | None = None) -> None:
        table.status = TableStatus.AVAILABLE
        logger.info("Table freed", table_id=table.id, order_id=order_id)

    def update_status(self, table_id: int, status: str) -> Table:
        """Set a table's status directly (manual override from the floor)."""
        if not validate_table_status(status):
            raise ValidationError(
                f"Invalid table status '{status}'. Must be one of: {', '.join(TableStatus.ALL)}",
                field="status",
                value=status,
            )

        with transactional(self._db):
            table = self.get_table(table_id, lock=True)
            previous = table.status
            table.status = status

        logger.info("Table status updated", table_id=table_id, old_status=previous, new_status=status)
        return table
