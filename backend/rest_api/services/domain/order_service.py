"""
Order Lifecycle Domain Service.

Every mutation runs inside one explicit transaction covering the order,
its lines, the table status and the inventory ledger:

    validate -> compute total -> write order -> write lines -> flip table -> move stock

Any failure rolls the whole unit back; a partial order is never visible.

Status machine (order level):
    pending     -> in_progress, cancelled
    in_progress -> completed, cancelled
    completed, cancelled: terminal (the table is freed on entry)

Item statuses (pending, preparing, ready, served) accept any value from any
prior value.
"""

from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.config.constants import (
    OrderItemStatus,
    OrderStatus,
    TableStatus,
    validate_order_item_status,
    validate_order_status,
    validate_order_transition,
)
from shared.config.logging import orders_logger as logger
from shared.infrastructure.db import transactional
from shared.utils.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidStateError,
    InvalidTransitionError,
    MenuItemNotFoundError,
    OrderItemNotFoundError,
    OrderNotFoundError,
    TableOccupiedError,
    ValidationError,
)
from shared.utils.schemas import LowStockAlertOutput, OrderItemInput
from shared.utils.validators import sanitize_text, utcnow, validate_quantity
from rest_api.models import MenuItem, Order, OrderItem, ZERO
from rest_api.services.domain.inventory_service import InventoryService, order_lines
from rest_api.services.domain.table_service import TableService

ACTIVE_ORDER_INDEX = "uq_orders_active_table"


def _lines_total(items: Iterable[OrderItem]) -> Decimal:
    return sum((item.price * item.quantity for item in items), ZERO)


def _is_active_order_conflict(exc: IntegrityError) -> bool:
    """True when the violated constraint is the one-active-order-per-table index."""
    message = str(exc.orig)
    # PostgreSQL names the index, SQLite names the column
    return ACTIVE_ORDER_INDEX in message or "orders.table_id" in message


class OrderService:
    """
    Domain service for the order lifecycle.

    Coordinates the table occupancy and inventory services; both run on the
    same Session so their writes share this service's transactions.
    """

    def __init__(self, db: Session):
        self._db = db
        self._tables = TableService(db)
        self._inventory = InventoryService(db)

    # =========================================================================
    # Creation
    # =========================================================================

    def create_complete_order(
        self,
        table_id: int,
        order_items: Iterable[OrderItemInput],
        customer_notes: str | None = None,
    ) -> tuple[Order, list[LowStockAlertOutput]]:
        """
        Place an order with all its lines at a table.

        Prices are snapshotted from the menu, the table becomes occupied and
        stock is consumed, all in one transaction.

        Returns (order, low stock alerts raised by the deduction).

        Raises:
            ValidationError: No lines, or a quantity outside the allowed range
            TableNotFoundError: If the table does not exist
            TableOccupiedError: If the table already holds an active order
            MenuItemNotFoundError: If any line references a missing menu item
        """
        lines = self._validate_lines(order_items)
        notes = self._clean(customer_notes, "customer_notes")

        try:
            with transactional(self._db):
                table = self._tables.get_table(table_id, lock=True)
                if table.status == TableStatus.OCCUPIED or self._tables.active_order_for(table.id):
                    raise TableOccupiedError(table_id)

                items = self._build_items(lines)
                order = Order(
                    table_id=table.id,
                    status=OrderStatus.PENDING,
                    total_amount=_lines_total(items),
                    order_time=utcnow(),
                    customer_notes=notes,
                    inventory_deducted=False,
                    items=items,
                )
                self._db.add(order)
                self._db.flush()

                self._tables.occupy(table, order.id)
                _, alerts = self._inventory.deduct_lines(order_lines(order))
                order.inventory_deducted = True
        except IntegrityError as exc:
            if _is_active_order_conflict(exc):
                raise TableOccupiedError(table_id) from exc
            raise DatabaseError("order creation", table_id=table_id) from exc

        logger.info(
            "Order created",
            order_id=order.id,
            table_id=table_id,
            total=str(order.total_amount),
            items=len(lines),
        )
        return order, alerts

    # =========================================================================
    # Edits
    # =========================================================================

    def update_order(
        self,
        order_id: int,
        table_id: int | None = None,
        customer_notes: str | None = None,
        preparation_notes: str | None = None,
    ) -> Order:
        """
        Edit notes and/or move the order to another table.

        None leaves a field untouched. Moving frees the old table and occupies
        the new one; the new table's availability is not checked beyond the
        one-active-order-per-table constraint.
        """
        customer_notes = self._clean(customer_notes, "customer_notes")
        preparation_notes = self._clean(preparation_notes, "preparation_notes")

        try:
            with transactional(self._db):
                order = self._get_order(order_id, lock=True)
                self._ensure_open(order)

                if customer_notes is not None:
                    order.customer_notes = customer_notes
                if preparation_notes is not None:
                    order.preparation_notes = preparation_notes

                if table_id is not None and table_id != order.table_id:
                    new_table = self._tables.get_table(table_id, lock=True)
                    old_table = self._tables.get_table(order.table_id, lock=True)
                    self._tables.free(old_table, order.id)
                    self._tables.occupy(new_table, order.id)
                    order.table_id = new_table.id
                    self._db.flush()
        except IntegrityError as exc:
            if _is_active_order_conflict(exc):
                raise TableOccupiedError(table_id) from exc
            raise DatabaseError("order update", order_id=order_id) from exc

        logger.info("Order updated", order_id=order_id, table_id=table_id)
        return order

    def add_items(
        self, order_id: int, order_items: Iterable[OrderItemInput]
    ) -> tuple[Order, list[LowStockAlertOutput]]:
        """
        Append lines to an open order and grow its total by their amount.

        Stock for the new lines is consumed when the order's stock was.
        """
        lines = self._validate_lines(order_items)

        with transactional(self._db):
            order = self._get_order(order_id, lock=True)
            self._ensure_open(order)

            items = self._build_items(lines)
            order.items.extend(items)
            order.total_amount = order.total_amount + _lines_total(items)

            alerts: list[LowStockAlertOutput] = []
            if order.inventory_deducted:
                _, alerts = self._inventory.deduct_lines(
                    (item.menu_item_id, item.quantity) for item in items
                )

        logger.info("Items added to order", order_id=order_id, items=len(lines))
        return order, alerts

    def remove_item(self, order_id: int, item_id: int) -> Order:
        """
        Delete one line of an open order and take its amount off the total.

        Raises:
            OrderItemNotFoundError: If the line does not exist or belongs to another order
        """
        with transactional(self._db):
            order = self._get_order(order_id, lock=True)
            self._ensure_open(order)

            item = self._db.get(OrderItem, item_id)
            if not item or item.order_id != order.id:
                raise OrderItemNotFoundError(item_id, order_id=order_id)

            order.total_amount = max(ZERO, order.total_amount - item.line_total)
            if order.inventory_deducted:
                self._inventory.restore_lines([(item.menu_item_id, item.quantity)])
            order.items.remove(item)

        logger.info("Item removed from order", order_id=order_id, item_id=item_id)
        return order

    # =========================================================================
    # Status changes
    # =========================================================================

    def update_order_status(self, order_id: int, new_status: str) -> Order:
        """
        Move an order along the status machine.

        Entering a terminal status frees the table; entering ``cancelled``
        also gives back consumed stock.

        Raises:
            ValidationError: Unknown status
            InvalidTransitionError: Transition not allowed from the current status
        """
        if not validate_order_status(new_status):
            raise ValidationError(
                f"Invalid order status '{new_status}'. Must be one of: {', '.join(OrderStatus.ALL)}",
                field="status",
                value=new_status,
            )

        with transactional(self._db):
            order = self._get_order(order_id, lock=True)
            old_status = order.status
            if not validate_order_transition(old_status, new_status):
                raise InvalidTransitionError("order", old_status, new_status, order_id=order_id)

            order.status = new_status
            if new_status == OrderStatus.CANCELLED:
                self._release_stock(order)
            if new_status in OrderStatus.TERMINAL:
                self._free_table(order)

        logger.info(
            "Order status changed", order_id=order_id, old_status=old_status, new_status=new_status
        )
        return order

    def cancel_order(self, order_id: int, cancellation_reason: str | None = None) -> Order:
        """
        Cancel an order, record why, free its table and give back its stock.

        Raises:
            ConflictError: If the order is already completed or cancelled
        """
        reason = self._clean(cancellation_reason, "cancellation_reason")

        with transactional(self._db):
            order = self._get_order(order_id, lock=True)
            if order.status == OrderStatus.COMPLETED:
                raise ConflictError("Cannot cancel a completed order", order_id=order_id)
            if order.status == OrderStatus.CANCELLED:
                raise ConflictError("Order is already cancelled", order_id=order_id)

            order.status = OrderStatus.CANCELLED
            order.cancellation_reason = reason
            self._release_stock(order)
            self._free_table(order)

        logger.info("Order cancelled", order_id=order_id, reason=reason)
        return order

    def update_item_status(self, order_id: int, item_id: int, new_status: str) -> OrderItem:
        """Set a line's kitchen status. Any status may follow any other."""
        if not validate_order_item_status(new_status):
            raise ValidationError(
                f"Invalid item status '{new_status}'. Must be one of: {', '.join(OrderItemStatus.ALL)}",
                field="item_status",
                value=new_status,
            )

        with transactional(self._db):
            order = self._get_order(order_id)
            item = self._db.get(OrderItem, item_id)
            if not item or item.order_id != order.id:
                raise OrderItemNotFoundError(item_id, order_id=order_id)
            old_status = item.item_status
            item.item_status = new_status

        logger.info(
            "Order item status changed",
            order_id=order_id,
            item_id=item_id,
            old_status=old_status,
            new_status=new_status,
        )
        return item

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get_order(self, order_id: int, lock: bool = False) -> Order:
        stmt = select(Order).where(Order.id == order_id)
        if lock:
            stmt = stmt.with_for_update()
        order = self._db.scalar(stmt)
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    def _ensure_open(order: Order) -> None:
        if order.status in OrderStatus.TERMINAL:
            raise InvalidStateError("Order", order.status, OrderStatus.ACTIVE, order_id=order.id)

    def _free_table(self, order: Order) -> None:
        table = self._tables.get_table(order.table_id, lock=True)
        self._tables.free(table, order.id)

    def _release_stock(self, order: Order) -> None:
        if not order.inventory_deducted:
            return
        self._inventory.restore_lines(order_lines(order))
        order.inventory_deducted = False

    def _validate_lines(self, order_items: Iterable[OrderItemInput]) -> list[OrderItemInput]:
        lines = list(order_items or [])
        if not lines:
            raise ValidationError("Order must contain at least one item", field="order_items")

        for line in lines:
            try:
                validate_quantity(line.quantity)
            except ValueError as exc:
                raise ValidationError(str(exc), field="quantity", menu_item_id=line.menu_item_id)
        return lines

    def _build_items(self, lines: list[OrderItemInput]) -> list[OrderItem]:
        """Create order lines priced from the current menu."""
        menu_ids = {line.menu_item_id for line in lines}
        menu = {
            m.id: m
            for m in self._db.scalars(select(MenuItem).where(MenuItem.id.in_(list(menu_ids))))
        }

        items = []
        for line in lines:
            menu_item = menu.get(line.menu_item_id)
            if not menu_item:
                raise MenuItemNotFoundError(line.menu_item_id)
            items.append(
                OrderItem(
                    menu_item_id=menu_item.id,
                    menu_item=menu_item,
                    quantity=line.quantity,
                    price=menu_item.price,
                    item_status=OrderItemStatus.PENDING,
                    special_instructions=self._clean(
                        line.special_instructions, "special_instructions"
                    ),
                )
            )
        return items

    @staticmethod
    def _clean(value: str | None, field: str) -> str | None:
        try:
            return sanitize_text(value)
        except ValueError as exc:
            raise ValidationError(str(exc), field=field)
