"""
Order Query Service.

Read-only views over orders: details, filtered lists, kitchen display,
preparation estimates and aggregates. Nothing here writes.
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload, selectinload

from shared.config.constants import (
    CATEGORY_PREP_MINUTES,
    DEFAULT_PREP_MINUTES,
    MAX_PARALLEL_DISHES,
    Limits,
    OrderItemStatus,
    OrderStatus,
    validate_order_status,
)
from shared.utils.exceptions import OrderNotFoundError, ValidationError
from shared.utils.schemas import (
    OrderItemOutput,
    OrderOutput,
    OrderStatisticsOutput,
    PreparationTimeOutput,
    StatusStatisticsOutput,
    TodaysOrdersOutput,
)
from shared.utils.validators import to_utc, utcnow
from rest_api.models import Order, OrderItem, ZERO

CENT = Decimal("0.01")


def build_order_item_output(item: OrderItem) -> OrderItemOutput:
    menu_item = item.menu_item
    return OrderItemOutput(
        id=item.id,
        menu_item_id=item.menu_item_id,
        menu_item_name=menu_item.name if menu_item else None,
        category=menu_item.category if menu_item else None,
        quantity=item.quantity,
        price=item.price,
        line_total=item.line_total,
        item_status=item.item_status,
        special_instructions=item.special_instructions,
    )


def build_order_output(order: Order, items: list[OrderItem] | None = None) -> OrderOutput:
    """
    Build the API view of an order.

    ``items`` narrows the lines shown (kitchen display); by default every
    line of the order is included.
    """
    lines = order.items if items is None else items
    return OrderOutput(
        id=order.id,
        table_id=order.table_id,
        table_number=order.table.table_number if order.table else None,
        status=order.status,
        total_amount=order.total_amount,
        order_time=to_utc(order.order_time),
        customer_notes=order.customer_notes,
        preparation_notes=order.preparation_notes,
        cancellation_reason=order.cancellation_reason,
        inventory_deducted=order.inventory_deducted,
        items=[build_order_item_output(item) for item in lines],
    )


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class OrderQueryService:
    """Read side of the order lifecycle."""

    def __init__(self, db: Session):
        self._db = db

    def _with_details(self):
        return select(Order).options(
            joinedload(Order.table),
            selectinload(Order.items).joinedload(OrderItem.menu_item),
        )

    def get_order(self, order_id: int) -> Order:
        order = self._db.scalar(self._with_details().where(Order.id == order_id))
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    def list_orders(
        self,
        status: str | None = None,
        table_id: int | None = None,
        day: date | None = None,
        offset: int = 0,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
    ) -> tuple[list[Order], int]:
        """
        Filtered page of orders, newest first.

        Returns (orders, total matching rows).
        """
        filters = []
        if status is not None:
            self._check_status(status)
            filters.append(Order.status == status)
        if table_id is not None:
            filters.append(Order.table_id == table_id)
        if day is not None:
            start, end = _day_bounds(day)
            filters.extend([Order.order_time >= start, Order.order_time < end])

        total = self._db.scalar(select(func.count(Order.id)).where(*filters)) or 0
        orders = self._db.scalars(
            self._with_details()
            .where(*filters)
            .order_by(Order.order_time.desc(), Order.id.desc())
            .offset(offset)
            .limit(limit)
        ).all()
        return list(orders), total

    def get_orders_by_status(self, status: str) -> list[Order]:
        """Orders in one status, oldest first."""
        self._check_status(status)
        return list(
            self._db.scalars(
                self._with_details()
                .where(Order.status == status)
                .order_by(Order.order_time.asc(), Order.id.asc())
            ).all()
        )

    def get_kitchen_orders(self) -> list[OrderOutput]:
        """
        Active orders for the kitchen display, oldest first.

        Each order carries only the lines still to cook (pending/preparing).
        """
        orders = self._db.scalars(
            self._with_details()
            .where(Order.status.in_(OrderStatus.ACTIVE))
            .order_by(Order.order_time.asc(), Order.id.asc())
        ).all()

        result = []
        for order in orders:
            lines = sorted(
                (i for i in order.items if i.item_status in OrderItemStatus.KITCHEN_VISIBLE),
                key=lambda i: i.id,
            )
            result.append(build_order_output(order, items=lines))
        return result

    def get_preparation_time(self, order_id: int) -> PreparationTimeOutput:
        """
        Estimate kitchen minutes for an order.

        Per-unit minutes come from the menu category; up to three dishes
        cook in parallel.
        """
        order = self.get_order(order_id)

        total_minutes = 0
        total_quantity = 0
        for item in order.items:
            category = item.menu_item.category if item.menu_item else None
            total_minutes += CATEGORY_PREP_MINUTES.get(category, DEFAULT_PREP_MINUTES) * item.quantity
            total_quantity += item.quantity

        parallel = max(1, min(MAX_PARALLEL_DISHES, total_quantity))
        return PreparationTimeOutput(
            order_id=order.id,
            estimated_minutes=math.ceil(total_minutes / parallel),
            total_quantity=total_quantity,
            parallel_dishes=parallel,
        )

    def get_statistics(
        self, start: datetime | None = None, end: datetime | None = None
    ) -> OrderStatisticsOutput:
        """Count and revenue per status, optionally within [start, end]."""
        filters = []
        if start is not None:
            start = to_utc(start)
            filters.append(Order.order_time >= start)
        if end is not None:
            end = to_utc(end)
            filters.append(Order.order_time <= end)

        rows = self._db.execute(
            select(Order.status, func.count(Order.id), func.sum(Order.total_amount))
            .where(*filters)
            .group_by(Order.status)
        ).all()

        counts = {status: (0, ZERO) for status in OrderStatus.ALL}
        for status, count, revenue in rows:
            counts[status] = (count, Decimal(revenue or 0).quantize(CENT))

        by_status = [
            StatusStatisticsOutput(status=status, count=count, revenue=revenue)
            for status, (count, revenue) in counts.items()
        ]
        total_orders = sum(s.count for s in by_status)
        total_revenue = sum((s.revenue for s in by_status), ZERO).quantize(CENT)
        average = (total_revenue / total_orders).quantize(CENT) if total_orders else ZERO.quantize(CENT)

        return OrderStatisticsOutput(
            start=start,
            end=end,
            by_status=by_status,
            total_orders=total_orders,
            total_revenue=total_revenue,
            average_order_value=average,
        )

    def get_todays_orders(self, today: date | None = None) -> TodaysOrdersOutput:
        """Per-status counts for the current UTC day and the latest orders."""
        today = today or utcnow().date()
        start, end = _day_bounds(today)

        orders = self._db.scalars(
            self._with_details()
            .where(Order.order_time >= start, Order.order_time < end)
            .order_by(Order.order_time.desc(), Order.id.desc())
        ).all()

        counts = {status: 0 for status in OrderStatus.ALL}
        completed_revenue = ZERO
        for order in orders:
            counts[order.status] += 1
            if order.status == OrderStatus.COMPLETED:
                completed_revenue += order.total_amount

        return TodaysOrdersOutput(
            day=today,
            total_orders=len(orders),
            counts=counts,
            completed_revenue=completed_revenue.quantize(CENT),
            recent_orders=[build_order_output(o) for o in orders[: Limits.RECENT_ORDERS]],
        )

    @staticmethod
    def _check_status(status: str) -> None:
        if not validate_order_status(status):
            raise ValidationError(
                f"Invalid order status '{status}'. Must be one of: {', '.join(OrderStatus.ALL)}",
                field="status",
                value=status,
            )
