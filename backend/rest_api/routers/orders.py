"""
Orders router.
Order placement, edits, status changes and kitchen/reporting reads.

Static paths are declared before ``/{order_id}`` so they are never captured
by it.
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    AddOrderItemsRequest,
    AddOrderItemsResponse,
    CancelOrderRequest,
    CreateOrderRequest,
    CreateOrderResponse,
    OrderItemOutput,
    OrderListOutput,
    OrderOutput,
    OrderStatisticsOutput,
    PreparationTimeOutput,
    RemoveOrderItemResponse,
    TodaysOrdersOutput,
    UpdateOrderItemStatusRequest,
    UpdateOrderRequest,
    UpdateOrderStatusRequest,
)
from rest_api.routers._common.pagination import Pagination, get_pagination
from rest_api.services.domain import OrderQueryService, OrderService
from rest_api.services.domain.order_query_service import (
    build_order_item_output,
    build_order_output,
)


router = APIRouter(prefix="/api/orders", tags=["orders"])


def _order_view(db: Session, order_id: int) -> OrderOutput:
    """Reload an order with its table and lines for the response."""
    return build_order_output(OrderQueryService(db).get_order(order_id))


# =============================================================================
# Collection and reporting reads
# =============================================================================


@router.post("", response_model=CreateOrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    body: CreateOrderRequest,
    db: Session = Depends(get_db),
) -> CreateOrderResponse:
    """
    Place an order at a table.

    The whole order is written in one transaction: lines priced from the
    current menu, table marked occupied, stock consumed.
    """
    order, alerts = OrderService(db).create_complete_order(
        table_id=body.table_id,
        order_items=body.order_items,
        customer_notes=body.customer_notes,
    )
    view = _order_view(db, order.id)
    return CreateOrderResponse(order=view, items=view.items, alerts=alerts)


@router.get("", response_model=OrderListOutput)
def list_orders(
    status: str | None = Query(default=None, description="Filter by order status"),
    table_id: int | None = Query(default=None, description="Filter by table"),
    day: date | None = Query(default=None, alias="date", description="Orders placed on this UTC day"),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
) -> OrderListOutput:
    """List orders, newest first."""
    orders, total = OrderQueryService(db).list_orders(
        status=status,
        table_id=table_id,
        day=day,
        offset=pagination.offset,
        limit=pagination.limit,
    )
    return OrderListOutput(
        orders=[build_order_output(o) for o in orders],
        pagination=pagination.to_dict(total=total),
    )


@router.get("/kitchen/display", response_model=list[OrderOutput])
def kitchen_display(db: Session = Depends(get_db)) -> list[OrderOutput]:
    """Active orders with their lines still to cook, oldest first."""
    return OrderQueryService(db).get_kitchen_orders()


@router.get("/statistics", response_model=OrderStatisticsOutput)
def order_statistics(
    start: datetime | None = Query(default=None, description="Window start (inclusive)"),
    end: datetime | None = Query(default=None, description="Window end (inclusive)"),
    db: Session = Depends(get_db),
) -> OrderStatisticsOutput:
    return OrderQueryService(db).get_statistics(start=start, end=end)


@router.get("/today", response_model=TodaysOrdersOutput)
def todays_orders(db: Session = Depends(get_db)) -> TodaysOrdersOutput:
    return OrderQueryService(db).get_todays_orders()


@router.get("/status/{order_status}", response_model=list[OrderOutput])
def orders_by_status(order_status: str, db: Session = Depends(get_db)) -> list[OrderOutput]:
    """Orders in one status, oldest first."""
    orders = OrderQueryService(db).get_orders_by_status(order_status)
    return [build_order_output(o) for o in orders]


# =============================================================================
# Single order
# =============================================================================


@router.get("/{order_id}", response_model=OrderOutput)
def get_order(order_id: int, db: Session = Depends(get_db)) -> OrderOutput:
    return _order_view(db, order_id)


@router.put("/{order_id}", response_model=OrderOutput)
def update_order(
    order_id: int,
    body: UpdateOrderRequest,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """Edit notes or move the order to another table. Completed/cancelled orders are read-only."""
    OrderService(db).update_order(
        order_id,
        table_id=body.table_id,
        customer_notes=body.customer_notes,
        preparation_notes=body.preparation_notes,
    )
    return _order_view(db, order_id)


@router.patch("/{order_id}/status", response_model=OrderOutput)
def update_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """
    Advance the order status.

    Valid transitions:
    - pending -> in_progress, cancelled
    - in_progress -> completed, cancelled
    """
    OrderService(db).update_order_status(order_id, body.status)
    return _order_view(db, order_id)


@router.patch("/{order_id}/cancel", response_model=OrderOutput)
def cancel_order(
    order_id: int,
    body: CancelOrderRequest | None = None,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """Cancel an order; its table is freed and consumed stock is given back."""
    reason = body.cancellation_reason if body else None
    OrderService(db).cancel_order(order_id, reason)
    return _order_view(db, order_id)


@router.delete("/{order_id}", response_model=OrderOutput)
def delete_order(
    order_id: int,
    body: CancelOrderRequest | None = None,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """Orders are never removed: DELETE cancels."""
    reason = body.cancellation_reason if body else None
    OrderService(db).cancel_order(order_id, reason)
    return _order_view(db, order_id)


@router.get("/{order_id}/preparation-time", response_model=PreparationTimeOutput)
def preparation_time(order_id: int, db: Session = Depends(get_db)) -> PreparationTimeOutput:
    return OrderQueryService(db).get_preparation_time(order_id)


# =============================================================================
# Order lines
# =============================================================================


@router.post("/{order_id}/items", response_model=AddOrderItemsResponse)
def add_order_items(
    order_id: int,
    body: AddOrderItemsRequest,
    db: Session = Depends(get_db),
) -> AddOrderItemsResponse:
    """Append lines to an open order. Low-stock alerts from the new lines are returned."""
    _, alerts = OrderService(db).add_items(order_id, body.order_items)
    view = _order_view(db, order_id)
    return AddOrderItemsResponse(order=view, items=view.items, alerts=alerts)


@router.delete("/{order_id}/items/{item_id}", response_model=RemoveOrderItemResponse)
def remove_order_item(
    order_id: int,
    item_id: int,
    db: Session = Depends(get_db),
) -> RemoveOrderItemResponse:
    order = OrderService(db).remove_item(order_id, item_id)
    return RemoveOrderItemResponse(
        order_id=order_id, removed_item_id=item_id, total_amount=order.total_amount
    )


@router.patch("/{order_id}/items/{item_id}/status", response_model=OrderItemOutput)
def update_order_item_status(
    order_id: int,
    item_id: int,
    body: UpdateOrderItemStatusRequest,
    db: Session = Depends(get_db),
) -> OrderItemOutput:
    """Set a line's kitchen status (pending, preparing, ready, served) in any order."""
    item = OrderService(db).update_item_status(order_id, item_id, body.item_status)
    return build_order_item_output(item)
