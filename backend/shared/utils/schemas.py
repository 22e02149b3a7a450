"""
Shared Pydantic schemas used across the application.

Request bodies are validated at the HTTP boundary; domain services re-check
the same rules for callers that bypass HTTP, such as the CLI.
Monetary amounts and stock quantities are Decimal end to end.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field

from shared.config.constants import Limits


# =============================================================================
# Common Types
# =============================================================================

OrderStatusLiteral = Literal["pending", "in_progress", "completed", "cancelled"]
OrderItemStatusLiteral = Literal["pending", "preparing", "ready", "served"]
TableStatusLiteral = Literal["available", "occupied", "reserved"]
InventoryActionLiteral = Literal["add", "subtract", "set"]
AlertKind = Literal["menu_item", "inventory"]


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""

    detail: str


# =============================================================================
# Order Schemas
# =============================================================================


class OrderItemInput(BaseModel):
    """A requested order line."""

    menu_item_id: int
    quantity: int = Field(ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    special_instructions: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class CreateOrderRequest(BaseModel):
    """Request to place a new order at a table."""

    table_id: int
    order_items: list[OrderItemInput] = Field(min_length=1)
    customer_notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class UpdateOrderRequest(BaseModel):
    """Editable order attributes. Omitted fields are left untouched."""

    table_id: int | None = None
    customer_notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)
    preparation_notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatusLiteral


class CancelOrderRequest(BaseModel):
    cancellation_reason: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class AddOrderItemsRequest(BaseModel):
    order_items: list[OrderItemInput] = Field(min_length=1)


class UpdateOrderItemStatusRequest(BaseModel):
    item_status: OrderItemStatusLiteral


class OrderItemOutput(BaseModel):
    """Output for a single order line."""

    id: int
    menu_item_id: int
    menu_item_name: str | None = None
    category: str | None = None
    quantity: int
    price: Decimal
    line_total: Decimal
    item_status: str
    special_instructions: str | None = None


class OrderOutput(BaseModel):
    """Output for an order with its lines."""

    id: int
    table_id: int
    table_number: int | None = None
    status: str
    total_amount: Decimal
    order_time: datetime
    customer_notes: str | None = None
    preparation_notes: str | None = None
    cancellation_reason: str | None = None
    inventory_deducted: bool = False
    items: list[OrderItemOutput] = []


class CreateOrderResponse(BaseModel):
    """Response for a placed order."""

    order: OrderOutput
    items: list[OrderItemOutput]
    alerts: list["LowStockAlertOutput"] = []


class PaginationOutput(BaseModel):
    current_page: int
    total_pages: int
    total_orders: int
    has_next: bool
    has_prev: bool


class OrderListOutput(BaseModel):
    orders: list[OrderOutput]
    pagination: PaginationOutput


class AddOrderItemsResponse(BaseModel):
    """Response after appending lines to an open order."""

    order: OrderOutput
    items: list[OrderItemOutput]
    alerts: list["LowStockAlertOutput"] = []


class RemoveOrderItemResponse(BaseModel):
    """Response after removing one line from an order."""

    order_id: int
    removed_item_id: int
    total_amount: Decimal


class PreparationTimeOutput(BaseModel):
    """Estimated kitchen time for an order."""

    order_id: int
    estimated_minutes: int
    total_quantity: int
    parallel_dishes: int


class StatusStatisticsOutput(BaseModel):
    status: str
    count: int
    revenue: Decimal


class OrderStatisticsOutput(BaseModel):
    """Grouped order counts and revenue over an optional time window."""

    start: datetime | None = None
    end: datetime | None = None
    by_status: list[StatusStatisticsOutput]
    total_orders: int
    total_revenue: Decimal
    average_order_value: Decimal


class TodaysOrdersOutput(BaseModel):
    """Same-day summary."""

    day: date
    total_orders: int
    counts: dict[str, int]
    completed_revenue: Decimal
    recent_orders: list[OrderOutput]


# =============================================================================
# Inventory Schemas
# =============================================================================


class UpdateInventoryRequest(BaseModel):
    """Manual stock adjustment."""

    quantity: Decimal = Field(ge=0)
    action: InventoryActionLiteral
    reason: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)


class InventoryAdjustmentOutput(BaseModel):
    inventory_id: int
    item_name: str
    action: str
    old_quantity: Decimal
    new_quantity: Decimal
    unit: str
    reason: str | None = None


class BulkInventoryUpdate(BaseModel):
    """
    One entry of a bulk update.

    Fields are checked per entry by the service: a bad id, action or
    quantity fails only this entry, never the whole request.
    """

    inventory_id: Any = None
    quantity: Any = None
    action: Any = None
    reason: str | None = None


class BulkInventoryRequest(BaseModel):
    updates: list[BulkInventoryUpdate] = Field(min_length=1)


class BulkResultOutput(BaseModel):
    inventory_id: Any = None
    success: bool
    old_quantity: Decimal | None = None
    new_quantity: Decimal | None = None
    reason: str | None = None
    error: str | None = None


class BulkSummaryOutput(BaseModel):
    total: int
    successful: int
    failed: int


class BulkInventoryResponse(BaseModel):
    results: list[BulkResultOutput]
    summary: BulkSummaryOutput


class LowStockAlertOutput(BaseModel):
    """A threshold crossing for a menu item or an ingredient."""

    kind: AlertKind
    id: int
    name: str
    current: Decimal
    threshold: Decimal
    unit: str | None = None


class LowStockReportOutput(BaseModel):
    alerts: list[LowStockAlertOutput]
    count: int


class AvailabilityRequest(BaseModel):
    menu_item_id: int
    quantity: int = Field(default=1, ge=Limits.MIN_QUANTITY)


class MissingIngredientOutput(BaseModel):
    inventory_id: int
    item_name: str
    required: Decimal
    available: Decimal
    unit: str


class AvailabilityOutput(BaseModel):
    """Whether a menu item can be served in the requested quantity."""

    menu_item_id: int
    requested_quantity: int
    available: bool
    reason: str | None = None
    missing_ingredients: list[MissingIngredientOutput] = []


class StockChangeOutput(BaseModel):
    kind: AlertKind
    id: int
    name: str
    old_quantity: Decimal
    new_quantity: Decimal


class InventoryMovementOutput(BaseModel):
    """Result of deducting or restoring stock for an order."""

    order_id: int
    action: Literal["deduct", "restore"]
    applied: bool
    changes: list[StockChangeOutput] = []
    alerts: list[LowStockAlertOutput] = []


class CategoryStatisticsOutput(BaseModel):
    category: str
    item_count: int
    total_value: Decimal
    low_stock_count: int


class InventoryStatisticsOutput(BaseModel):
    total_items: int
    low_stock_items: int
    out_of_stock_items: int
    total_value: Decimal
    low_stock_percentage: float
    categories: list[CategoryStatisticsOutput]


class ReorderSuggestionOutput(BaseModel):
    inventory_id: int
    item_name: str
    category: str
    current_quantity: Decimal
    min_stock_level: Decimal
    suggested_quantity: Decimal
    unit: str
    supplier: str | None = None
    estimated_cost: Decimal
    urgency: str


class InventoryDeleteResponse(BaseModel):
    inventory_id: int
    deleted: bool = True


# =============================================================================
# Table Schemas
# =============================================================================


class TableOutput(BaseModel):
    id: int
    table_number: int
    capacity: int
    status: str


class ReservationBriefOutput(BaseModel):
    id: int
    customer_name: str
    reservation_time: datetime
    number_of_guests: int
    status: str


class TableAvailabilityOutput(BaseModel):
    """Whether a table is free for a time window."""

    table_id: int
    table_number: int
    available: bool
    reason: str | None = None
    requested_time: datetime
    duration_minutes: int
    active_order_id: int | None = None
    conflicting_reservations: list[ReservationBriefOutput] = []


class ImmediateOrderOutput(BaseModel):
    table_id: int
    can_accept: bool
    reason: str | None = None
    active_order_id: int | None = None


class TableSearchRequest(BaseModel):
    """Search for tables that fit a party."""

    party_size: int = Field(ge=1)
    reservation_time: datetime | None = None
    duration_minutes: int | None = Field(default=None, ge=1)


class TableSearchOutput(BaseModel):
    available_tables: list[TableOutput]
    count: int
    party_size: int
    reservation_time: datetime
    duration_minutes: int


class TableStatusOutput(BaseModel):
    """Current state of one table."""

    table: TableOutput
    has_active_order: bool
    active_order_id: int | None = None
    is_available: bool
    upcoming_reservations: list[ReservationBriefOutput] = []


class TableStatusRowOutput(BaseModel):
    id: int
    table_number: int
    capacity: int
    status: str
    has_active_order: bool
    active_order_id: int | None = None
    is_available: bool


class TablesSummaryOutput(BaseModel):
    total: int
    available: int
    occupied: int
    reserved: int
    with_active_orders: int


class AllTablesStatusOutput(BaseModel):
    tables: list[TableStatusRowOutput]
    summary: TablesSummaryOutput


class UpdateTableStatusRequest(BaseModel):
    status: TableStatusLiteral


# Resolve forward references
CreateOrderResponse.model_rebuild()
AddOrderItemsResponse.model_rebuild()
