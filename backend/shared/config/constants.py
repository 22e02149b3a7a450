"""
Centralized constants for the backend application.
Avoids magic strings for statuses, transitions and limits.

Usage:
    from shared.config.constants import OrderStatus, ORDER_TRANSITIONS

    if order.status in OrderStatus.ACTIVE:
        ...
"""

from decimal import Decimal
from typing import Final


# =============================================================================
# Entity Status Constants
# =============================================================================


class OrderStatus:
    """Order status constants."""

    PENDING: Final[str] = "pending"
    IN_PROGRESS: Final[str] = "in_progress"
    COMPLETED: Final[str] = "completed"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [PENDING, IN_PROGRESS, COMPLETED, CANCELLED]
    # An order holds its table while in one of these
    ACTIVE: Final[list[str]] = [PENDING, IN_PROGRESS]
    TERMINAL: Final[list[str]] = [COMPLETED, CANCELLED]


class OrderItemStatus:
    """Order item (kitchen line) status constants."""

    PENDING: Final[str] = "pending"
    PREPARING: Final[str] = "preparing"
    READY: Final[str] = "ready"
    SERVED: Final[str] = "served"

    ALL: Final[list[str]] = [PENDING, PREPARING, READY, SERVED]
    KITCHEN_VISIBLE: Final[list[str]] = [PENDING, PREPARING]


class TableStatus:
    """Table status constants."""

    AVAILABLE: Final[str] = "available"
    OCCUPIED: Final[str] = "occupied"
    RESERVED: Final[str] = "reserved"

    ALL: Final[list[str]] = [AVAILABLE, OCCUPIED, RESERVED]


class ReservationStatus:
    """Reservation status constants."""

    PENDING: Final[str] = "pending"
    CONFIRMED: Final[str] = "confirmed"
    CANCELLED: Final[str] = "cancelled"
    COMPLETED: Final[str] = "completed"

    ALL: Final[list[str]] = [PENDING, CONFIRMED, CANCELLED, COMPLETED]
    # Reservations that still block their table
    BLOCKING: Final[list[str]] = [PENDING, CONFIRMED]


class InventoryAction:
    """Manual inventory adjustment actions."""

    ADD: Final[str] = "add"
    SUBTRACT: Final[str] = "subtract"
    SET: Final[str] = "set"

    ALL: Final[list[str]] = [ADD, SUBTRACT, SET]


class ReorderUrgency:
    """Urgency levels for reorder suggestions."""

    CRITICAL: Final[str] = "critical"
    HIGH: Final[str] = "high"
    MEDIUM: Final[str] = "medium"


# =============================================================================
# Status Transitions
# =============================================================================

# Valid order status transitions (from -> [allowed to states])
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.PENDING: [OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED],
    OrderStatus.IN_PROGRESS: [OrderStatus.COMPLETED, OrderStatus.CANCELLED],
    OrderStatus.COMPLETED: [],  # Terminal state
    OrderStatus.CANCELLED: [],  # Terminal state
}


# =============================================================================
# Kitchen Heuristics
# =============================================================================

# Minutes per unit by menu category, used for preparation estimates
CATEGORY_PREP_MINUTES: Final[dict[str, int]] = {
    "appetizer": 5,
    "main": 10,
    "dessert": 5,
    "beverage": 2,
}
DEFAULT_PREP_MINUTES: Final[int] = 8
# Dishes the kitchen can cook at the same time
MAX_PARALLEL_DISHES: Final[int] = 3


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 99

    # Monetary limits
    MAX_PRICE: Final[Decimal] = Decimal("99999999.99")

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_NOTES_LENGTH: Final[int] = 1000

    # Pagination
    DEFAULT_PAGE_SIZE: Final[int] = 10
    MAX_PAGE_SIZE: Final[int] = 200

    # Number of recent orders in the daily summary
    RECENT_ORDERS: Final[int] = 10


def validate_order_status(status: str) -> bool:
    """Validate that an order status is valid."""
    return status in OrderStatus.ALL


def validate_order_item_status(status: str) -> bool:
    """Validate that an order item status is valid."""
    return status in OrderItemStatus.ALL


def validate_table_status(status: str) -> bool:
    """Validate that a table status is valid."""
    return status in TableStatus.ALL


def validate_order_transition(current_status: str, new_status: str) -> bool:
    """
    Validate that an order status transition is allowed.

    Returns True if transition is valid, False otherwise.
    """
    allowed = ORDER_TRANSITIONS.get(current_status, [])
    return new_status in allowed
