"""
Centralized HTTP exceptions for consistent error handling.

Every domain failure maps to one of four kinds:
- NotFound (404): a referenced order, table, menu item, inventory item or
  order item does not exist.
- Validation (400): missing fields, non-positive quantities, unknown enum values.
- Conflict (400): illegal state transitions, occupied tables, inventory still
  referenced by recipes.
- Unexpected (500): persistence failures and anything unhandled.

Usage:
    from shared.utils.exceptions import OrderNotFoundError, InvalidTransitionError

    raise OrderNotFoundError(order_id)
    raise InvalidTransitionError("Order", "completed", "pending")
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Reservation", 123)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


class OrderItemNotFoundError(NotFoundError):
    """Order item not found, or it belongs to another order."""

    def __init__(self, item_id: int | None = None, **log_context: Any):
        super().__init__("Order item", item_id, **log_context)


class TableNotFoundError(NotFoundError):
    """Table not found."""

    def __init__(self, table_id: int | None = None, **log_context: Any):
        super().__init__("Table", table_id, **log_context)


class MenuItemNotFoundError(NotFoundError):
    """Menu item not found."""

    def __init__(self, menu_item_id: int | None = None, **log_context: Any):
        super().__init__("Menu item", menu_item_id, **log_context)


class InventoryItemNotFoundError(NotFoundError):
    """Inventory item not found."""

    def __init__(self, inventory_id: int | None = None, **log_context: Any):
        super().__init__("Inventory item", inventory_id, **log_context)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Quantity must be positive", field="quantity", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class ConflictError(ValidationError):
    """
    The request is well formed but clashes with current state (400).

    Usage:
        raise ConflictError("Cannot update completed or cancelled orders")
    """


class InvalidStateError(ConflictError):
    """Entity is in an invalid state for the operation."""

    def __init__(
        self,
        entity: str,
        current_state: str,
        expected_states: list[str] | None = None,
        **log_context: Any,
    ):
        if expected_states:
            states_str = ", ".join(expected_states)
            detail = f"{entity} is '{current_state}', expected one of: {states_str}"
        else:
            detail = f"{entity} cannot be '{current_state}' for this operation"

        super().__init__(detail, entity=entity, current_state=current_state, **log_context)


class InvalidTransitionError(ConflictError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid status transition from {from_status} to {to_status} for {entity}"
        super().__init__(
            detail, entity=entity, from_status=from_status, to_status=to_status, **log_context
        )


class TableOccupiedError(ConflictError):
    """Table already holds an active order."""

    def __init__(self, table_id: int, **log_context: Any):
        super().__init__(f"Table {table_id} is already occupied", table_id=table_id, **log_context)


class InventoryInUseError(ConflictError):
    """Inventory item is still referenced by at least one recipe."""

    def __init__(self, inventory_id: int, recipe_count: int, **log_context: Any):
        super().__init__(
            "Cannot delete inventory item that is used in recipes",
            inventory_id=inventory_id,
            recipe_count=recipe_count,
            **log_context,
        )


class InventoryAlreadyDeductedError(ConflictError):
    """Stock for the order has already been consumed."""

    def __init__(self, order_id: int, **log_context: Any):
        super().__init__(
            f"Inventory for order {order_id} has already been deducted",
            order_id=order_id,
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to free table", table_id=3)
    """

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)
