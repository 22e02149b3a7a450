"""
Inventory router.
Stock adjustments, availability checks, alerts and reports.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    AvailabilityOutput,
    AvailabilityRequest,
    BulkInventoryRequest,
    BulkInventoryResponse,
    InventoryAdjustmentOutput,
    InventoryDeleteResponse,
    InventoryMovementOutput,
    InventoryStatisticsOutput,
    LowStockReportOutput,
    ReorderSuggestionOutput,
    UpdateInventoryRequest,
)
from rest_api.services.domain import InventoryService


router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.get("/alerts", response_model=LowStockReportOutput)
def low_stock_alerts(db: Session = Depends(get_db)) -> LowStockReportOutput:
    """Tracked menu items and ingredients at or under their low-stock threshold."""
    alerts = InventoryService(db).get_low_stock_alerts()
    return LowStockReportOutput(alerts=alerts, count=len(alerts))


@router.post("/availability", response_model=AvailabilityOutput)
def check_availability(
    body: AvailabilityRequest,
    db: Session = Depends(get_db),
) -> AvailabilityOutput:
    """Can the menu item be served in this quantity with current stock?"""
    return InventoryService(db).check_menu_item_availability(body.menu_item_id, body.quantity)


@router.get("/statistics", response_model=InventoryStatisticsOutput)
def inventory_statistics(db: Session = Depends(get_db)) -> InventoryStatisticsOutput:
    return InventoryService(db).get_statistics()


@router.get("/reorder-suggestions", response_model=list[ReorderSuggestionOutput])
def reorder_suggestions(db: Session = Depends(get_db)) -> list[ReorderSuggestionOutput]:
    """Items at or below their minimum level with a suggested order size."""
    return InventoryService(db).get_reorder_suggestions()


@router.post("/bulk", response_model=BulkInventoryResponse)
def bulk_update(
    body: BulkInventoryRequest,
    db: Session = Depends(get_db),
) -> BulkInventoryResponse:
    """
    Apply several adjustments at once.

    Failing entries are reported per item; the rest still apply.
    """
    return InventoryService(db).bulk_update(body.updates)


@router.post("/orders/{order_id}/deduct", response_model=InventoryMovementOutput)
def deduct_for_order(order_id: int, db: Session = Depends(get_db)) -> InventoryMovementOutput:
    """Consume stock for an order. Rejected when it was already consumed."""
    return InventoryService(db).deduct_for_order(order_id)


@router.post("/orders/{order_id}/restore", response_model=InventoryMovementOutput)
def restore_for_order(order_id: int, db: Session = Depends(get_db)) -> InventoryMovementOutput:
    """Give back stock consumed by an order. A no-op when nothing was consumed."""
    return InventoryService(db).restore_for_order(order_id)


@router.patch("/{inventory_id}/quantity", response_model=InventoryAdjustmentOutput)
def update_quantity(
    inventory_id: int,
    body: UpdateInventoryRequest,
    db: Session = Depends(get_db),
) -> InventoryAdjustmentOutput:
    """Manual adjustment: add, subtract (clamped at zero) or set."""
    return InventoryService(db).update_inventory_item(
        inventory_id, body.quantity, body.action, body.reason
    )


@router.delete("/{inventory_id}", response_model=InventoryDeleteResponse)
def delete_inventory_item(inventory_id: int, db: Session = Depends(get_db)) -> InventoryDeleteResponse:
    """Delete an ingredient. Refused while any recipe uses it."""
    InventoryService(db).delete_inventory_item(inventory_id)
    return InventoryDeleteResponse(inventory_id=inventory_id)
