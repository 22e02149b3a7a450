"""
Inventory Ledger Domain Service.

Owns stock quantities for raw ingredients (InventoryItem) and for
stock-tracked menu items (MenuItem.current_stock). Stock moves in three ways:

- Order movements: ``deduct_lines``/``restore_lines`` walk the recipe graph
  for (menu_item_id, quantity) lines. They never commit; the order service
  calls them inside its own transactions.
- Order-level ledger calls: ``deduct_for_order``/``restore_for_order`` guard
  against double application with Order.inventory_deducted.
- Manual adjustments: ``update_inventory_item`` and ``bulk_update``.

Deductions clamp at zero. Restores add back exactly what a deduction took,
so deduct followed by restore is a round trip while stock suffices.
"""

from collections import defaultdict
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.constants import InventoryAction, OrderStatus, ReorderUrgency
from shared.config.logging import inventory_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import transactional
from shared.utils.exceptions import (
    AppException,
    InvalidStateError,
    InventoryAlreadyDeductedError,
    InventoryInUseError,
    InventoryItemNotFoundError,
    OrderNotFoundError,
    ValidationError,
)
from shared.utils.schemas import (
    AvailabilityOutput,
    BulkInventoryResponse,
    BulkInventoryUpdate,
    BulkResultOutput,
    BulkSummaryOutput,
    CategoryStatisticsOutput,
    InventoryAdjustmentOutput,
    InventoryMovementOutput,
    InventoryStatisticsOutput,
    LowStockAlertOutput,
    MissingIngredientOutput,
    ReorderSuggestionOutput,
    StockChangeOutput,
)
from shared.utils.validators import utcnow
from rest_api.models import InventoryItem, MenuItem, Order, Recipe, ZERO
from rest_api.services.domain.recipe_resolver import RecipeResolver

CENT = Decimal("0.01")

StockLines = Iterable[tuple[int, int]]
Movement = tuple[list[StockChangeOutput], list[LowStockAlertOutput]]


def order_lines(order: Order) -> list[tuple[int, int]]:
    """(menu_item_id, quantity) for every line of an order."""
    return [(item.menu_item_id, item.quantity) for item in order.items]


class InventoryService:
    """Domain service for the inventory ledger."""

    def __init__(self, db: Session):
        self._db = db
        self._recipes = RecipeResolver(db)
        self._threshold = Decimal(settings.inventory_low_stock_threshold)

    # =========================================================================
    # Order movements (caller owns the transaction)
    # =========================================================================

    def deduct_lines(self, lines: StockLines) -> Movement:
        """Consume menu-item stock and recipe ingredients for the given lines."""
        return self._move(lines, sign=-1)

    def restore_lines(self, lines: StockLines) -> Movement:
        """Give back what ``deduct_lines`` took for the same lines."""
        return self._move(lines, sign=1)

    def _move(self, lines: StockLines, sign: int) -> Movement:
        units: dict[int, int] = defaultdict(int)
        for menu_item_id, quantity in lines:
            units[menu_item_id] += quantity
        if not units:
            return [], []

        changes: list[StockChangeOutput] = []
        alerts: list[LowStockAlertOutput] = []

        # Rows are locked in id order so concurrent movements cannot deadlock
        menu_items = self._db.scalars(
            select(MenuItem)
            .where(MenuItem.id.in_(list(units)), MenuItem.track_inventory.is_(True))
            .order_by(MenuItem.id)
            .with_for_update()
        ).all()
        for menu_item in menu_items:
            old_stock = menu_item.current_stock
            new_stock = max(0, old_stock + sign * units[menu_item.id])
            menu_item.current_stock = new_stock
            menu_item.is_available = new_stock > 0
            changes.append(
                StockChangeOutput(
                    kind="menu_item",
                    id=menu_item.id,
                    name=menu_item.name,
                    old_quantity=Decimal(old_stock),
                    new_quantity=Decimal(new_stock),
                )
            )
            if sign < 0 and new_stock <= menu_item.low_stock_threshold:
                alerts.append(_menu_item_alert(menu_item))

        needed: dict[int, Decimal] = defaultdict(Decimal)
        for menu_item_id, requirements in self._recipes.resolve_many(units).items():
            for requirement in requirements:
                needed[requirement.inventory_item_id] += (
                    requirement.quantity_per_unit * units[menu_item_id]
                )

        if needed:
            now = utcnow()
            ingredients = self._db.scalars(
                select(InventoryItem)
                .where(InventoryItem.id.in_(list(needed)))
                .order_by(InventoryItem.id)
                .with_for_update()
            ).all()
            for item in ingredients:
                old_quantity = Decimal(item.quantity)
                new_quantity = max(ZERO, old_quantity + sign * needed[item.id])
                item.quantity = new_quantity
                item.last_updated = now
                changes.append(
                    StockChangeOutput(
                        kind="inventory",
                        id=item.id,
                        name=item.item_name,
                        old_quantity=old_quantity,
                        new_quantity=new_quantity,
                    )
                )
                if sign < 0 and new_quantity <= self._threshold:
                    alerts.append(self._inventory_alert(item, new_quantity))

        for alert in alerts:
            logger.warning(
                "Low stock", kind=alert.kind, item_id=alert.id, name=alert.name,
                current=str(alert.current), threshold=str(alert.threshold),
            )
        return changes, alerts

    # =========================================================================
    # Order-level ledger calls
    # =========================================================================

    def deduct_for_order(self, order_id: int) -> InventoryMovementOutput:
        """
        Consume stock for every line of an order.

        Raises:
            OrderNotFoundError: If the order does not exist
            InvalidStateError: If the order is completed or cancelled
            InventoryAlreadyDeductedError: If stock was already consumed for it
        """
        with transactional(self._db):
            order = self._get_order(order_id)
            if order.status in OrderStatus.TERMINAL:
                raise InvalidStateError(
                    "Order", order.status, OrderStatus.ACTIVE, order_id=order_id
                )
            if order.inventory_deducted:
                raise InventoryAlreadyDeductedError(order_id)
            changes, alerts = self.deduct_lines(order_lines(order))
            order.inventory_deducted = True

        logger.info("Inventory deducted for order", order_id=order_id, changes=len(changes))
        return InventoryMovementOutput(
            order_id=order_id, action="deduct", applied=True, changes=changes, alerts=alerts
        )

    def restore_for_order(self, order_id: int) -> InventoryMovementOutput:
        """
        Give back stock consumed by an order.

        A no-op (``applied=False``) when nothing was deducted, so repeated
        restores never inflate stock.
        """
        with transactional(self._db):
            order = self._get_order(order_id)
            if not order.inventory_deducted:
                logger.info("Nothing to restore for order", order_id=order_id)
                return InventoryMovementOutput(order_id=order_id, action="restore", applied=False)
            changes, _ = self.restore_lines(order_lines(order))
            order.inventory_deducted = False

        logger.info("Inventory restored for order", order_id=order_id, changes=len(changes))
        return InventoryMovementOutput(
            order_id=order_id, action="restore", applied=True, changes=changes
        )

    def _get_order(self, order_id: int) -> Order:
        order = self._db.scalar(select(Order).where(Order.id == order_id).with_for_update())
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    # =========================================================================
    # Availability
    # =========================================================================

    def check_menu_item_availability(
        self, menu_item_id: int, requested_quantity: int = 1
    ) -> AvailabilityOutput:
        """
        Can ``requested_quantity`` units of a menu item be served right now?

        Every short ingredient is reported, not just the first one found.
        """
        if requested_quantity < 1:
            raise ValidationError("Quantity must be at least 1", field="quantity")

        def unavailable(reason: str, missing: list[MissingIngredientOutput] | None = None):
            return AvailabilityOutput(
                menu_item_id=menu_item_id,
                requested_quantity=requested_quantity,
                available=False,
                reason=reason,
                missing_ingredients=missing or [],
            )

        menu_item = self._db.get(MenuItem, menu_item_id)
        if not menu_item:
            return unavailable("Menu item not found")
        if not menu_item.is_available:
            return unavailable("Menu item is not available")
        if menu_item.track_inventory and menu_item.current_stock < requested_quantity:
            return unavailable(
                f"Insufficient stock: {menu_item.current_stock} available, "
                f"{requested_quantity} requested"
            )

        missing = []
        for requirement in self._recipes.resolve(menu_item_id):
            item = self._db.get(InventoryItem, requirement.inventory_item_id)
            required = requirement.quantity_per_unit * requested_quantity
            if item.quantity < required:
                missing.append(
                    MissingIngredientOutput(
                        inventory_id=item.id,
                        item_name=item.item_name,
                        required=required,
                        available=item.quantity,
                        unit=item.unit,
                    )
                )
        if missing:
            return unavailable("Insufficient ingredients", missing)

        return AvailabilityOutput(
            menu_item_id=menu_item_id, requested_quantity=requested_quantity, available=True
        )

    # =========================================================================
    # Manual adjustments
    # =========================================================================

    def update_inventory_item(
        self,
        inventory_id: int,
        quantity: Decimal | int | str,
        action: str,
        reason: str | None = None,
    ) -> InventoryAdjustmentOutput:
        """
        Adjust one inventory item: add, subtract (clamped at 0) or set.

        Raises:
            ValidationError: Unknown action or negative/non-numeric quantity
            InventoryItemNotFoundError: If the item does not exist
        """
        with transactional(self._db):
            adjustment = self._adjust(inventory_id, quantity, action, reason)

        logger.info(
            "Inventory adjusted",
            inventory_id=inventory_id,
            action=action,
            old_quantity=str(adjustment.old_quantity),
            new_quantity=str(adjustment.new_quantity),
            reason=reason,
        )
        return adjustment

    def bulk_update(self, updates: Iterable[BulkInventoryUpdate]) -> BulkInventoryResponse:
        """
        Apply many adjustments in one transaction.

        Each entry runs in its own savepoint: a failing entry is rolled back
        and reported while the others still apply.
        """
        results: list[BulkResultOutput] = []

        with transactional(self._db):
            for update in updates:
                action = InventoryAction.ADD if update.action is None else update.action
                reason = update.reason or "Bulk update"
                try:
                    with self._db.begin_nested():
                        adjustment = self._adjust(
                            update.inventory_id, update.quantity, action, reason
                        )
                except AppException as exc:
                    results.append(
                        BulkResultOutput(
                            inventory_id=update.inventory_id,
                            success=False,
                            reason=reason,
                            error=exc.detail,
                        )
                    )
                    continue
                except SQLAlchemyError as exc:
                    logger.error("Bulk entry failed", inventory_id=update.inventory_id, error=str(exc))
                    results.append(
                        BulkResultOutput(
                            inventory_id=update.inventory_id,
                            success=False,
                            reason=reason,
                            error="Database error while updating item",
                        )
                    )
                    continue

                results.append(
                    BulkResultOutput(
                        inventory_id=update.inventory_id,
                        success=True,
                        old_quantity=adjustment.old_quantity,
                        new_quantity=adjustment.new_quantity,
                        reason=reason,
                    )
                )

        successful = sum(1 for r in results if r.success)
        summary = BulkSummaryOutput(
            total=len(results), successful=successful, failed=len(results) - successful
        )
        logger.info("Bulk inventory update", **summary.model_dump())
        return BulkInventoryResponse(results=results, summary=summary)

    def _adjust(
        self,
        inventory_id: Any,
        quantity: Any,
        action: Any,
        reason: str | None,
    ) -> InventoryAdjustmentOutput:
        if isinstance(inventory_id, bool) or not isinstance(inventory_id, int):
            raise ValidationError("Inventory id must be an integer", field="inventory_id")
        if action not in InventoryAction.ALL:
            raise ValidationError(
                f"Invalid action '{action}'. Must be one of: {', '.join(InventoryAction.ALL)}",
                field="action",
            )
        try:
            amount = Decimal(str(quantity))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError("Quantity must be a number", field="quantity")
        if not amount.is_finite() or amount < 0:
            raise ValidationError("Quantity must be a non-negative number", field="quantity")

        item = self._db.scalar(
            select(InventoryItem).where(InventoryItem.id == inventory_id).with_for_update()
        )
        if not item:
            raise InventoryItemNotFoundError(inventory_id)

        old_quantity = Decimal(item.quantity)
        if action == InventoryAction.ADD:
            new_quantity = old_quantity + amount
        elif action == InventoryAction.SUBTRACT:
            new_quantity = max(ZERO, old_quantity - amount)
        else:
            new_quantity = amount

        item.quantity = new_quantity
        item.last_updated = utcnow()
        self._db.flush()

        return InventoryAdjustmentOutput(
            inventory_id=item.id,
            item_name=item.item_name,
            action=action,
            old_quantity=old_quantity,
            new_quantity=new_quantity,
            unit=item.unit,
            reason=reason,
        )

    def delete_inventory_item(self, inventory_id: int) -> None:
        """
        Delete an inventory item.

        Raises:
            InventoryInUseError: If any recipe still uses the item
        """
        with transactional(self._db):
            item = self._db.get(InventoryItem, inventory_id)
            if not item:
                raise InventoryItemNotFoundError(inventory_id)

            recipe_count = self._db.scalar(
                select(func.count(Recipe.id)).where(Recipe.inventory_item_id == inventory_id)
            )
            if recipe_count:
                raise InventoryInUseError(inventory_id, recipe_count)

            self._db.delete(item)

        logger.info("Inventory item deleted", inventory_id=inventory_id)

    # =========================================================================
    # Reports
    # =========================================================================

    def get_low_stock_alerts(self) -> list[LowStockAlertOutput]:
        """Tracked menu items at/under their own threshold, then ingredients at/under the global one."""
        menu_items = self._db.scalars(
            select(MenuItem)
            .where(
                MenuItem.track_inventory.is_(True),
                MenuItem.current_stock <= MenuItem.low_stock_threshold,
            )
            .order_by(MenuItem.current_stock, MenuItem.id)
        ).all()
        ingredients = self._db.scalars(
            select(InventoryItem)
            .where(InventoryItem.quantity <= self._threshold)
            .order_by(InventoryItem.quantity, InventoryItem.id)
        ).all()

        return [_menu_item_alert(m) for m in menu_items] + [
            self._inventory_alert(i, Decimal(i.quantity)) for i in ingredients
        ]

    def get_statistics(self) -> InventoryStatisticsOutput:
        items = self._db.scalars(select(InventoryItem).order_by(InventoryItem.category)).all()

        by_category: dict[str, CategoryStatisticsOutput] = {}
        total_value = ZERO
        low_stock = out_of_stock = 0

        for item in items:
            value = Decimal(item.quantity) * Decimal(item.unit_cost)
            is_low = item.quantity <= self._threshold
            total_value += value
            low_stock += is_low
            out_of_stock += item.quantity == 0

            stats = by_category.setdefault(
                item.category,
                CategoryStatisticsOutput(
                    category=item.category, item_count=0, total_value=ZERO, low_stock_count=0
                ),
            )
            stats.item_count += 1
            stats.total_value += value
            stats.low_stock_count += is_low

        for stats in by_category.values():
            stats.total_value = stats.total_value.quantize(CENT)

        percentage = round(low_stock / len(items) * 100, 2) if items else 0.0
        return InventoryStatisticsOutput(
            total_items=len(items),
            low_stock_items=low_stock,
            out_of_stock_items=out_of_stock,
            total_value=total_value.quantize(CENT),
            low_stock_percentage=percentage,
            categories=list(by_category.values()),
        )

    def get_reorder_suggestions(self) -> list[ReorderSuggestionOutput]:
        """Items at or below their minimum stock level, emptiest first."""
        items = self._db.scalars(
            select(InventoryItem)
            .where(InventoryItem.quantity <= InventoryItem.min_stock_level)
            .order_by(InventoryItem.quantity, InventoryItem.id)
        ).all()

        suggestions = []
        for item in items:
            quantity = Decimal(item.quantity)
            min_level = Decimal(item.min_stock_level)
            suggested = Decimal(item.reorder_quantity) or max(ZERO, min_level * 2 - quantity)

            if quantity == 0:
                urgency = ReorderUrgency.CRITICAL
            elif quantity <= min_level / 2:
                urgency = ReorderUrgency.HIGH
            else:
                urgency = ReorderUrgency.MEDIUM

            suggestions.append(
                ReorderSuggestionOutput(
                    inventory_id=item.id,
                    item_name=item.item_name,
                    category=item.category,
                    current_quantity=quantity,
                    min_stock_level=min_level,
                    suggested_quantity=suggested,
                    unit=item.unit,
                    supplier=item.supplier,
                    estimated_cost=(suggested * Decimal(item.unit_cost)).quantize(CENT),
                    urgency=urgency,
                )
            )
        return suggestions

    def _inventory_alert(self, item: InventoryItem, quantity: Decimal) -> LowStockAlertOutput:
        return LowStockAlertOutput(
            kind="inventory",
            id=item.id,
            name=item.item_name,
            current=quantity,
            threshold=self._threshold,
            unit=item.unit,
        )


def _menu_item_alert(menu_item: MenuItem) -> LowStockAlertOutput:
    return LowStockAlertOutput(
        kind="menu_item",
        id=menu_item.id,
        name=menu_item.name,
        current=Decimal(menu_item.current_stock),
        threshold=Decimal(menu_item.low_stock_threshold),
    )
