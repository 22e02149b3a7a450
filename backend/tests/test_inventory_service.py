"""
Tests for the inventory ledger service.
"""

from decimal import Decimal

import pytest

from rest_api.models import InventoryItem
from rest_api.services.domain import InventoryService, OrderService, RecipeResolver
from shared.utils.exceptions import (
    InvalidStateError,
    InventoryAlreadyDeductedError,
    InventoryInUseError,
    InventoryItemNotFoundError,
    OrderNotFoundError,
    ValidationError,
)
from shared.utils.schemas import BulkInventoryUpdate


@pytest.fixture
def placed_order(db_session, seed_tables, order_lines):
    order, _ = OrderService(db_session).create_complete_order(seed_tables[0].id, order_lines)
    return order


class TestRecipeResolver:
    def test_resolves_ingredients_per_unit(self, db_session, seed_menu, seed_inventory):
        requirements = RecipeResolver(db_session).resolve(seed_menu["burger"].id)

        assert {r.inventory_item_id for r in requirements} == {
            seed_inventory["patty"].id,
            seed_inventory["bun"].id,
        }
        assert all(r.quantity_per_unit == Decimal("1") for r in requirements)

    def test_item_without_recipe(self, db_session, seed_menu):
        assert RecipeResolver(db_session).resolve(seed_menu["lemonade"].id) == []


class TestOrderLedger:
    """Order-level deduct/restore guarded by the order's deducted flag."""

    def test_double_deduct_is_rejected(self, db_session, placed_order, seed_inventory):
        with pytest.raises(InventoryAlreadyDeductedError):
            InventoryService(db_session).deduct_for_order(placed_order.id)

        assert seed_inventory["patty"].quantity == Decimal("8")

    def test_restore_then_deduct_round_trip(self, db_session, placed_order, seed_menu, seed_inventory):
        service = InventoryService(db_session)

        restored = service.restore_for_order(placed_order.id)
        assert restored.applied is True
        assert seed_inventory["patty"].quantity == Decimal("10")
        assert seed_menu["lemonade"].current_stock == 20

        deducted = service.deduct_for_order(placed_order.id)
        assert deducted.applied is True
        assert seed_inventory["patty"].quantity == Decimal("8")
        assert seed_inventory["bun"].quantity == Decimal("28")
        assert seed_menu["lemonade"].current_stock == 19

    def test_restore_is_idempotent(self, db_session, placed_order, seed_inventory):
        service = InventoryService(db_session)
        service.restore_for_order(placed_order.id)

        second = service.restore_for_order(placed_order.id)

        assert second.applied is False
        assert second.changes == []
        assert seed_inventory["patty"].quantity == Decimal("10")

    def test_restore_after_cancel_is_a_noop(self, db_session, placed_order, seed_inventory):
        OrderService(db_session).cancel_order(placed_order.id)

        result = InventoryService(db_session).restore_for_order(placed_order.id)

        assert result.applied is False
        assert seed_inventory["patty"].quantity == Decimal("10")

    def test_deduct_rejected_for_cancelled_order(self, db_session, placed_order, seed_inventory):
        OrderService(db_session).cancel_order(placed_order.id)

        with pytest.raises(InvalidStateError):
            InventoryService(db_session).deduct_for_order(placed_order.id)

        assert placed_order.inventory_deducted is False
        assert seed_inventory["patty"].quantity == Decimal("10")

    def test_missing_order(self, db_session):
        with pytest.raises(OrderNotFoundError):
            InventoryService(db_session).restore_for_order(123)

    def test_deduction_clamps_at_zero(self, db_session, seed_tables, seed_menu, seed_inventory):
        from shared.utils.schemas import OrderItemInput

        lines = [OrderItemInput(menu_item_id=seed_menu["burger"].id, quantity=12)]
        OrderService(db_session).create_complete_order(seed_tables[0].id, lines)

        assert seed_inventory["patty"].quantity == Decimal("0")

    def test_menu_item_sold_out_becomes_unavailable(self, db_session, seed_tables, seed_menu):
        from shared.utils.schemas import OrderItemInput

        seed_menu["lemonade"].current_stock = 2
        db_session.commit()
        lines = [OrderItemInput(menu_item_id=seed_menu["lemonade"].id, quantity=2)]

        _, alerts = OrderService(db_session).create_complete_order(seed_tables[0].id, lines)

        assert seed_menu["lemonade"].current_stock == 0
        assert seed_menu["lemonade"].is_available is False
        assert alerts[0].kind == "menu_item"


class TestMenuItemAvailability:
    def test_available(self, db_session, seed_menu):
        result = InventoryService(db_session).check_menu_item_availability(seed_menu["burger"].id, 5)

        assert result.available is True
        assert result.missing_ingredients == []

    def test_reports_every_missing_ingredient(self, db_session, seed_menu, seed_inventory):
        seed_inventory["bun"].quantity = Decimal("5")
        db_session.commit()

        result = InventoryService(db_session).check_menu_item_availability(seed_menu["burger"].id, 11)

        assert result.available is False
        assert {m.item_name for m in result.missing_ingredients} == {"Beef patty", "Bun"}
        patty = next(m for m in result.missing_ingredients if m.item_name == "Beef patty")
        assert patty.required == Decimal("11")
        assert patty.available == Decimal("10")

    def test_tracked_stock_too_low(self, db_session, seed_menu):
        result = InventoryService(db_session).check_menu_item_availability(seed_menu["lemonade"].id, 25)

        assert result.available is False
        assert "Insufficient stock" in result.reason

    def test_unavailable_menu_item(self, db_session, seed_menu):
        seed_menu["burger"].is_available = False
        db_session.commit()

        result = InventoryService(db_session).check_menu_item_availability(seed_menu["burger"].id)

        assert result.available is False
        assert result.reason == "Menu item is not available"

    def test_unknown_menu_item(self, db_session):
        result = InventoryService(db_session).check_menu_item_availability(77)

        assert result.available is False
        assert result.reason == "Menu item not found"


class TestManualAdjustments:
    @pytest.mark.parametrize(
        "action,quantity,expected",
        [
            ("add", "5", Decimal("15")),
            ("subtract", "4", Decimal("6")),
            ("subtract", "20", Decimal("0")),
            ("set", "7.5", Decimal("7.5")),
        ],
    )
    def test_actions(self, db_session, seed_inventory, action, quantity, expected):
        patty = seed_inventory["patty"]

        result = InventoryService(db_session).update_inventory_item(
            patty.id, Decimal(quantity), action, reason="Stock count"
        )

        assert result.old_quantity == Decimal("10")
        assert result.new_quantity == expected
        assert patty.quantity == expected

    def test_unknown_action(self, db_session, seed_inventory):
        with pytest.raises(ValidationError):
            InventoryService(db_session).update_inventory_item(
                seed_inventory["patty"].id, Decimal("1"), "multiply"
            )

    def test_negative_quantity(self, db_session, seed_inventory):
        with pytest.raises(ValidationError):
            InventoryService(db_session).update_inventory_item(
                seed_inventory["patty"].id, Decimal("-1"), "add"
            )

    def test_missing_item(self, db_session):
        with pytest.raises(InventoryItemNotFoundError):
            InventoryService(db_session).update_inventory_item(404, Decimal("1"), "add")


class TestBulkUpdate:
    def test_failures_do_not_block_the_rest(self, db_session, seed_inventory):
        updates = [
            BulkInventoryUpdate(inventory_id=seed_inventory["patty"].id, quantity=Decimal("5")),
            BulkInventoryUpdate(inventory_id=999, quantity=Decimal("1")),
            BulkInventoryUpdate(
                inventory_id=seed_inventory["bun"].id, quantity=Decimal("12"), action="set"
            ),
        ]

        response = InventoryService(db_session).bulk_update(updates)

        assert response.summary.total == 3
        assert response.summary.successful == 2
        assert response.summary.failed == 1
        assert [r.success for r in response.results] == [True, False, True]
        assert response.results[0].reason == "Bulk update"
        assert "not found" in response.results[1].error
        assert seed_inventory["patty"].quantity == Decimal("15")
        assert seed_inventory["bun"].quantity == Decimal("12")

    def test_invalid_entry_is_reported(self, db_session, seed_inventory):
        updates = [
            BulkInventoryUpdate(inventory_id=seed_inventory["patty"].id, quantity=Decimal("1"), action="explode"),
            BulkInventoryUpdate(inventory_id=seed_inventory["rice"].id, quantity=Decimal("-2")),
        ]

        response = InventoryService(db_session).bulk_update(updates)

        assert response.summary.failed == 2
        assert seed_inventory["patty"].quantity == Decimal("10")
        assert seed_inventory["rice"].quantity == Decimal("3")

    def test_malformed_entry_fails_alone(self, db_session, seed_inventory):
        updates = [
            BulkInventoryUpdate(inventory_id=seed_inventory["patty"].id, quantity=5),
            BulkInventoryUpdate(inventory_id=seed_inventory["bun"].id, quantity="lots"),
            BulkInventoryUpdate(inventory_id="rice", quantity=1),
            BulkInventoryUpdate(inventory_id=seed_inventory["rice"].id, quantity=1, action=None),
        ]

        response = InventoryService(db_session).bulk_update(updates)

        assert [r.success for r in response.results] == [True, False, False, True]
        assert response.results[1].error == "Quantity must be a number"
        assert response.results[2].error == "Inventory id must be an integer"
        assert seed_inventory["patty"].quantity == Decimal("15")
        assert seed_inventory["bun"].quantity == Decimal("30")
        assert seed_inventory["rice"].quantity == Decimal("4")


class TestDeleteInventoryItem:
    def test_used_by_recipe(self, db_session, seed_menu, seed_inventory):
        with pytest.raises(InventoryInUseError):
            InventoryService(db_session).delete_inventory_item(seed_inventory["patty"].id)

        assert db_session.get(InventoryItem, seed_inventory["patty"].id) is not None

    def test_unused_item_is_deleted(self, db_session, seed_menu, seed_inventory):
        rice_id = seed_inventory["rice"].id

        InventoryService(db_session).delete_inventory_item(rice_id)

        assert db_session.get(InventoryItem, rice_id) is None

    def test_missing_item(self, db_session):
        with pytest.raises(InventoryItemNotFoundError):
            InventoryService(db_session).delete_inventory_item(5)


class TestReports:
    def test_low_stock_alerts(self, db_session, seed_menu, seed_inventory):
        seed_menu["lemonade"].current_stock = 4
        db_session.commit()

        alerts = InventoryService(db_session).get_low_stock_alerts()

        assert [(a.kind, a.name) for a in alerts] == [
            ("menu_item", "Lemonade"),
            ("inventory", "Rice"),
        ]
        assert alerts[1].threshold == Decimal("5")

    def test_statistics(self, db_session, seed_inventory):
        stats = InventoryService(db_session).get_statistics()

        assert stats.total_items == 3
        assert stats.total_value == Decimal("28.50")
        assert stats.low_stock_items == 1
        assert stats.out_of_stock_items == 0
        assert stats.low_stock_percentage == pytest.approx(33.33)
        assert {c.category for c in stats.categories} == {"meat", "bakery", "dry goods"}

    def test_reorder_suggestions(self, db_session, seed_inventory):
        seed_inventory["patty"].quantity = Decimal("0")
        db_session.commit()

        suggestions = InventoryService(db_session).get_reorder_suggestions()

        assert [s.item_name for s in suggestions] == ["Beef patty", "Rice"]
        patty, rice = suggestions
        assert patty.urgency == "critical"
        assert patty.suggested_quantity == Decimal("20")
        assert patty.estimated_cost == Decimal("30.00")
        # No reorder quantity configured: top up to twice the minimum
        assert rice.suggested_quantity == Decimal("7")
        assert rice.urgency == "medium"
