"""
Property-based Testing with Hypothesis.
"""

from decimal import Decimal

from hypothesis import HealthCheck, assume, given, settings, strategies as st

from rest_api.routers._common.pagination import Pagination
from rest_api.services.domain import OrderService
from shared.utils.schemas import OrderItemInput
from shared.utils.validators import sanitize_text

PRICES = {"burger": Decimal("5.00"), "lemonade": Decimal("3.50")}

order_lines_strategy = st.lists(
    st.tuples(st.sampled_from(sorted(PRICES)), st.integers(min_value=1, max_value=3)),
    min_size=1,
    max_size=3,
)


class TestOrderProperties:
    """Property-based tests for the order lifecycle."""

    @given(lines=order_lines_strategy)
    @settings(
        max_examples=25,
        deadline=None,
        suppress_health_check=[HealthCheck.function_scoped_fixture],
    )
    def test_total_matches_lines_and_cancel_restores_stock(
        self, lines, db_session, seed_tables, seed_menu, seed_inventory
    ):
        """Property: total == sum(price * qty), and cancelling puts every unit back."""
        service = OrderService(db_session)
        patties_before = seed_inventory["patty"].quantity
        buns_before = seed_inventory["bun"].quantity
        lemonade_before = seed_menu["lemonade"].current_stock

        order, _ = service.create_complete_order(
            seed_tables[0].id,
            [OrderItemInput(menu_item_id=seed_menu[name].id, quantity=qty) for name, qty in lines],
        )

        expected = sum((PRICES[name] * qty for name, qty in lines), Decimal("0"))
        assert order.total_amount == expected
        assert order.total_amount == sum(i.price * i.quantity for i in order.items)

        service.cancel_order(order.id)

        assert seed_inventory["patty"].quantity == patties_before
        assert seed_inventory["bun"].quantity == buns_before
        assert seed_menu["lemonade"].current_stock == lemonade_before


class TestPaginationProperties:
    """Property-based tests for list pagination."""

    @given(
        page=st.integers(min_value=1, max_value=500),
        limit=st.integers(min_value=1, max_value=200),
        total=st.integers(min_value=0, max_value=10_000),
    )
    @settings(max_examples=50)
    def test_pages_cover_all_rows(self, page, limit, total):
        """Property: every row lands on exactly one page."""
        pagination = Pagination(page=page, limit=limit)
        info = pagination.to_dict(total=total)

        assert pagination.offset == (page - 1) * limit
        assert info["total_pages"] * limit >= total
        assert (info["total_pages"] - 1) * limit < total or total == 0
        assert info["has_next"] == (page < info["total_pages"])


class TestSanitizeProperties:
    @given(value=st.text(max_size=200))
    @settings(max_examples=50)
    def test_sanitize_is_idempotent(self, value):
        """Property: sanitizing twice changes nothing."""
        cleaned = sanitize_text(value)
        assume(cleaned is not None)

        assert sanitize_text(cleaned) == cleaned
        assert cleaned == cleaned.strip()
