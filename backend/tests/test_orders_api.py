"""
Tests for the orders HTTP API.
"""

from decimal import Decimal

import pytest


@pytest.fixture
def order_payload(seed_tables, seed_menu):
    return {
        "table_id": seed_tables[0].id,
        "order_items": [
            {"menu_item_id": seed_menu["burger"].id, "quantity": 2},
            {"menu_item_id": seed_menu["lemonade"].id, "quantity": 1, "special_instructions": "No ice"},
        ],
        "customer_notes": "Birthday",
    }


@pytest.fixture
def created_order(client, order_payload):
    response = client.post("/api/orders", json=order_payload)
    assert response.status_code == 201
    return response.json()["order"]


class TestCreateOrderEndpoint:
    def test_create_order(self, client, order_payload):
        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["order"]["total_amount"]) == Decimal("13.50")
        assert data["order"]["status"] == "pending"
        assert data["order"]["table_number"] == 1
        assert data["order"]["inventory_deducted"] is True
        assert len(data["items"]) == 2
        assert data["items"][1]["special_instructions"] == "No ice"
        assert data["alerts"] == []

    def test_occupied_table(self, client, order_payload, created_order):
        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 400
        assert "occupied" in response.json()["detail"]

    def test_unknown_menu_item(self, client, order_payload):
        order_payload["order_items"].append({"menu_item_id": 999, "quantity": 1})

        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 404
        assert client.get("/api/orders").json()["pagination"]["total_orders"] == 0

    def test_unknown_table(self, client, order_payload):
        order_payload["table_id"] = 999

        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 404

    @pytest.mark.parametrize(
        "change",
        [
            {"order_items": []},
            {"table_id": None},
            {"order_items": [{"menu_item_id": 1, "quantity": 0}]},
        ],
    )
    def test_malformed_body(self, client, order_payload, change):
        order_payload.update(change)

        response = client.post("/api/orders", json=order_payload)

        assert response.status_code == 400
        assert response.json()["detail"]


class TestReadOrders:
    def test_get_order(self, client, created_order):
        response = client.get(f"/api/orders/{created_order['id']}")

        assert response.status_code == 200
        assert response.json()["customer_notes"] == "Birthday"

    def test_get_missing_order(self, client, seed_tables):
        response = client.get("/api/orders/123")

        assert response.status_code == 404
        assert response.json()["detail"] == "Order with ID 123 not found"

    def test_list_with_pagination(self, client, created_order):
        response = client.get("/api/orders", params={"status": "pending", "page": 1, "limit": 5})

        assert response.status_code == 200
        data = response.json()
        assert [o["id"] for o in data["orders"]] == [created_order["id"]]
        assert data["pagination"] == {
            "current_page": 1,
            "total_pages": 1,
            "total_orders": 1,
            "has_next": False,
            "has_prev": False,
        }

    def test_list_invalid_status(self, client, seed_tables):
        assert client.get("/api/orders", params={"status": "lost"}).status_code == 400

    def test_by_status(self, client, created_order):
        response = client.get("/api/orders/status/pending")

        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_kitchen_display(self, client, created_order):
        response = client.get("/api/orders/kitchen/display")

        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [created_order["id"]]

    def test_preparation_time(self, client, created_order):
        response = client.get(f"/api/orders/{created_order['id']}/preparation-time")

        assert response.status_code == 200
        assert response.json()["estimated_minutes"] == 8

    def test_statistics_and_today(self, client, created_order):
        stats = client.get("/api/orders/statistics").json()
        today = client.get("/api/orders/today").json()

        assert stats["total_orders"] == 1
        assert Decimal(stats["total_revenue"]) == Decimal("13.50")
        assert today["counts"]["pending"] == 1


class TestOrderMutations:
    def test_status_flow(self, client, created_order):
        order_id = created_order["id"]

        assert client.patch(f"/api/orders/{order_id}/status", json={"status": "in_progress"}).status_code == 200
        response = client.patch(f"/api/orders/{order_id}/status", json={"status": "completed"})
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

        response = client.patch(f"/api/orders/{order_id}/status", json={"status": "pending"})
        assert response.status_code == 400
        assert "Invalid status transition" in response.json()["detail"]

        tables = client.get("/api/tables/status").json()
        assert tables["tables"][0]["status"] == "available"

    def test_unknown_status_value(self, client, created_order):
        response = client.patch(f"/api/orders/{created_order['id']}/status", json={"status": "eaten"})

        assert response.status_code == 400

    def test_cancel(self, client, created_order):
        response = client.patch(
            f"/api/orders/{created_order['id']}/cancel",
            json={"cancellation_reason": "Kitchen closed"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "cancelled"
        assert data["cancellation_reason"] == "Kitchen closed"
        assert data["inventory_deducted"] is False

        again = client.patch(f"/api/orders/{created_order['id']}/cancel", json={})
        assert again.status_code == 400

    def test_delete_cancels(self, client, created_order):
        response = client.delete(f"/api/orders/{created_order['id']}")

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert client.get(f"/api/orders/{created_order['id']}").status_code == 200

    def test_update_order(self, client, created_order, seed_tables):
        response = client.put(
            f"/api/orders/{created_order['id']}",
            json={"table_id": seed_tables[2].id, "preparation_notes": "Well done"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["table_number"] == 3
        assert data["preparation_notes"] == "Well done"

    def test_add_and_remove_items(self, client, created_order, seed_menu):
        order_id = created_order["id"]

        response = client.post(
            f"/api/orders/{order_id}/items",
            json={"order_items": [{"menu_item_id": seed_menu["lemonade"].id, "quantity": 2}]},
        )
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["order"]["total_amount"]) == Decimal("20.50")
        assert data["alerts"] == []

        burger_line = data["items"][0]
        response = client.delete(f"/api/orders/{order_id}/items/{burger_line['id']}")
        assert response.status_code == 200
        assert Decimal(response.json()["total_amount"]) == Decimal("10.50")

        assert client.delete(f"/api/orders/{order_id}/items/{burger_line['id']}").status_code == 404

    def test_add_items_returns_low_stock_alerts(self, client, created_order, seed_menu):
        response = client.post(
            f"/api/orders/{created_order['id']}/items",
            json={"order_items": [{"menu_item_id": seed_menu["burger"].id, "quantity": 3}]},
        )

        assert response.status_code == 200
        data = response.json()
        assert [(a["kind"], a["name"]) for a in data["alerts"]] == [("inventory", "Beef patty")]
        assert Decimal(data["alerts"][0]["current"]) == Decimal("5")
        assert len(data["items"]) == 3

    def test_item_status(self, client, created_order):
        item_id = created_order["items"][0]["id"]

        response = client.patch(
            f"/api/orders/{created_order['id']}/items/{item_id}/status",
            json={"item_status": "ready"},
        )

        assert response.status_code == 200
        assert response.json()["item_status"] == "ready"
