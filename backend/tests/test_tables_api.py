"""
Tests for the tables HTTP API.
"""

from datetime import datetime, timezone

from rest_api.models import Reservation


class TestTableStatusEndpoints:
    def test_all_tables(self, client, seed_tables):
        response = client.get("/api/tables/status")

        assert response.status_code == 200
        data = response.json()
        assert [t["table_number"] for t in data["tables"]] == [1, 2, 3]
        assert data["summary"]["available"] == 3

    def test_single_table(self, client, seed_tables):
        response = client.get(f"/api/tables/{seed_tables[0].id}/status")

        assert response.status_code == 200
        assert response.json()["is_available"] is True

    def test_manual_status(self, client, seed_tables):
        response = client.patch(f"/api/tables/{seed_tables[0].id}/status", json={"status": "reserved"})

        assert response.status_code == 200
        assert response.json()["status"] == "reserved"
        assert client.patch(f"/api/tables/{seed_tables[0].id}/status", json={"status": "gone"}).status_code == 400

    def test_missing_table(self, client, seed_tables):
        assert client.get("/api/tables/99/status").status_code == 404


class TestAvailabilityEndpoints:
    def test_search(self, client, seed_tables, seed_menu):
        client.post(
            "/api/orders",
            json={
                "table_id": seed_tables[1].id,
                "order_items": [{"menu_item_id": seed_menu["burger"].id, "quantity": 1}],
            },
        )

        response = client.post("/api/tables/availability/search", json={"party_size": 4})

        assert response.status_code == 200
        data = response.json()
        assert [t["capacity"] for t in data["available_tables"]] == [6]
        assert data["count"] == 1
        assert data["duration_minutes"] == 120

    def test_search_requires_party_size(self, client, seed_tables):
        response = client.post("/api/tables/availability/search", json={})

        assert response.status_code == 400
        assert "party_size" in response.json()["detail"]

    def test_check_with_reservation(self, client, db_session, seed_tables):
        db_session.add(
            Reservation(
                table_id=seed_tables[0].id,
                customer_name="Luis",
                customer_phone="555-0100",
                reservation_time=datetime(2030, 6, 1, 20, 0, tzinfo=timezone.utc),
                number_of_guests=2,
                status="confirmed",
            )
        )
        db_session.commit()

        response = client.get(
            f"/api/tables/availability/{seed_tables[0].id}",
            params={"datetime": "2030-06-01T21:00:00Z", "duration": 90},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["available"] is False
        assert len(data["conflicting_reservations"]) == 1

    def test_check_missing_table(self, client, seed_tables):
        assert client.get("/api/tables/availability/99").status_code == 404
        assert client.get("/api/tables/availability/99/immediate").status_code == 404

    def test_immediate(self, client, seed_tables):
        response = client.get(f"/api/tables/availability/{seed_tables[0].id}/immediate")

        assert response.status_code == 200
        assert response.json() == {
            "table_id": seed_tables[0].id,
            "can_accept": True,
            "reason": None,
            "active_order_id": None,
        }
