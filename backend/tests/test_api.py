"""
API tests for the estimate endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from app.main import app


@pytest.fixture
def client():
    return TestClient(app)


def _bedroom(**overrides):
    room = {
        "id": "bedroom",
        "name": "Bedroom",
        "length_feet": 12,
        "width_feet": 10,
        "height_feet": 8,
        "doors": [{"preset_id": "standard_door", "label": "Door", "width": 36, "height": 80}],
    }
    room.update(overrides)
    return room


class TestMetaEndpoints:
    """Tests for health and catalog endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_list_trades(self, client):
        response = client.get("/api/v1/estimates/trades")
        assert response.status_code == 200
        types = [t["type"] for t in response.json()["trades"]]
        assert types == ["drywall_hanging", "drywall_finishing", "painting"]

    def test_trade_catalog(self, client):
        response = client.get("/api/v1/estimates/trades/painting")
        assert response.status_code == 200
        assert "furniture_moving" in response.json()["addons"]

    def test_unknown_trade(self, client):
        response = client.get("/api/v1/estimates/trades/plumbing")
        assert response.status_code == 400


class TestRoomSqftEndpoint:
    def test_room_sqft(self, client):
        response = client.post("/api/v1/estimates/rooms/sqft", json=_bedroom())
        assert response.status_code == 200
        data = response.json()
        assert data["wall_sqft"] == 332
        assert data["total_sqft"] == 452
        assert data["gross_total_sqft"] == 472
        assert data["suggested_sheet_size"] == "4x8"

    def test_invalid_inches_rejected(self, client):
        response = client.post("/api/v1/estimates/rooms/sqft", json=_bedroom(length_inches=14))
        assert response.status_code == 422


class TestCalculateEndpoint:
    """Tests for the multi-trade calculation."""

    def test_room_based_estimate(self, client):
        response = client.post("/api/v1/estimates/calculate", json={
            "project_name": "Smith",
            "rooms": [_bedroom()],
            "painting": {"complexity": "complex", "addons": [{"addon_id": "furniture_moving"}]},
        })
        assert response.status_code == 200
        data = response.json()

        trades = data["totals"]["trades"]
        assert trades["painting"]["total"] == pytest.approx(2482.75)
        combined = sum(t["total"] for t in trades.values())
        assert data["totals"]["combined_total"] == pytest.approx(combined, abs=0.02)
        assert data["parameters"]["painting"]["range_low"] == trades["painting"]["total"]
        assert data["document"]["project_name"] == "Smith"

    def test_override_and_enabled_trades(self, client):
        response = client.post("/api/v1/estimates/calculate", json={
            "rooms": [_bedroom()],
            "enabled_trades": ["drywall_finishing"],
            "overrides": [{
                "room_id": "bedroom",
                "trade_type": "drywall_finishing",
                "include_ceiling": False,
            }],
        })
        assert response.status_code == 200
        trades = response.json()["totals"]["trades"]
        assert list(trades) == ["drywall_finishing"]
        assert trades["drywall_finishing"]["total"] == pytest.approx(332 * 0.55)

    def test_manual_mode(self, client):
        response = client.post("/api/v1/estimates/calculate", json={
            "input_mode": "manual",
            "manual_wall_sqft": 500,
            "manual_ceiling_sqft": 100,
            "enabled_trades": ["drywall_finishing"],
        })
        assert response.status_code == 200
        assert response.json()["totals"]["combined_total"] == pytest.approx(330)

    def test_custom_addon(self, client):
        response = client.post("/api/v1/estimates/calculate", json={
            "input_mode": "manual",
            "enabled_trades": ["painting"],
            "painting": {"addons": [{"name": "Permit", "price": 40, "quantity": 2}]},
        })
        assert response.status_code == 200
        assert response.json()["totals"]["combined_total"] == pytest.approx(80)

    def test_unknown_override_room(self, client):
        response = client.post("/api/v1/estimates/calculate", json={
            "rooms": [_bedroom()],
            "overrides": [{"room_id": "garage", "trade_type": "painting", "excluded": True}],
        })
        assert response.status_code == 400

    def test_unknown_addon(self, client):
        response = client.post("/api/v1/estimates/calculate", json={
            "painting": {"addons": [{"addon_id": "helicopter"}]},
        })
        assert response.status_code == 400

    def test_no_trades(self, client):
        response = client.post("/api/v1/estimates/calculate", json={"enabled_trades": []})
        assert response.status_code == 400


class TestExcelEndpoint:
    def test_export(self, client):
        response = client.post("/api/v1/estimates/export/excel", json={
            "project_name": "Smith",
            "rooms": [_bedroom()],
        })
        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert response.content[:2] == b"PK"
