"""
Tests für /api/v1/admin/warehouse – overview and low-health list.
"""
import pytest

from tests.conftest import auth_headers

URL = "/api/v1/admin/warehouse"


@pytest.fixture
def fleet(backend):
    backend.stations = [{"station_id": "st1", "name": "Trạm Quận 1", "status": "active", "capacity": 20}]
    backend.batteries = [
        {"battery_id": "b1", "model": "VF-48", "status": "full", "health_percentage": 95,
         "cycle_count": 20, "station_id": "st1"},
        {"battery_id": "b2", "model": "VF-48", "status": "charging", "health_percentage": 50,
         "cycle_count": 800, "station_id": "st1"},
    ]
    return backend


@pytest.mark.asyncio
async def test_overview(client, fleet, admin_token):
    resp = await client.get(URL, headers=auth_headers(admin_token))
    assert resp.status_code == 200
    data = resp.json()
    assert data["stations"][0]["battery_stats"]["total"] == 2
    assert data["stats"]["low_health_count"] == 1
    assert data["unassigned"] == []


@pytest.mark.asyncio
async def test_low_health_default_threshold(client, fleet, admin_token):
    resp = await client.get(f"{URL}/low-health", headers=auth_headers(admin_token))
    assert resp.json()["threshold"] == 70
    assert [b["battery_id"] for b in resp.json()["batteries"]] == ["b2"]


@pytest.mark.asyncio
async def test_low_health_custom_threshold(client, fleet, admin_token):
    resp = await client.get(f"{URL}/low-health", params={"threshold": 99}, headers=auth_headers(admin_token))
    assert len(resp.json()["batteries"]) == 2
    assert fleet.calls("GET", "/admin/batteries/low-health")[0].url.params["threshold"] == "99"


@pytest.mark.asyncio
async def test_staff_forbidden(client, staff_token):
    resp = await client.get(URL, headers=auth_headers(staff_token))
    assert resp.status_code == 403
