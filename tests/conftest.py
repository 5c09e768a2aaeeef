"""
Shared pytest fixtures for the console tests.

The remote backend is replaced by an in-memory fake served through
httpx.MockTransport and injected by overriding get_http_client, so every
request the console forwards can be inspected.
"""
import json
import uuid
from datetime import date, datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from jose import jwt

from swap_console.api.deps import get_http_client
from swap_console.main import app

BACKEND_URL = "http://backend.test/api"


# ── Fake backend ──────────────────────────────────────────────────────────────

def _envelope(data, status_code: int = 200, message: str = "OK") -> httpx.Response:
    return httpx.Response(status_code, json={"success": True, "message": message, "data": data})


def _failure(status_code: int, message: str) -> httpx.Response:
    return httpx.Response(status_code, json={"success": False, "message": message})


class FakeBackend:
    """Answers the endpoints the console calls from plain dicts in backend format."""

    def __init__(self):
        self.schedules: list[dict] = []
        self.my_schedules: list[dict] = []
        self.stations: list[dict] = []
        self.batteries: list[dict] = []
        self.transfers: list[dict] = []
        self.requests: list[httpx.Request] = []
        self.fail_with: tuple[int, str] | None = None

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests
                if r.method == method and r.url.path == f"/api{path}"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with:
            return _failure(*self.fail_with)

        path = request.url.path.removeprefix("/api")
        method = request.method
        params = request.url.params

        if path == "/admin/staff-schedules" and method == "GET":
            rows = [
                s for s in self.schedules
                if (not params.get("staff_id") or s["staff_id"] == params["staff_id"])
                and (not params.get("shift_date") or s["shift_date"].startswith(params["shift_date"]))
            ]
            limit = int(params.get("limit", 10))
            return _envelope({
                "schedules": rows,
                "pagination": {"page": 1, "limit": limit, "total": len(rows), "pages": 1},
            })

        if path == "/admin/staff-schedules" and method == "POST":
            body = json.loads(request.content)
            row = {**body, "schedule_id": f"sch-{uuid.uuid4().hex[:6]}",
                   "shift_date": f"{body['shift_date']}T00:00:00.000Z"}
            self.schedules.append(row)
            return _envelope(row, 201, "Staff schedule created")

        if path.startswith("/admin/staff-schedules/"):
            schedule_id = path.rsplit("/", 1)[1]
            row = next((s for s in self.schedules if s["schedule_id"] == schedule_id), None)
            if row is None:
                return _failure(404, "Schedule not found")
            if method == "GET":
                return _envelope(row)
            if method == "PUT":
                body = json.loads(request.content)
                row.update(body, shift_date=f"{body['shift_date']}T00:00:00.000Z")
                return _envelope(row, message="Staff schedule updated")
            if method == "DELETE":
                self.schedules.remove(row)
                return httpx.Response(200, json={"success": True, "message": "Staff schedule deleted"})

        if path == "/admin/battery-transfers" and method == "GET":
            rows = [
                t for t in self.transfers
                if (not params.get("status") or t["transfer_status"] == params["status"])
                and (not params.get("batteryId") or t["battery_id"] == params["batteryId"])
            ]
            limit = int(params.get("limit", 10))
            return _envelope({
                "transfers": rows,
                "pagination": {"page": 1, "limit": limit, "total": len(rows), "pages": 1},
            })

        if path == "/admin/battery-transfers" and method == "POST":
            body = json.loads(request.content)
            battery = next(b for b in self.batteries if b["battery_id"] == body["battery_id"])
            row = {
                "transfer_id": f"tr-{uuid.uuid4().hex[:6]}",
                "battery_id": body["battery_id"],
                "from_station_id": battery.get("station_id"),
                "to_station_id": body["to_station_id"],
                "transfer_status": body.get("transfer_status", "completed"),
                "transfer_reason": body["transfer_reason"],
                "notes": body.get("notes"),
                "transferred_by": "admin-1",
                "batteries": {"battery_id": battery["battery_id"], "model": battery.get("model")},
            }
            battery["station_id"] = body["to_station_id"]
            self.transfers.append(row)
            return _envelope(row, 201, "Battery transfer recorded successfully")

        if path.startswith("/admin/battery-transfers/"):
            transfer_id = path.split("/")[3]
            row = next((t for t in self.transfers if t["transfer_id"] == transfer_id), None)
            if row is None:
                return _failure(404, "Battery transfer log not found")
            if method == "GET":
                return _envelope(row)
            if method == "PATCH":
                body = json.loads(request.content)
                row["transfer_status"] = body["status"]
                return _envelope(row)
            if method == "PUT":
                row.update(json.loads(request.content))
                return _envelope(row)
            if method == "DELETE":
                self.transfers.remove(row)
                return httpx.Response(200, json={"success": True, "message": "Deleted"})

        if path == "/staff/schedules" and method == "GET":
            return _envelope(self.my_schedules)

        if path.startswith("/staff/schedules/") and method == "PATCH":
            schedule_id = path.split("/")[3]
            row = next((s for s in self.my_schedules if s["schedule_id"] == schedule_id), None)
            if row is None:
                return _failure(404, "Schedule not found")
            body = json.loads(request.content)
            row["status"] = body["status"]
            if "notes" in body:
                row["notes"] = body["notes"]
            return _envelope(row, message="Schedule status updated")

        if path == "/admin/stations" and method == "GET":
            return _envelope({"stations": self.stations})

        if path == "/admin/batteries/low-health" and method == "GET":
            threshold = float(params.get("threshold", 70))
            low = [b for b in self.batteries if b["health_percentage"] < threshold]
            return _envelope({"batteries": low, "threshold": threshold, "count": len(low)})

        if path == "/admin/batteries" and method == "GET":
            return _envelope({"batteries": self.batteries})

        return _failure(404, "Route not found")


def make_schedule(
    staff_id: str,
    shift_date: str,
    start: str,
    end: str,
    schedule_id: str | None = None,
    status: str = "scheduled",
    staff_name: str | None = None,
) -> dict:
    """A schedule row as the backend returns it (wall clock tagged as UTC)."""
    day = date.fromisoformat(shift_date)
    end_day = day + timedelta(days=1) if end <= start else day
    row = {
        "schedule_id": schedule_id or f"sch-{uuid.uuid4().hex[:6]}",
        "staff_id": staff_id,
        "station_id": None,
        "shift_date": f"{shift_date}T00:00:00.000Z",
        "shift_start": f"{shift_date}T{start}:00.000Z",
        "shift_end": f"{end_day.isoformat()}T{end}:00.000Z",
        "status": status,
        "notes": None,
    }
    if staff_name:
        row["users"] = {"user_id": staff_id, "full_name": staff_name, "email": f"{staff_id}@evswap.vn"}
    return row


# ── HTTP client fixtures ──────────────────────────────────────────────────────

@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest_asyncio.fixture
async def backend_http(backend) -> httpx.AsyncClient:
    http = httpx.AsyncClient(base_url=BACKEND_URL, transport=httpx.MockTransport(backend.handler))
    yield http
    await http.aclose()


@pytest_asyncio.fixture
async def client(backend_http) -> AsyncClient:
    """Console test client whose backend calls go to the fake."""
    app.dependency_overrides[get_http_client] = lambda: backend_http

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


# ── Token fixtures ────────────────────────────────────────────────────────────

def make_token(role: str, user_id: str, expires_in: timedelta = timedelta(minutes=15)) -> str:
    payload = {
        "userId": user_id,
        "email": f"{user_id}@evswap.vn",
        "role": role,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, "backend-secret-not-known-to-console", algorithm="HS256")


@pytest.fixture
def admin_token() -> str:
    return make_token("ADMIN", "admin-1")


@pytest.fixture
def staff_token() -> str:
    return make_token("STAFF", "s1")


# ── Helper ────────────────────────────────────────────────────────────────────

def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
