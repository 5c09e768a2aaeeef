"""
Client for the remote battery-swap REST backend.

Every call forwards the caller's access token. Responses use the backend's
``{success, message, data}`` envelope; ``data`` is decoded into typed models
here so nothing downstream has to guess at field presence.
"""
import logging
from datetime import date
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from swap_console.core.config import settings
from swap_console.schemas.battery import Battery, Station
from swap_console.schemas.schedule import (
    ExistingShift, Pagination, ScheduleListParams, ShiftPayload,
)
from swap_console.schemas.transfer import BatteryTransfer, TransferListParams, TransferPayload
from swap_console.services.backend_errors import (
    SCHEDULE_SAVE_FAILED, BackendErrorKind, classify, user_message,
)
from swap_console.utils.facility_time import day_end_wire

logger = logging.getLogger(__name__)

_shift_list = TypeAdapter(list[ExistingShift])
_battery_list = TypeAdapter(list[Battery])
_station_list = TypeAdapter(list[Station])
_transfer_list = TypeAdapter(list[BatteryTransfer])

# Large enough to fetch the whole fleet in one page
FLEET_PAGE_LIMIT = 1000


class BackendError(Exception):
    def __init__(self, kind: BackendErrorKind, status_code: int | None = None,
                 message: str | None = None, failure_message: str | None = None):
        self.kind = kind
        self.status_code = status_code
        self.message = message
        # Replaces the generic text for unrecognized failures of a specific operation
        self.failure_message = failure_message
        super().__init__(message or kind.value)

    @property
    def user_message(self) -> str:
        if self.kind == BackendErrorKind.UNKNOWN and self.failure_message:
            return self.failure_message
        return user_message(self.kind)


class BackendClient:

    def __init__(self, http: httpx.AsyncClient, access_token: str | None = None):
        self.http = http
        self.access_token = access_token

    # ── Staff schedules (admin) ──────────────────────────────────────────────

    async def list_schedules(
        self, params: ScheduleListParams | None = None,
    ) -> tuple[list[ExistingShift], Pagination]:
        query = params.to_query() if params else {}
        data = await self._request("GET", "/admin/staff-schedules", params=query)
        if not isinstance(data, dict):
            data = {"schedules": data}
        schedules = self._decode(_shift_list, data.get("schedules") or [])
        pagination = self._decode(Pagination, data.get("pagination") or {})
        return schedules, pagination

    async def list_staff_schedules(self, staff_id: str, **filters: Any) -> list[ExistingShift]:
        """All schedules of one staff member, as needed for conflict checks."""
        params = ScheduleListParams(
            staff_id=staff_id, page=1, limit=settings.SCHEDULE_FETCH_LIMIT, **filters,
        )
        schedules, _ = await self.list_schedules(params)
        return schedules

    async def get_schedule(self, schedule_id: str) -> ExistingShift:
        data = await self._request("GET", f"/admin/staff-schedules/{schedule_id}")
        return self._decode(ExistingShift, data)

    async def create_schedule(self, payload: ShiftPayload) -> ExistingShift:
        data = await self._request(
            "POST", "/admin/staff-schedules", json=payload.model_dump(),
            failure_message=SCHEDULE_SAVE_FAILED,
        )
        return self._decode(ExistingShift, data, SCHEDULE_SAVE_FAILED)

    async def update_schedule(self, schedule_id: str, payload: ShiftPayload) -> ExistingShift:
        data = await self._request(
            "PUT", f"/admin/staff-schedules/{schedule_id}", json=payload.model_dump(),
            failure_message=SCHEDULE_SAVE_FAILED,
        )
        return self._decode(ExistingShift, data, SCHEDULE_SAVE_FAILED)

    async def delete_schedule(self, schedule_id: str) -> None:
        await self._request("DELETE", f"/admin/staff-schedules/{schedule_id}")

    # ── Staff schedules (self-service) ───────────────────────────────────────

    async def list_my_schedules(
        self,
        from_date: date | None = None,
        to_date: date | None = None,
        include_past: bool = False,
    ) -> list[ExistingShift]:
        query: dict[str, str] = {}
        if from_date:
            query["from"] = from_date.isoformat()
        if to_date:
            query["to"] = day_end_wire(to_date)
        if include_past:
            query["include_past"] = "true"
        data = await self._request("GET", "/staff/schedules", params=query)
        return self._decode(_shift_list, data or [])

    async def update_my_schedule_status(
        self, schedule_id: str, status: str, notes: str | None = None,
    ) -> ExistingShift:
        body: dict[str, Any] = {"status": status}
        if notes is not None:
            body["notes"] = notes
        data = await self._request("PATCH", f"/staff/schedules/{schedule_id}/status", json=body)
        return self._decode(ExistingShift, data)

    # ── Warehouse ────────────────────────────────────────────────────────────

    async def list_stations(self) -> list[Station]:
        data = await self._request("GET", "/admin/stations", params={"limit": FLEET_PAGE_LIMIT})
        if isinstance(data, dict):
            data = data.get("stations") or []
        return self._decode(_station_list, data)

    async def list_batteries(self) -> list[Battery]:
        data = await self._request("GET", "/admin/batteries", params={"limit": FLEET_PAGE_LIMIT})
        if isinstance(data, dict):
            data = data.get("batteries") or []
        return self._decode(_battery_list, data)

    async def low_health_batteries(self, threshold: int) -> list[Battery]:
        data = await self._request(
            "GET", "/admin/batteries/low-health", params={"threshold": threshold},
        )
        batteries = data.get("batteries") if isinstance(data, dict) else data
        return self._decode(_battery_list, batteries or [])

    # ── Battery transfers ────────────────────────────────────────────────────

    async def list_transfers(
        self, params: TransferListParams | None = None,
    ) -> tuple[list[BatteryTransfer], Pagination]:
        query = params.to_query() if params else {}
        data = await self._request("GET", "/admin/battery-transfers", params=query)
        if not isinstance(data, dict):
            data = {"transfers": data}
        transfers = self._decode(_transfer_list, data.get("transfers") or [])
        pagination = self._decode(Pagination, data.get("pagination") or {})
        return transfers, pagination

    async def get_transfer(self, transfer_id: str) -> BatteryTransfer:
        data = await self._request("GET", f"/admin/battery-transfers/{transfer_id}")
        return self._decode(BatteryTransfer, data)

    async def create_transfer(self, payload: TransferPayload) -> BatteryTransfer:
        data = await self._request(
            "POST", "/admin/battery-transfers", json=payload.model_dump(exclude_none=True),
        )
        return self._decode(BatteryTransfer, data)

    async def update_transfer(self, transfer_id: str, changes: dict[str, Any]) -> BatteryTransfer:
        data = await self._request("PUT", f"/admin/battery-transfers/{transfer_id}", json=changes)
        return self._decode(BatteryTransfer, data)

    async def update_transfer_status(
        self, transfer_id: str, status: str, notes: str | None = None,
    ) -> BatteryTransfer:
        body: dict[str, Any] = {"status": status}
        if notes:
            body["notes"] = notes
        data = await self._request(
            "PATCH", f"/admin/battery-transfers/{transfer_id}/status", json=body,
        )
        return self._decode(BatteryTransfer, data)

    async def delete_transfer(self, transfer_id: str) -> None:
        await self._request("DELETE", f"/admin/battery-transfers/{transfer_id}")

    # ── Transport ────────────────────────────────────────────────────────────

    async def _request(self, method: str, path: str, failure_message: str | None = None,
                       **kwargs: Any) -> Any:
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        try:
            resp = await self.http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Backend %s %s unreachable: %s", method, path, e)
            raise BackendError(BackendErrorKind.UNAVAILABLE, message=str(e)) from e

        body = _json_or_text(resp)
        if resp.is_error:
            message = _error_message(body) or resp.reason_phrase or "Request failed"
            logger.warning("Backend %s %s failed with %s: %s",
                           method, path, resp.status_code, message)
            raise BackendError(classify(message, resp.status_code), resp.status_code, message,
                               failure_message)

        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    @staticmethod
    def _decode(schema: Any, data: Any, failure_message: str | None = None) -> Any:
        try:
            if isinstance(schema, TypeAdapter):
                return schema.validate_python(data)
            return schema.model_validate(data)
        except ValidationError as e:
            logger.error("Unexpected backend payload: %s", e)
            raise BackendError(BackendErrorKind.UNKNOWN, message="Malformed backend response",
                               failure_message=failure_message) from e


def _json_or_text(resp: httpx.Response) -> Any:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _error_message(body: Any) -> str | None:
    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    if isinstance(body, str) and body:
        return body
    return None
