import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from swap_console.api.deps import AdminSession, Backend
from swap_console.core.config import settings
from swap_console.schemas.schedule import (
    CalendarOut, ExistingShift, ScheduleListOut, ScheduleListParams, ScheduleOut,
    ScheduleStatus, ShiftCheckOut, ShiftPayload, ShiftRequest,
)
from swap_console.services.backend_client import BackendClient
from swap_console.services.schedule_board import (
    CALENDAR_DAYS, calendar_month, filter_and_sort, to_out,
)
from swap_console.services.shift_validator import (
    MSG_CONFLICT, DurationError, NormalizedShift, ShiftInputError,
    detect_conflict, normalize_shift, validate_duration, validate_request,
)
from swap_console.utils.facility_time import facility_zone, to_wire

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/staff-schedules", tags=["staff-schedules"])

CALENDAR_FETCH_LIMIT = 1000


class ShiftCheckRequest(ShiftRequest):
    exclude_schedule_id: Optional[str] = None


# ── Helpers ──────────────────────────────────────────────────────────────────

def _parse_or_422(payload: ShiftRequest) -> tuple[date, NormalizedShift]:
    try:
        shift_date, start, end = validate_request(payload)
    except ShiftInputError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.errors)
    return shift_date, normalize_shift(shift_date, start, end)


async def _has_conflict(
    backend: BackendClient,
    payload: ShiftRequest,
    shift_date: date,
    normalized: NormalizedShift,
    exclude_schedule_id: str | None,
) -> bool:
    existing = await backend.list_staff_schedules(payload.staff_id, shift_date=shift_date)
    return detect_conflict(
        payload.staff_id, shift_date,
        normalized.absolute_start, normalized.absolute_end,
        existing, exclude_schedule_id,
    )


async def _prepare_submission(
    backend: BackendClient, payload: ShiftRequest, exclude_schedule_id: str | None = None,
) -> ShiftPayload:
    """Authoritative gate before create/update: input, duration, then conflicts."""
    shift_date, normalized = _parse_or_422(payload)

    try:
        validate_duration(normalized.absolute_start, normalized.absolute_end)
    except DurationError as e:
        logger.info("Rejected shift for staff %s: %.1fh", payload.staff_id, e.duration_hours)
        raise HTTPException(status_code=400, detail=e.message)

    if await _has_conflict(backend, payload, shift_date, normalized, exclude_schedule_id):
        logger.info("Rejected overlapping shift for staff %s on %s", payload.staff_id, shift_date)
        raise HTTPException(status_code=409, detail=MSG_CONFLICT)

    return ShiftPayload(
        staff_id=payload.staff_id,
        station_id=payload.station_id or None,
        shift_date=shift_date.isoformat(),
        shift_start=to_wire(normalized.absolute_start),
        shift_end=to_wire(normalized.absolute_end),
        status=payload.status,
        notes=payload.notes or "",
    )


# ── Routes ───────────────────────────────────────────────────────────────────

@router.get("", response_model=ScheduleListOut)
async def list_schedules(
    admin: AdminSession,
    backend: Backend,
    staff_id: Optional[str] = Query(None),
    station_id: Optional[str] = Query(None),
    shift_date: Optional[date] = Query(None),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    status_filter: Optional[ScheduleStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.SCHEDULE_FETCH_LIMIT, ge=1, le=CALENDAR_FETCH_LIMIT),
):
    params = ScheduleListParams(
        staff_id=staff_id, station_id=station_id, shift_date=shift_date,
        from_date=from_date, to_date=to_date, status=status_filter,
        page=page, limit=limit,
    )
    schedules, pagination = await backend.list_schedules(params)
    return ScheduleListOut(
        schedules=filter_and_sort(schedules, search=search, status=status_filter),
        pagination=pagination,
    )


@router.get("/calendar", response_model=CalendarOut)
async def schedule_calendar(
    admin: AdminSession,
    backend: Backend,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    staff_id: Optional[str] = Query(None),
    station_id: Optional[str] = Query(None),
):
    today = datetime.now(facility_zone()).date()
    year = year or today.year
    month = month or today.month

    first = date(year, month, 1)
    grid_start = first - timedelta(days=(first.weekday() + 1) % 7)
    params = ScheduleListParams(
        staff_id=staff_id, station_id=station_id,
        from_date=grid_start, to_date=grid_start + timedelta(days=CALENDAR_DAYS - 1),
        page=1, limit=CALENDAR_FETCH_LIMIT,
    )
    schedules, _pagination = await backend.list_schedules(params)
    return calendar_month(schedules, year, month)


@router.post("/check", response_model=ShiftCheckOut)
async def check_shift(payload: ShiftCheckRequest, admin: AdminSession, backend: Backend):
    """Live check while the form is edited. Never blocks; reports what submit would reject."""
    shift_date, normalized = _parse_or_422(payload)

    message = None
    duration_ok = True
    try:
        validate_duration(normalized.absolute_start, normalized.absolute_end)
    except DurationError as e:
        duration_ok = False
        message = e.message

    has_conflict = await _has_conflict(
        backend, payload, shift_date, normalized, payload.exclude_schedule_id,
    )
    if has_conflict and message is None:
        message = MSG_CONFLICT

    return ShiftCheckOut(
        is_overnight=normalized.is_overnight,
        absolute_start=normalized.absolute_start,
        absolute_end=normalized.absolute_end,
        duration_hours=round(normalized.duration_hours, 2),
        duration_ok=duration_ok,
        has_conflict=has_conflict,
        message=message,
    )


@router.get("/{schedule_id}", response_model=ScheduleOut)
async def get_schedule(schedule_id: str, admin: AdminSession, backend: Backend):
    return to_out(await backend.get_schedule(schedule_id))


@router.post("", response_model=ExistingShift, status_code=status.HTTP_201_CREATED)
async def create_schedule(payload: ShiftRequest, admin: AdminSession, backend: Backend):
    body = await _prepare_submission(backend, payload)
    return await backend.create_schedule(body)


@router.put("/{schedule_id}", response_model=ExistingShift)
async def update_schedule(schedule_id: str, payload: ShiftRequest, admin: AdminSession, backend: Backend):
    body = await _prepare_submission(backend, payload, exclude_schedule_id=schedule_id)
    return await backend.update_schedule(schedule_id, body)


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(schedule_id: str, admin: AdminSession, backend: Backend):
    await backend.delete_schedule(schedule_id)
