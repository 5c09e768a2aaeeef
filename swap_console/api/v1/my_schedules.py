from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from swap_console.api.deps import Backend, StaffSession
from swap_console.schemas.schedule import ScheduleOut, ScheduleStatusUpdate
from swap_console.services.schedule_board import to_out
from swap_console.utils.facility_time import from_wire

router = APIRouter(prefix="/staff/schedules", tags=["my-schedules"])

# Staff may close out their own shifts but never reschedule them
STAFF_SETTABLE_STATUSES = ("completed", "absent", "cancelled")


@router.get("", response_model=list[ScheduleOut])
async def list_my_schedules(
    staff: StaffSession,
    backend: Backend,
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    include_past: bool = Query(False),
):
    schedules = await backend.list_my_schedules(from_date, to_date, include_past)
    schedules.sort(key=lambda s: from_wire(s.shift_start))
    return [to_out(s) for s in schedules]


@router.patch("/{schedule_id}/status", response_model=ScheduleOut)
async def update_my_schedule_status(
    schedule_id: str, payload: ScheduleStatusUpdate, staff: StaffSession, backend: Backend,
):
    new_status = payload.status.strip().lower()
    if new_status not in STAFF_SETTABLE_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Không thể chuyển sang trạng thái '{payload.status}'",
        )
    updated = await backend.update_my_schedule_status(schedule_id, new_status, payload.notes)
    return to_out(updated)
