"""
Shift validation for the staff schedule manager.

Normalizes a (date, start, end) form entry into absolute instants in the
facility zone, applies the duration policy and detects overlaps with shifts
already scheduled for the same staff member. Everything here is pure and
synchronous; callers fetch the existing shifts and decide what to block.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable

from swap_console.core.config import settings
from swap_console.schemas.schedule import ExistingShift, ShiftRequest
from swap_console.utils.facility_time import (
    facility_zone, from_wire, minute_of_day, parse_hhmm, parse_iso_date,
)

VALID_STATUSES = ("scheduled", "completed", "absent", "cancelled")

MSG_STAFF_REQUIRED  = "Vui lòng chọn nhân viên"
MSG_DATE_REQUIRED   = "Vui lòng chọn ngày làm việc"
MSG_DATE_INVALID    = "Ngày làm việc không hợp lệ (YYYY-MM-DD)"
MSG_TIMES_REQUIRED  = "Vui lòng nhập giờ bắt đầu và kết thúc"
MSG_TIME_INVALID    = "Giờ không hợp lệ (HH:MM)"
MSG_STATUS_INVALID  = "Trạng thái lịch làm việc không hợp lệ"
MSG_DURATION        = "Ca làm việc phải từ 1-{max_hours} tiếng. Vui lòng kiểm tra lại thời gian."
MSG_CONFLICT        = "Cảnh báo: Nhân viên đã có lịch làm việc trùng thời gian này!"


class ShiftInputError(ValueError):
    """Required fields missing or malformed; ``errors`` maps field → message."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


class DurationError(ValueError):
    def __init__(self, duration_hours: float, max_hours: int):
        self.duration_hours = duration_hours
        self.max_hours = max_hours
        self.message = MSG_DURATION.format(max_hours=max_hours)
        super().__init__(self.message)


@dataclass(frozen=True)
class NormalizedShift:
    absolute_start: datetime
    absolute_end: datetime
    is_overnight: bool

    @property
    def duration_hours(self) -> float:
        return _elapsed_hours(self.absolute_start, self.absolute_end)


def validate_request(request: ShiftRequest) -> tuple[date, time, time]:
    """Check required fields and formats; return the parsed date and times."""
    errors: dict[str, str] = {}
    shift_date = start = end = None

    if not request.staff_id.strip():
        errors["staff_id"] = MSG_STAFF_REQUIRED

    if not request.shift_date.strip():
        errors["shift_date"] = MSG_DATE_REQUIRED
    else:
        try:
            shift_date = parse_iso_date(request.shift_date)
        except ValueError:
            errors["shift_date"] = MSG_DATE_INVALID

    for field_name in ("shift_start", "shift_end"):
        raw = getattr(request, field_name)
        if not raw.strip():
            errors[field_name] = MSG_TIMES_REQUIRED
            continue
        try:
            parsed = parse_hhmm(raw)
        except ValueError:
            errors[field_name] = MSG_TIME_INVALID
            continue
        if field_name == "shift_start":
            start = parsed
        else:
            end = parsed

    if request.status not in VALID_STATUSES:
        errors["status"] = MSG_STATUS_INVALID

    if errors:
        raise ShiftInputError(errors)
    return shift_date, start, end


def normalize_shift(shift_date: date, start_time: time, end_time: time) -> NormalizedShift:
    """
    Combine date and times into facility-local instants.

    An end at or before the start (by minutes since midnight) means the shift
    runs past midnight and ends on the following day; equal times therefore
    give a 24h shift, which validate_duration rejects.
    """
    zone = facility_zone()
    is_overnight = minute_of_day(end_time) <= minute_of_day(start_time)
    end_date = shift_date + timedelta(days=1) if is_overnight else shift_date
    return NormalizedShift(
        absolute_start=datetime.combine(shift_date, start_time, tzinfo=zone),
        absolute_end=datetime.combine(end_date, end_time, tzinfo=zone),
        is_overnight=is_overnight,
    )


def validate_duration(absolute_start: datetime, absolute_end: datetime,
                      max_hours: int | None = None) -> float:
    """Return the duration in hours; raise DurationError outside (0, max_hours]."""
    limit = settings.MAX_SHIFT_HOURS if max_hours is None else max_hours
    hours = _elapsed_hours(absolute_start, absolute_end)
    if hours <= 0 or hours > limit:
        raise DurationError(hours, limit)
    return hours


def detect_conflict(
    staff_id: str,
    shift_date: date,
    absolute_start: datetime,
    absolute_end: datetime,
    existing_shifts: Iterable[ExistingShift],
    exclude_schedule_id: str | None = None,
) -> bool:
    """
    True if the new shift overlaps an existing shift of the same staff member.

    Only shifts keyed to the same start date are candidates, and both sides are
    compared as minute-of-day ranges. A shift that started the previous evening
    is therefore never compared against an early-morning shift of the next day.
    """
    new_start = minute_of_day(absolute_start)
    new_end = minute_of_day(absolute_end)

    for shift in existing_shifts:
        if shift.staff_id != staff_id or shift.shift_date != shift_date:
            continue
        if exclude_schedule_id and shift.schedule_id == exclude_schedule_id:
            continue
        existing_start = minute_of_day(from_wire(shift.shift_start))
        existing_end = minute_of_day(from_wire(shift.shift_end))
        if new_start < existing_end and new_end > existing_start:
            return True
    return False


def _elapsed_hours(start: datetime, end: datetime) -> float:
    delta = end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    return delta.total_seconds() / 3600
