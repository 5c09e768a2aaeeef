"""
List and calendar views of staff schedules.
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable

from swap_console.schemas.schedule import CalendarDay, CalendarOut, ExistingShift, ScheduleOut
from swap_console.utils.facility_time import from_wire, minute_of_day

STATUS_LABELS = {
    "scheduled": "Đã lên lịch",
    "completed": "Hoàn thành",
    "absent":    "Vắng mặt",
    "cancelled": "Đã hủy",
}

CALENDAR_DAYS = 42  # 6 weeks


def is_overnight(shift: ExistingShift) -> bool:
    start = from_wire(shift.shift_start)
    end = from_wire(shift.shift_end)
    return end.date() != start.date() or minute_of_day(end) < minute_of_day(start)


def time_label(shift: ExistingShift) -> str:
    """'22:00 - 06:00 (+1)' for shifts ending the next day."""
    label = f"{from_wire(shift.shift_start):%H:%M} - {from_wire(shift.shift_end):%H:%M}"
    return f"{label} (+1)" if is_overnight(shift) else label


def to_out(shift: ExistingShift) -> ScheduleOut:
    return ScheduleOut(
        **shift.model_dump(),
        time_label=time_label(shift),
        status_label=STATUS_LABELS.get(shift.status, shift.status),
        is_overnight=is_overnight(shift),
    )


def filter_and_sort(
    shifts: Iterable[ExistingShift],
    search: str | None = None,
    status: str | None = None,
) -> list[ScheduleOut]:
    """Apply the status and staff-name filters, newest shift first."""
    needle = search.strip().lower() if search else ""
    selected = []
    for shift in shifts:
        if status and shift.status != status:
            continue
        if needle:
            name = shift.staff.full_name.lower() if shift.staff else ""
            if needle not in name:
                continue
        selected.append(shift)

    selected.sort(key=lambda s: (s.shift_date, from_wire(s.shift_start)), reverse=True)
    return [to_out(s) for s in selected]


def calendar_month(shifts: Iterable[ExistingShift], year: int, month: int) -> CalendarOut:
    """
    Six-week grid starting on the Sunday on or before the first of the month.
    Shifts appear on their start date only.
    """
    first = date(year, month, 1)
    grid_start = first - timedelta(days=(first.weekday() + 1) % 7)

    by_date: dict[date, list[ExistingShift]] = defaultdict(list)
    for shift in shifts:
        by_date[shift.shift_date].append(shift)

    days = []
    for offset in range(CALENDAR_DAYS):
        day = grid_start + timedelta(days=offset)
        day_shifts = sorted(by_date.get(day, []), key=lambda s: from_wire(s.shift_start))
        days.append(CalendarDay(
            date=day,
            in_month=day.month == month,
            schedules=[to_out(s) for s in day_shifts],
        ))
    return CalendarOut(year=year, month=month, days=days)
