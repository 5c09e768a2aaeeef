"""
Facility wall-clock helpers.

The backend stores shift instants with the facility wall-clock time written as
if it were UTC: 09:00 at a station is sent and returned as ``...T09:00:00.000Z``.
``to_wire`` and ``from_wire`` translate between that convention and aware
datetimes in the facility zone.
"""
import re
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from swap_console.core.config import settings

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def facility_zone() -> ZoneInfo:
    return ZoneInfo(settings.FACILITY_TIMEZONE)


def parse_hhmm(value: str) -> time:
    """'HH:MM' → time. Raises ValueError for anything else."""
    match = _HHMM.match(value.strip()) if value else None
    if match is None:
        raise ValueError(f"Invalid time of day: {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def parse_iso_date(value: str) -> date:
    """'YYYY-MM-DD' → date. Raises ValueError for anything else."""
    value = value.strip() if value else ""
    if not _ISO_DATE.match(value):
        raise ValueError(f"Invalid date: {value!r}")
    return date.fromisoformat(value)


def minute_of_day(value: time | datetime) -> int:
    return value.hour * 60 + value.minute


def from_wire(instant: datetime) -> datetime:
    """Backend instant → aware datetime in the facility zone, same wall clock."""
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc).replace(tzinfo=None)
    return instant.replace(tzinfo=facility_zone())


def to_wire(instant: datetime) -> str:
    """Facility-local datetime → backend ISO string (wall clock tagged as UTC)."""
    return f"{instant:%Y-%m-%dT%H:%M:%S}.000Z"


def day_end_wire(day: date) -> str:
    """Last second of a facility day, for inclusive upper bounds on range queries."""
    return to_wire(datetime.combine(day, time(23, 59, 59)))
