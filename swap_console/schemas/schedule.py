from pydantic import AliasChoices, BaseModel, Field, field_validator
from datetime import date as Date, datetime as DateTime
from typing import Literal, Optional

from swap_console.utils.facility_time import day_end_wire

ScheduleStatus = Literal["scheduled", "completed", "absent", "cancelled"]


class StaffRef(BaseModel):
    user_id: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class StationRef(BaseModel):
    station_id: str
    name: str
    address: Optional[str] = None


class ExistingShift(BaseModel):
    """A schedule as returned by the backend. Instants follow the wire convention."""
    schedule_id: str
    staff_id: str
    station_id: Optional[str] = None
    shift_date: Date
    shift_start: DateTime
    shift_end: DateTime
    status: ScheduleStatus = "scheduled"
    notes: Optional[str] = None
    created_at: Optional[DateTime] = None
    updated_at: Optional[DateTime] = None
    # The backend embeds relations under their table names, "users" and "stations"
    staff: Optional[StaffRef] = Field(None, validation_alias=AliasChoices("staff", "users"))
    station: Optional[StationRef] = Field(None, validation_alias=AliasChoices("station", "stations"))

    model_config = {"extra": "ignore"}

    @field_validator("shift_date", mode="before")
    @classmethod
    def calendar_part_only(cls, v):
        # The backend sends shift_date as a midnight-UTC datetime string
        if isinstance(v, str):
            return v.split("T")[0]
        return v


class Pagination(BaseModel):
    page: int = 1
    limit: int = 0
    total: int = 0
    pages: int = 0


class ScheduleListParams(BaseModel):
    staff_id: Optional[str] = None
    station_id: Optional[str] = None
    shift_date: Optional[Date] = None
    from_date: Optional[Date] = None
    to_date: Optional[Date] = None
    status: Optional[ScheduleStatus] = None
    page: Optional[int] = None
    limit: Optional[int] = None

    def to_query(self) -> dict[str, str]:
        query = {k: str(v) for k, v in self.model_dump(exclude_none=True).items()}
        # The backend filters shift_start by "from" and "to" (inclusive upper bound)
        from_date = query.pop("from_date", None)
        if from_date:
            query["from"] = from_date
        if query.pop("to_date", None):
            query["to"] = day_end_wire(self.to_date)
        return query


class ShiftRequest(BaseModel):
    """Raw form values. Times stay strings so malformed input can be reported per field."""
    staff_id: str = ""
    shift_date: str = ""
    shift_start: str = ""
    shift_end: str = ""
    station_id: Optional[str] = None
    status: str = "scheduled"
    notes: Optional[str] = None


class ShiftPayload(BaseModel):
    """Normalized body sent to the backend on create/update."""
    staff_id: str
    station_id: Optional[str]
    shift_date: str
    shift_start: str
    shift_end: str
    status: ScheduleStatus
    notes: str = ""


class ShiftCheckOut(BaseModel):
    is_overnight: bool
    absolute_start: DateTime
    absolute_end: DateTime
    duration_hours: float
    duration_ok: bool
    has_conflict: bool
    message: Optional[str] = None


class ScheduleOut(ExistingShift):
    time_label: str
    status_label: str
    is_overnight: bool


class ScheduleListOut(BaseModel):
    schedules: list[ScheduleOut]
    pagination: Pagination


class CalendarDay(BaseModel):
    date: Date
    in_month: bool
    schedules: list[ScheduleOut]


class CalendarOut(BaseModel):
    year: int
    month: int
    days: list[CalendarDay]


class ScheduleStatusUpdate(BaseModel):
    status: str
    notes: Optional[str] = None
