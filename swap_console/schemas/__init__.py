from swap_console.schemas.auth import SessionData
from swap_console.schemas.schedule import (
    ExistingShift, Pagination, ScheduleListParams, ShiftRequest, ShiftPayload,
    ShiftCheckOut, ScheduleOut, ScheduleListOut, CalendarOut, ScheduleStatusUpdate,
)
from swap_console.schemas.battery import Battery, Station, StatusCounts, WarehouseOut, LowHealthOut
from swap_console.schemas.transfer import (
    BatteryTransfer, TransferListOut, TransferRequest, TransferPayload, TransferStatusUpdate,
)

__all__ = [
    "SessionData",
    "ExistingShift", "Pagination", "ScheduleListParams", "ShiftRequest", "ShiftPayload",
    "ShiftCheckOut", "ScheduleOut", "ScheduleListOut", "CalendarOut", "ScheduleStatusUpdate",
    "Battery", "Station", "StatusCounts", "WarehouseOut", "LowHealthOut",
    "BatteryTransfer", "TransferListOut", "TransferRequest", "TransferPayload", "TransferStatusUpdate",
]
