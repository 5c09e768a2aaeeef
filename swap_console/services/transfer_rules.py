"""
Checks applied before a battery transfer is forwarded to the backend.

The backend moves the battery when the transfer is recorded and only accepts
a small set of status changes afterwards. The same rules are checked here so
the admin gets a specific message instead of a generic rejection.
"""
from typing import Iterable

from swap_console.schemas.battery import Battery, Station
from swap_console.schemas.transfer import BatteryTransfer, TransferCounts, TransferRequest

TRANSFER_STATUSES = ("pending", "in_transit", "completed", "cancelled")

ALLOWED_TRANSITIONS: dict[str, tuple[str, ...]] = {
    "pending":    ("in_transit", "completed", "cancelled"),
    "in_transit": ("completed", "cancelled"),
    "completed":  (),
    "cancelled":  (),
}

MSG_FIELD_REQUIRED        = "Vui lòng điền đầy đủ thông tin"
MSG_SAME_STATION          = "Trạm nguồn và trạm đích không thể giống nhau"
MSG_STATUS_INVALID        = "Trạng thái chuyển pin không hợp lệ"
MSG_BATTERY_NOT_FOUND     = "Không tìm thấy pin"
MSG_BATTERY_IN_USE        = "Không thể chuyển pin đang được sử dụng"
MSG_DESTINATION_NOT_FOUND = "Không tìm thấy trạm đích"
MSG_DESTINATION_INACTIVE  = "Trạm đích phải đang hoạt động để nhận pin"
MSG_DESTINATION_FULL      = "Trạm đích đã đầy ({capacity} pin)"
MSG_TRANSITION            = "Không thể chuyển trạng thái từ '{current}' sang '{new}'"


class TransferInputError(ValueError):
    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


class TransferRejected(ValueError):
    """The battery or destination cannot take part in the transfer."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class TransitionError(ValueError):
    def __init__(self, current: str, new: str):
        self.current = current
        self.new = new
        self.message = MSG_TRANSITION.format(current=current, new=new)
        super().__init__(self.message)


def validate_transfer_request(request: TransferRequest) -> None:
    errors: dict[str, str] = {}
    for field_name in ("battery_id", "to_station_id", "transfer_reason"):
        if not getattr(request, field_name).strip():
            errors[field_name] = MSG_FIELD_REQUIRED

    if request.from_station_id and request.from_station_id == request.to_station_id:
        errors["to_station_id"] = MSG_SAME_STATION

    if request.transfer_status is not None and request.transfer_status not in TRANSFER_STATUSES:
        errors["transfer_status"] = MSG_STATUS_INVALID

    if errors:
        raise TransferInputError(errors)


def check_placement(
    battery: Battery | None,
    destination: Station | None,
    fleet: Iterable[Battery],
) -> None:
    """Raise TransferRejected unless the battery can move to the destination."""
    if battery is None:
        raise TransferRejected(MSG_BATTERY_NOT_FOUND, 404)
    if battery.status == "in_use":
        raise TransferRejected(MSG_BATTERY_IN_USE)
    if destination is None:
        raise TransferRejected(MSG_DESTINATION_NOT_FOUND, 404)
    if battery.station_id == destination.station_id:
        raise TransferRejected(MSG_SAME_STATION)
    if destination.status != "active":
        raise TransferRejected(MSG_DESTINATION_INACTIVE)

    if destination.capacity is not None:
        load = sum(1 for b in fleet if b.station_id == destination.station_id)
        if load >= destination.capacity:
            raise TransferRejected(MSG_DESTINATION_FULL.format(capacity=destination.capacity))


def check_transition(current: str, new: str) -> None:
    if new not in ALLOWED_TRANSITIONS.get(current, ()):
        raise TransitionError(current, new)


def count_transfers(transfers: Iterable[BatteryTransfer]) -> TransferCounts:
    counts = TransferCounts()
    for t in transfers:
        counts.total += 1
        setattr(counts, t.transfer_status, getattr(counts, t.transfer_status) + 1)
    return counts
