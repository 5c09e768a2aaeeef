"""
Classification of errors returned by the battery-swap backend.

The backend reports failures as free-text messages. They are matched here, in
one table, against known substrings and turned into an error kind with a
user-facing message. Anything unmatched falls back to the HTTP status and
finally to the generic failure message.
"""
from enum import Enum


class BackendErrorKind(str, Enum):
    INVALID_TIME_RANGE = "invalid_time_range"
    OVERLAP            = "overlap"
    TRANSFER_REJECTED  = "transfer_rejected"
    INVALID_DATA       = "invalid_data"
    UNAUTHORIZED       = "unauthorized"
    FORBIDDEN          = "forbidden"
    NOT_FOUND          = "not_found"
    UNAVAILABLE        = "unavailable"
    UNKNOWN            = "unknown"


# Checked in order; first substring contained in the backend message wins.
MESSAGE_PATTERNS: list[tuple[str, BackendErrorKind]] = [
    ("shift_end must be greater than shift_start", BackendErrorKind.INVALID_TIME_RANGE),
    ("overlapping this time",                      BackendErrorKind.OVERLAP),
    ("currently in use",                           BackendErrorKind.TRANSFER_REJECTED),
    ("cannot be the same as current station",      BackendErrorKind.TRANSFER_REJECTED),
    ("at full capacity",                           BackendErrorKind.TRANSFER_REJECTED),
    ("must be active to receive",                  BackendErrorKind.TRANSFER_REJECTED),
    ("Invalid",                                    BackendErrorKind.INVALID_DATA),
]

STATUS_KINDS: dict[int, BackendErrorKind] = {
    400: BackendErrorKind.INVALID_DATA,
    401: BackendErrorKind.UNAUTHORIZED,
    403: BackendErrorKind.FORBIDDEN,
    404: BackendErrorKind.NOT_FOUND,
    409: BackendErrorKind.OVERLAP,
    422: BackendErrorKind.INVALID_DATA,
    502: BackendErrorKind.UNAVAILABLE,
    503: BackendErrorKind.UNAVAILABLE,
    504: BackendErrorKind.UNAVAILABLE,
}

USER_MESSAGES: dict[BackendErrorKind, str] = {
    BackendErrorKind.INVALID_TIME_RANGE: "Thời gian kết thúc phải lớn hơn thời gian bắt đầu. Vui lòng kiểm tra lại.",
    BackendErrorKind.OVERLAP:            "Nhân viên đã có lịch làm việc trùng thời gian này. Vui lòng chọn thời gian khác.",
    BackendErrorKind.TRANSFER_REJECTED:  "Không thể chuyển pin đến trạm đã chọn. Vui lòng kiểm tra trạng thái pin và trạm đích.",
    BackendErrorKind.INVALID_DATA:       "Dữ liệu không hợp lệ. Vui lòng kiểm tra lại thông tin.",
    BackendErrorKind.UNAUTHORIZED:       "Phiên đăng nhập đã hết hạn. Vui lòng đăng nhập lại.",
    BackendErrorKind.FORBIDDEN:          "Bạn không có quyền thực hiện thao tác này.",
    BackendErrorKind.NOT_FOUND:          "Không tìm thấy dữ liệu yêu cầu.",
    BackendErrorKind.UNAVAILABLE:        "Không thể kết nối đến server. Vui lòng thử lại sau.",
    BackendErrorKind.UNKNOWN:            "Đã xảy ra lỗi. Vui lòng thử lại sau.",
}

# Shown instead of the generic message when a schedule write fails for an unrecognized reason
SCHEDULE_SAVE_FAILED = "Lỗi khi lưu lịch làm việc. Vui lòng thử lại."


def classify(message: str | None, status_code: int | None = None) -> BackendErrorKind:
    # Session problems are reported as such whatever the message says
    if status_code in (401, 403):
        return STATUS_KINDS[status_code]
    if message:
        for needle, kind in MESSAGE_PATTERNS:
            if needle in message:
                return kind
    if status_code is not None:
        return STATUS_KINDS.get(status_code, BackendErrorKind.UNKNOWN)
    return BackendErrorKind.UNKNOWN


def user_message(kind: BackendErrorKind) -> str:
    return USER_MESSAGES[kind]
