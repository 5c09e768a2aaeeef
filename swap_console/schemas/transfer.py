from pydantic import AliasChoices, BaseModel, Field
from datetime import datetime as DateTime
from typing import Literal, Optional

from swap_console.schemas.schedule import Pagination, StaffRef, StationRef

TransferStatus = Literal["pending", "in_transit", "completed", "cancelled"]


class TransferBatteryRef(BaseModel):
    battery_id: Optional[str] = None
    battery_code: Optional[str] = None
    model: Optional[str] = None
    status: Optional[str] = None


class BatteryTransfer(BaseModel):
    """A transfer log entry as returned by the backend."""
    transfer_id: str
    battery_id: str
    from_station_id: Optional[str] = None
    to_station_id: str
    transfer_status: TransferStatus
    transfer_reason: str = ""
    notes: Optional[str] = None
    transferred_by: Optional[str] = None
    transferred_at: Optional[DateTime] = None
    completed_at: Optional[DateTime] = None
    created_at: Optional[DateTime] = None
    updated_at: Optional[DateTime] = None
    battery: Optional[TransferBatteryRef] = Field(
        None, validation_alias=AliasChoices("battery", "batteries"))
    from_station: Optional[StationRef] = Field(
        None, validation_alias=AliasChoices(
            "from_station", "stations_battery_transfer_logs_from_station_idTostations"))
    to_station: Optional[StationRef] = Field(
        None, validation_alias=AliasChoices(
            "to_station", "stations_battery_transfer_logs_to_station_idTostations"))
    transferred_by_user: Optional[StaffRef] = Field(
        None, validation_alias=AliasChoices("transferred_by_user", "users"))

    model_config = {"extra": "ignore"}


class TransferListParams(BaseModel):
    battery_id: Optional[str] = None
    from_station_id: Optional[str] = None
    to_station_id: Optional[str] = None
    status: Optional[TransferStatus] = None
    page: Optional[int] = None
    limit: Optional[int] = None

    def to_query(self) -> dict[str, str]:
        # The backend reads the id filters in camelCase
        keys = {"battery_id": "batteryId", "from_station_id": "fromStationId",
                "to_station_id": "toStationId"}
        return {keys.get(k, k): str(v) for k, v in self.model_dump(exclude_none=True).items()}


class TransferRequest(BaseModel):
    """Raw form values for a new transfer."""
    battery_id: str = ""
    from_station_id: Optional[str] = None
    to_station_id: str = ""
    transfer_reason: str = ""
    notes: Optional[str] = None
    transfer_status: Optional[str] = None


class TransferPayload(BaseModel):
    battery_id: str
    to_station_id: str
    transfer_reason: str
    notes: Optional[str] = None
    transfer_status: Optional[TransferStatus] = None


class TransferUpdate(BaseModel):
    transfer_status: Optional[str] = None
    notes: Optional[str] = None


class TransferStatusUpdate(BaseModel):
    status: str
    notes: Optional[str] = None


class TransferCounts(BaseModel):
    total: int = 0
    pending: int = 0
    in_transit: int = 0
    completed: int = 0
    cancelled: int = 0


class TransferListOut(BaseModel):
    transfers: list[BatteryTransfer]
    pagination: Pagination
    counts: TransferCounts
