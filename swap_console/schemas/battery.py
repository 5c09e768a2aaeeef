from pydantic import BaseModel
from typing import Optional


class Battery(BaseModel):
    battery_id: str
    battery_code: Optional[str] = None
    model: str = ""
    status: str
    health_percentage: float = 0
    cycle_count: int = 0
    station_id: Optional[str] = None

    model_config = {"extra": "ignore"}


class Station(BaseModel):
    station_id: str
    name: str
    address: Optional[str] = None
    status: Optional[str] = None
    capacity: Optional[int] = None

    model_config = {"extra": "ignore"}


class StatusCounts(BaseModel):
    total: int = 0
    available: int = 0
    charging: int = 0
    maintenance: int = 0
    damaged: int = 0
    in_use: int = 0
    reserved: int = 0


class ModelCount(BaseModel):
    model: str
    count: int


class WarehouseStationOut(Station):
    batteries: list[Battery]
    battery_stats: StatusCounts


class FleetStats(BaseModel):
    by_status: StatusCounts
    by_model: list[ModelCount]
    low_health_count: int
    avg_health: float
    avg_cycle_count: float


class WarehouseOut(BaseModel):
    stations: list[WarehouseStationOut]
    stats: FleetStats
    unassigned: list[Battery]


class LowHealthOut(BaseModel):
    threshold: int
    batteries: list[Battery]
