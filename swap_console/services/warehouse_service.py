"""
Battery warehouse overview: batteries grouped per station with status counts
and fleet-wide health figures.

Status buckets follow the admin screen: ``full`` is shown as available, and
everything that is neither full, charging nor in maintenance is counted as
damaged (this includes in_use and reserved, which are also counted separately).
"""
from collections import Counter
from typing import Iterable

from swap_console.schemas.battery import (
    Battery, FleetStats, ModelCount, Station, StatusCounts, WarehouseOut, WarehouseStationOut,
)

_HEALTHY_BUCKETS = ("full", "charging", "maintenance")


def count_statuses(batteries: Iterable[Battery]) -> StatusCounts:
    counts = StatusCounts()
    for b in batteries:
        counts.total += 1
        if b.status == "full":
            counts.available += 1
        elif b.status == "charging":
            counts.charging += 1
        elif b.status == "maintenance":
            counts.maintenance += 1
        if b.status not in _HEALTHY_BUCKETS:
            counts.damaged += 1
        if b.status == "in_use":
            counts.in_use += 1
        elif b.status == "reserved":
            counts.reserved += 1
    return counts


def fleet_stats(batteries: list[Battery], low_health_threshold: int) -> FleetStats:
    n = max(len(batteries), 1)
    models = Counter(b.model for b in batteries)
    return FleetStats(
        by_status=count_statuses(batteries),
        by_model=[ModelCount(model=m, count=c) for m, c in models.items()],
        low_health_count=sum(1 for b in batteries if b.health_percentage < low_health_threshold),
        avg_health=sum(b.health_percentage for b in batteries) / n,
        avg_cycle_count=sum(b.cycle_count for b in batteries) / n,
    )


def build_warehouse(
    stations: list[Station], batteries: list[Battery], low_health_threshold: int,
) -> WarehouseOut:
    per_station: dict[str, list[Battery]] = {s.station_id: [] for s in stations}
    unassigned: list[Battery] = []
    for b in batteries:
        if b.station_id in per_station:
            per_station[b.station_id].append(b)
        else:
            unassigned.append(b)

    return WarehouseOut(
        stations=[
            WarehouseStationOut(
                **s.model_dump(),
                batteries=per_station[s.station_id],
                battery_stats=count_statuses(per_station[s.station_id]),
            )
            for s in stations
        ],
        stats=fleet_stats(batteries, low_health_threshold),
        unassigned=unassigned,
    )
