"""
Unit tests for warehouse_service.py – status buckets and per-station grouping.
"""
import pytest

from swap_console.schemas.battery import Battery, Station
from swap_console.services.warehouse_service import build_warehouse, count_statuses, fleet_stats


def battery(battery_id, status, station_id=None, health=90, cycles=100, model="VF-48"):
    return Battery(battery_id=battery_id, status=status, station_id=station_id,
                   health_percentage=health, cycle_count=cycles, model=model)


def test_status_buckets():
    counts = count_statuses([
        battery("b1", "full"), battery("b2", "charging"), battery("b3", "maintenance"),
        battery("b4", "damaged"), battery("b5", "in_use"), battery("b6", "reserved"),
    ])
    assert counts.total == 6
    assert counts.available == 1
    assert counts.charging == 1
    assert counts.maintenance == 1
    # everything outside full/charging/maintenance counts as damaged
    assert counts.damaged == 3
    assert counts.in_use == 1
    assert counts.reserved == 1


def test_fleet_stats():
    stats = fleet_stats([
        battery("b1", "full", health=60, cycles=400),
        battery("b2", "full", health=100, cycles=0, model="VF-72"),
    ], low_health_threshold=70)
    assert stats.low_health_count == 1
    assert stats.avg_health == pytest.approx(80)
    assert stats.avg_cycle_count == pytest.approx(200)
    assert {m.model: m.count for m in stats.by_model} == {"VF-48": 1, "VF-72": 1}


def test_empty_fleet():
    stats = fleet_stats([], low_health_threshold=70)
    assert stats.avg_health == 0
    assert stats.by_status.total == 0


def test_grouping_per_station():
    stations = [Station(station_id="st1", name="Trạm A"), Station(station_id="st2", name="Trạm B")]
    batteries = [
        battery("b1", "full", "st1"), battery("b2", "charging", "st1"),
        battery("b3", "full", "st2"), battery("b4", "full", None), battery("b5", "full", "gone"),
    ]
    out = build_warehouse(stations, batteries, 70)
    assert [len(s.batteries) for s in out.stations] == [2, 1]
    assert out.stations[0].battery_stats.charging == 1
    assert [b.battery_id for b in out.unassigned] == ["b4", "b5"]
    assert out.stats.by_status.total == 5
