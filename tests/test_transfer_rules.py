"""
Unit tests for transfer_rules.py – form checks, placement and status transitions.
"""
import pytest

from swap_console.schemas.battery import Battery, Station
from swap_console.schemas.transfer import BatteryTransfer, TransferRequest
from swap_console.services.transfer_rules import (
    MSG_SAME_STATION, TransferInputError, TransferRejected, TransitionError,
    check_placement, check_transition, count_transfers, validate_transfer_request,
)


def battery(battery_id="b1", status="full", station_id="st1"):
    return Battery(battery_id=battery_id, status=status, station_id=station_id)


def station(station_id="st2", status="active", capacity=2):
    return Station(station_id=station_id, name=f"Trạm {station_id}", status=status, capacity=capacity)


# ── validate_transfer_request ────────────────────────────────────────────────

def test_complete_request_passes():
    validate_transfer_request(TransferRequest(battery_id="b1", to_station_id="st2",
                                              transfer_reason="rebalance"))


def test_missing_fields_reported():
    with pytest.raises(TransferInputError) as exc_info:
        validate_transfer_request(TransferRequest())
    assert set(exc_info.value.errors) == {"battery_id", "to_station_id", "transfer_reason"}


def test_same_source_and_destination():
    req = TransferRequest(battery_id="b1", from_station_id="st1", to_station_id="st1",
                          transfer_reason="rebalance")
    with pytest.raises(TransferInputError) as exc_info:
        validate_transfer_request(req)
    assert exc_info.value.errors == {"to_station_id": MSG_SAME_STATION}


def test_unknown_transfer_status():
    req = TransferRequest(battery_id="b1", to_station_id="st2", transfer_reason="x",
                          transfer_status="lost")
    with pytest.raises(TransferInputError) as exc_info:
        validate_transfer_request(req)
    assert "transfer_status" in exc_info.value.errors


# ── check_placement ──────────────────────────────────────────────────────────

def test_placement_ok():
    check_placement(battery(), station(), [battery()])


def test_missing_battery_is_404():
    with pytest.raises(TransferRejected) as exc_info:
        check_placement(None, station(), [])
    assert exc_info.value.status_code == 404


def test_battery_in_use_cannot_move():
    with pytest.raises(TransferRejected) as exc_info:
        check_placement(battery(status="in_use"), station(), [])
    assert exc_info.value.status_code == 400


def test_battery_already_at_destination():
    with pytest.raises(TransferRejected) as exc_info:
        check_placement(battery(station_id="st2"), station("st2"), [])
    assert exc_info.value.message == MSG_SAME_STATION


def test_inactive_destination():
    with pytest.raises(TransferRejected):
        check_placement(battery(), station(status="maintenance"), [])


def test_full_destination():
    fleet = [battery("x1", station_id="st2"), battery("x2", station_id="st2")]
    with pytest.raises(TransferRejected) as exc_info:
        check_placement(battery(), station(capacity=2), fleet)
    assert "2" in exc_info.value.message


def test_destination_without_capacity_is_unbounded():
    fleet = [battery(f"x{i}", station_id="st2") for i in range(50)]
    check_placement(battery(), station(capacity=None), fleet)


# ── check_transition ─────────────────────────────────────────────────────────

@pytest.mark.parametrize("current,new", [
    ("pending", "in_transit"),
    ("pending", "completed"),
    ("pending", "cancelled"),
    ("in_transit", "completed"),
    ("in_transit", "cancelled"),
])
def test_allowed_transitions(current, new):
    check_transition(current, new)


@pytest.mark.parametrize("current,new", [
    ("completed", "cancelled"),
    ("cancelled", "pending"),
    ("in_transit", "pending"),
    ("pending", "pending"),
    ("pending", "lost"),
])
def test_rejected_transitions(current, new):
    with pytest.raises(TransitionError):
        check_transition(current, new)


def test_counts_by_status():
    transfers = [
        BatteryTransfer(transfer_id=f"t{i}", battery_id="b1", to_station_id="st2", transfer_status=s)
        for i, s in enumerate(["pending", "pending", "completed", "cancelled"])
    ]
    counts = count_transfers(transfers)
    assert (counts.total, counts.pending, counts.in_transit, counts.completed, counts.cancelled) == (4, 2, 0, 1, 1)
