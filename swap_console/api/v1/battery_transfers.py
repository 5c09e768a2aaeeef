import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from swap_console.api.deps import AdminSession, Backend
from swap_console.schemas.transfer import (
    BatteryTransfer, TransferListOut, TransferListParams, TransferPayload,
    TransferRequest, TransferStatus, TransferStatusUpdate, TransferUpdate,
)
from swap_console.services.transfer_rules import (
    TransferInputError, TransferRejected, TransitionError,
    check_placement, check_transition, count_transfers, validate_transfer_request,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/battery-transfers", tags=["battery-transfers"])


# ── Routes ───────────────────────────────────────────────────────────────────

@router.get("", response_model=TransferListOut)
async def list_transfers(
    admin: AdminSession,
    backend: Backend,
    status_filter: Optional[TransferStatus] = Query(None, alias="status"),
    battery_id: Optional[str] = Query(None),
    from_station_id: Optional[str] = Query(None),
    to_station_id: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=1000),
):
    params = TransferListParams(
        status=status_filter, battery_id=battery_id,
        from_station_id=from_station_id, to_station_id=to_station_id,
        page=page, limit=limit,
    )
    transfers, pagination = await backend.list_transfers(params)
    return TransferListOut(
        transfers=transfers,
        pagination=pagination,
        counts=count_transfers(transfers),
    )


@router.get("/{transfer_id}", response_model=BatteryTransfer)
async def get_transfer(transfer_id: str, admin: AdminSession, backend: Backend):
    return await backend.get_transfer(transfer_id)


@router.post("", response_model=BatteryTransfer, status_code=status.HTTP_201_CREATED)
async def create_transfer(payload: TransferRequest, admin: AdminSession, backend: Backend):
    try:
        validate_transfer_request(payload)
    except TransferInputError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.errors)

    stations, batteries = await asyncio.gather(
        backend.list_stations(), backend.list_batteries(),
    )
    battery = next((b for b in batteries if b.battery_id == payload.battery_id), None)
    destination = next((s for s in stations if s.station_id == payload.to_station_id), None)
    try:
        check_placement(battery, destination, batteries)
    except TransferRejected as e:
        logger.info("Rejected transfer of %s to %s: %s",
                    payload.battery_id, payload.to_station_id, e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)

    body = TransferPayload(
        battery_id=payload.battery_id.strip(),
        to_station_id=payload.to_station_id.strip(),
        transfer_reason=payload.transfer_reason.strip(),
        notes=(payload.notes or "").strip() or None,
        transfer_status=payload.transfer_status,
    )
    return await backend.create_transfer(body)


@router.put("/{transfer_id}", response_model=BatteryTransfer)
async def update_transfer(
    transfer_id: str, payload: TransferUpdate, admin: AdminSession, backend: Backend,
):
    if payload.transfer_status is not None:
        current = await backend.get_transfer(transfer_id)
        _check_transition_or_400(current, payload.transfer_status)
    return await backend.update_transfer(transfer_id, payload.model_dump(exclude_none=True))


@router.patch("/{transfer_id}/status", response_model=BatteryTransfer)
async def update_transfer_status(
    transfer_id: str, payload: TransferStatusUpdate, admin: AdminSession, backend: Backend,
):
    new_status = payload.status.strip().lower()
    current = await backend.get_transfer(transfer_id)
    _check_transition_or_400(current, new_status)
    return await backend.update_transfer_status(transfer_id, new_status, payload.notes)


@router.delete("/{transfer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transfer(transfer_id: str, admin: AdminSession, backend: Backend):
    await backend.delete_transfer(transfer_id)


def _check_transition_or_400(current: BatteryTransfer, new_status: str) -> None:
    try:
        check_transition(current.transfer_status, new_status)
    except TransitionError as e:
        raise HTTPException(status_code=400, detail=e.message)
