import asyncio
from typing import Optional

from fastapi import APIRouter, Query

from swap_console.api.deps import AdminSession, Backend
from swap_console.core.config import settings
from swap_console.schemas.battery import LowHealthOut, WarehouseOut
from swap_console.services.warehouse_service import build_warehouse

router = APIRouter(prefix="/admin/warehouse", tags=["warehouse"])


@router.get("", response_model=WarehouseOut)
async def warehouse_overview(admin: AdminSession, backend: Backend):
    stations, batteries = await asyncio.gather(
        backend.list_stations(), backend.list_batteries(),
    )
    return build_warehouse(stations, batteries, settings.LOW_HEALTH_THRESHOLD)


@router.get("/low-health", response_model=LowHealthOut)
async def low_health_batteries(
    admin: AdminSession,
    backend: Backend,
    threshold: Optional[int] = Query(None, ge=1, le=100),
):
    limit = threshold or settings.LOW_HEALTH_THRESHOLD
    batteries = await backend.low_health_batteries(limit)
    return LowHealthOut(threshold=limit, batteries=batteries)
