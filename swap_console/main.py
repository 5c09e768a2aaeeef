import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from swap_console.core.config import settings
from swap_console.api.v1.staff_schedules import router as staff_schedules_router
from swap_console.api.v1.my_schedules import router as my_schedules_router
from swap_console.api.v1.warehouse import router as warehouse_router
from swap_console.api.v1.battery_transfers import router as battery_transfers_router
from swap_console.services.backend_client import BackendError
from swap_console.services.backend_errors import BackendErrorKind

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One connection pool to the backend for the whole process
    app.state.http = httpx.AsyncClient(
        base_url=settings.BACKEND_API_URL,
        timeout=settings.BACKEND_TIMEOUT_SECONDS,
    )
    logger.info("Forwarding to backend at %s", settings.BACKEND_API_URL)
    yield
    await app.state.http.aclose()


app = FastAPI(
    title="EV Swap Console API",
    description="Admin and staff console for the battery-swap station network",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    if exc.status_code is not None:
        status_code = exc.status_code
    elif exc.kind == BackendErrorKind.UNAVAILABLE:
        status_code = 503
    else:
        status_code = 502
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.user_message, "kind": exc.kind.value},
    )


API_PREFIX = "/api/v1"

app.include_router(staff_schedules_router, prefix=API_PREFIX)
app.include_router(my_schedules_router, prefix=API_PREFIX)
app.include_router(warehouse_router, prefix=API_PREFIX)
app.include_router(battery_transfers_router, prefix=API_PREFIX)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "EV Swap Console API", "version": "1.0.0"}
