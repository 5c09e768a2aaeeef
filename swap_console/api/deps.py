from typing import Annotated

import httpx
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from swap_console.core.security import is_expired, read_claims
from swap_console.schemas.auth import SessionData
from swap_console.services.backend_client import BackendClient
from swap_console.services.backend_errors import BackendErrorKind, user_message

security = HTTPBearer()


async def get_session(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> SessionData:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=user_message(BackendErrorKind.UNAUTHORIZED),
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        claims = read_claims(credentials.credentials)
        session = SessionData(
            access_token=credentials.credentials,
            user_id=str(claims["userId"]),
            role=str(claims["role"]).upper(),
            email=claims.get("email"),
        )
        expired = is_expired(claims)
    except (ValueError, KeyError, TypeError):
        raise credentials_exception

    if expired:
        raise credentials_exception

    return session


async def get_admin_session(
    session: Annotated[SessionData, Depends(get_session)],
) -> SessionData:
    if session.role != "ADMIN":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=user_message(BackendErrorKind.FORBIDDEN),
        )
    return session


async def get_staff_session(
    session: Annotated[SessionData, Depends(get_session)],
) -> SessionData:
    if session.role != "STAFF":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=user_message(BackendErrorKind.FORBIDDEN),
        )
    return session


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared connection pool, opened in the app lifespan."""
    return request.app.state.http


async def get_backend(
    session: Annotated[SessionData, Depends(get_session)],
    http: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> BackendClient:
    return BackendClient(http, session.access_token)


CurrentSession = Annotated[SessionData, Depends(get_session)]
AdminSession = Annotated[SessionData, Depends(get_admin_session)]
StaffSession = Annotated[SessionData, Depends(get_staff_session)]
Backend = Annotated[BackendClient, Depends(get_backend)]
