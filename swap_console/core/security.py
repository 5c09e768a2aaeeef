from datetime import datetime, timezone
from typing import Any

from jose import jwt, JWTError

from swap_console.core.config import settings


def read_claims(token: str) -> dict[str, Any]:
    """
    Claims of a backend-issued access token.

    The signature is not checked here: the backend holds the secret and
    verifies every forwarded call. The console only needs the role and expiry.
    """
    try:
        return jwt.get_unverified_claims(token)
    except JWTError as e:
        raise ValueError(f"Invalid token: {e}")


def is_expired(claims: dict[str, Any], now: datetime | None = None) -> bool:
    exp = claims.get("exp")
    if exp is None:
        return False
    now = now or datetime.now(timezone.utc)
    return float(exp) - now.timestamp() <= settings.TOKEN_EXPIRY_LEEWAY_SECONDS
