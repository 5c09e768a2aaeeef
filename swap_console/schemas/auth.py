from pydantic import BaseModel
from typing import Optional


class SessionData(BaseModel):
    """Caller identity read from the forwarded access token."""
    access_token: str
    user_id: str
    role: str
    email: Optional[str] = None
