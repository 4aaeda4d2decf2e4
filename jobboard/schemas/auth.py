"""Authentication-related Pydantic schemas."""
from datetime import datetime
from pydantic import BaseModel


class SessionResponse(BaseModel):
    """The anonymous session bound to the caller's cookie."""
    session_id: str
    state: str = "authenticated"
    created_at: datetime
