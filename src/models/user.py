"""User profile and authentication session models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """Profile document kept alongside the auth account (users/{uid})."""
    model_config = ConfigDict(str_strip_whitespace=True)

    uid: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(default="", max_length=254)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class AuthSession(BaseModel):
    """
    A signed-in account as returned by the auth provider.

    Tokens are kept so a session can be refreshed or revoked; they are
    never logged.
    """

    uid: str
    email: str = ""
    display_name: Optional[str] = None
    id_token: str = Field(default="", repr=False)
    refresh_token: str = Field(default="", repr=False)
    expires_in_seconds: int = Field(default=3600, ge=0)
    signed_in_at: datetime = Field(default_factory=datetime.utcnow)
