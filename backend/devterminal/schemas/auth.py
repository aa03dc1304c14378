"""Authentication-related schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field

from .user import UserSummary


class Credentials(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)


class AuthResponse(BaseModel):
    token: str
    user: UserSummary
