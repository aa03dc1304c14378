"""Pydantic schemas for user operations."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    id: int
    username: str

    model_config = ConfigDict(from_attributes=True)


class ProfileRead(BaseModel):
    """Public profile with follower graph counts as seen by the caller."""

    id: int
    username: str
    created_at: datetime
    followers_count: int
    following_count: int
    posts_count: int
    is_following: bool
