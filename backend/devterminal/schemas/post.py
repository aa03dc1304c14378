"""Pydantic schemas for posts and the feed."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class PostCreate(BaseModel):
    content: str


class PostRead(BaseModel):
    id: int
    user_id: int
    content: str
    created_at: datetime
    likes: int

    model_config = ConfigDict(from_attributes=True)


class FeedPost(PostRead):
    """Feed entry: the post row plus its author and a live like count."""

    username: str
    like_count: int
