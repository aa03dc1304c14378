"""Post, like and feed endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devterminal.core.config import Settings, get_settings
from devterminal.core.dependencies import get_current_user_id, get_db
from devterminal.schemas.common import MessageResponse
from devterminal.schemas.post import FeedPost, PostCreate, PostRead
from devterminal.services import posts as post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("", response_model=PostRead)
async def create_post(
    payload: PostCreate,
    session: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> PostRead:
    post = await post_service.create_post(session, user_id, payload.content)
    await session.commit()
    logger.info("User %s created post %s", user_id, post.id)
    return PostRead.model_validate(post)


@router.get("/feed", response_model=list[FeedPost])
async def get_feed(
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    user_id: int = Depends(get_current_user_id),
) -> list[FeedPost]:
    return await post_service.get_feed(session, user_id, limit=settings.feed_limit)


@router.post("/{post_id}/like", response_model=MessageResponse)
async def toggle_like(
    post_id: int,
    session: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> MessageResponse:
    liked = await post_service.toggle_like(session, user_id, post_id)
    await session.commit()
    logger.debug("User %s %s post %s", user_id, "liked" if liked else "unliked", post_id)
    return MessageResponse(message="Post liked" if liked else "Post unliked")
