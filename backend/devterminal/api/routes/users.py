"""Follow graph and profile endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devterminal.core.dependencies import get_current_user_id, get_db
from devterminal.schemas.common import MessageResponse
from devterminal.schemas.user import ProfileRead
from devterminal.services import users as user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/follow/{following_id}", response_model=MessageResponse)
async def toggle_follow(
    following_id: int,
    session: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> MessageResponse:
    following = await user_service.toggle_follow(session, user_id, following_id)
    await session.commit()
    logger.info("User %s %s user %s", user_id, "followed" if following else "unfollowed", following_id)
    return MessageResponse(message="User followed" if following else "User unfollowed")


@router.get("/profile/{username}", response_model=ProfileRead)
async def get_profile(
    username: str,
    session: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> ProfileRead:
    return await user_service.get_profile(session, username, user_id)
