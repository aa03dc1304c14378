"""User service functions for accounts, authentication and the follow graph."""
from __future__ import annotations

import logging

from sqlalchemy import delete, exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devterminal.core.errors import DuplicateUsername, InvalidCredentials, SelfFollow, UserNotFound
from devterminal.core.security import PasswordHasher
from devterminal.models.follow import Follow
from devterminal.models.post import Post
from devterminal.models.user import User
from devterminal.schemas.user import ProfileRead

logger = logging.getLogger(__name__)


async def get_user(session: AsyncSession, user_id: int) -> User | None:
    return await session.get(User, user_id)


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def create_user(session: AsyncSession, username: str, password: str) -> User:
    """Create an account, rejecting a username that is already taken.

    The lookup gives the common case a clean error; the unique constraint on
    ``users.username`` catches a concurrent registration that slips past it.
    """
    if await get_user_by_username(session, username):
        raise DuplicateUsername()

    user = User(username=username, password_hash=PasswordHasher.hash(password))
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        raise DuplicateUsername() from exc
    return user


async def authenticate_user(session: AsyncSession, username: str, password: str) -> User:
    """Return the matching user or raise the same error for every failure."""
    user = await get_user_by_username(session, username)
    if not user or not PasswordHasher.verify(password, user.password_hash):
        raise InvalidCredentials()
    return user


async def toggle_follow(session: AsyncSession, follower_id: int, following_id: int) -> bool:
    """Follow or unfollow a user. Returns ``True`` when now following."""
    if follower_id == following_id:
        raise SelfFollow()
    if not await get_user(session, following_id):
        raise UserNotFound()

    if await session.get(Follow, (follower_id, following_id)):
        result = await session.execute(
            delete(Follow).where(Follow.follower_id == follower_id, Follow.following_id == following_id)
        )
        if not result.rowcount:
            logger.info("Follow %s -> %s already removed", follower_id, following_id)
        await session.flush()
        return False

    session.add(Follow(follower_id=follower_id, following_id=following_id))
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        if await session.get(Follow, (follower_id, following_id)) is None:
            # Not a duplicate, so the follower no longer exists
            raise UserNotFound() from exc
        # A concurrent request created the same edge first
        logger.info("Follow %s -> %s already present", follower_id, following_id)
    return True


async def _count(session: AsyncSession, column, value: int) -> int:
    result = await session.execute(select(func.count()).select_from(column.class_).where(column == value))
    return result.scalar_one()


async def get_profile(session: AsyncSession, username: str, caller_id: int) -> ProfileRead:
    user = await get_user_by_username(session, username)
    if not user:
        raise UserNotFound()

    is_following = await session.scalar(
        select(exists().where(Follow.follower_id == caller_id, Follow.following_id == user.id))
    )
    return ProfileRead(
        id=user.id,
        username=user.username,
        created_at=user.created_at,
        followers_count=await _count(session, Follow.following_id, user.id),
        following_count=await _count(session, Follow.follower_id, user.id),
        posts_count=await _count(session, Post.user_id, user.id),
        is_following=bool(is_following),
    )
