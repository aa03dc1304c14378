"""Service layer for posts, likes and the home feed."""
from __future__ import annotations

import logging

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devterminal.core.errors import PostNotFound, UserNotFound
from devterminal.models.follow import Follow
from devterminal.models.post import Like, Post
from devterminal.models.user import User
from devterminal.schemas.post import FeedPost

logger = logging.getLogger(__name__)

FEED_LIMIT = 50


async def create_post(session: AsyncSession, user_id: int, content: str) -> Post:
    post = Post(user_id=user_id, content=content, likes=0)
    session.add(post)
    try:
        await session.flush()
    except IntegrityError as exc:
        # Token outlived its user
        await session.rollback()
        raise UserNotFound() from exc
    return post


async def get_feed(session: AsyncSession, user_id: int, limit: int = FEED_LIMIT) -> list[FeedPost]:
    """Newest posts written by the caller or by anyone the caller follows."""
    like_count = (
        select(func.count())
        .select_from(Like)
        .where(Like.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )
    followed = select(Follow.following_id).where(Follow.follower_id == user_id)

    result = await session.execute(
        select(Post, User.username, like_count.label("like_count"))
        .join(User, User.id == Post.user_id)
        .where(or_(Post.user_id == user_id, Post.user_id.in_(followed)))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(min(limit, FEED_LIMIT))
    )
    return [
        FeedPost(
            id=post.id,
            user_id=post.user_id,
            content=post.content,
            created_at=post.created_at,
            likes=post.likes,
            username=username,
            like_count=count,
        )
        for post, username, count in result.all()
    ]


async def _bump_likes(session: AsyncSession, post_id: int, delta: int) -> None:
    await session.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(likes=Post.likes + delta)
    )


async def toggle_like(session: AsyncSession, user_id: int, post_id: int) -> bool:
    """Like or unlike a post. Returns ``True`` when the post is now liked.

    The like row and the post's counter change inside the caller's
    transaction, so both land in the same commit. The counter only moves
    when a like row was actually inserted or deleted.
    """
    if await session.get(Post, post_id) is None:
        raise PostNotFound()

    if await session.get(Like, (user_id, post_id)):
        result = await session.execute(
            delete(Like).where(Like.user_id == user_id, Like.post_id == post_id)
        )
        if result.rowcount:
            await _bump_likes(session, post_id, -1)
        else:
            logger.info("Like by user %s on post %s already removed", user_id, post_id)
        await session.flush()
        return False

    session.add(Like(user_id=user_id, post_id=post_id))
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        if await session.get(Like, (user_id, post_id)) is None:
            # Not a duplicate, so the liking user no longer exists
            raise UserNotFound() from exc
        # A concurrent request liked it first and already bumped the counter
        logger.info("Like by user %s on post %s already present", user_id, post_id)
        return True
    await _bump_likes(session, post_id, 1)
    return True
