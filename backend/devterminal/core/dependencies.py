"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devterminal.core.config import Settings, get_settings
from devterminal.core.errors import Forbidden, Unauthorized
from devterminal.core.security import InvalidTokenError, TokenSigner
from devterminal.db.session import get_session


async def get_db() -> AsyncIterator[AsyncSession]:
    async with get_session() as session:
        yield session


def get_token_signer(settings: Settings = Depends(get_settings)) -> TokenSigner:
    return TokenSigner(settings)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if not header:
        return None
    parts = header.split()
    return parts[1] if len(parts) > 1 else None


async def get_current_user_id(
    request: Request,
    signer: TokenSigner = Depends(get_token_signer),
) -> int:
    """Resolve the caller from the bearer token.

    A missing token is a 401, a token that fails verification is a 403. The
    resolved id is also left on ``request.state`` for anything downstream.
    """
    token = _bearer_token(request)
    if not token:
        raise Unauthorized()

    try:
        user_id = signer.verify(token)
    except InvalidTokenError as exc:
        raise Forbidden() from exc

    request.state.user_id = user_id
    return user_id
