"""Authentication endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devterminal.core.dependencies import get_db, get_token_signer
from devterminal.core.errors import InvalidCredentials
from devterminal.core.security import TokenSigner
from devterminal.schemas.auth import AuthResponse, Credentials
from devterminal.schemas.user import UserSummary
from devterminal.services.users import authenticate_user, create_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse)
async def register(
    payload: Credentials,
    session: AsyncSession = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
) -> AuthResponse:
    user = await create_user(session, payload.username, payload.password)
    await session.commit()
    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return AuthResponse(token=signer.issue(user.id), user=UserSummary.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: Credentials,
    session: AsyncSession = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
) -> AuthResponse:
    try:
        user = await authenticate_user(session, payload.username, payload.password)
    except InvalidCredentials:
        logger.warning("Failed login attempt for %s", payload.username)
        raise
    logger.info("User %s logged in", user.username)
    return AuthResponse(token=signer.issue(user.id), user=UserSummary.model_validate(user))
