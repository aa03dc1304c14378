"""Liveness endpoint."""
from fastapi import APIRouter

from devterminal.schemas.common import HealthStatus

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthStatus)
async def health() -> HealthStatus:
    return HealthStatus(status="healthy")
