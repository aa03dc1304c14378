"""FastAPI application entrypoint."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from devterminal import models  # noqa: F401  registers tables on Base.metadata
from devterminal.api import api_router
from devterminal.core.config import Settings, get_settings
from devterminal.core.errors import AppError
from devterminal.core.logging_config import setup_logging
from devterminal.db.base import Base
from devterminal.db.session import engine

settings = get_settings()
logger = logging.getLogger(__name__)


def check_secret_key(settings: Settings) -> None:
    """Refuse to start, or at least complain, when the fallback key is in use."""
    if not settings.uses_default_secret:
        return
    if settings.require_secret_key:
        raise RuntimeError("DEVTERM_SECRET_KEY must be set; refusing to sign tokens with the default key")
    logger.warning(
        "DEVTERM_SECRET_KEY is not set; tokens are signed with an insecure default key"
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    # run() has already configured logging; this covers `uvicorn devterminal.main:app`
    setup_logging(settings.log_level, settings.log_file, force=False)
    check_secret_key(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready (%s)", engine.url.drivername)
    try:
        yield
    finally:
        await engine.dispose()


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Server error"},
    )


app.include_router(api_router)

# API routes are registered first, so the static mount only sees the rest
if settings.static_dir:
    static_dir = Path(settings.static_dir)
    if static_dir.exists() and static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    setup_logging(settings.log_level, settings.log_file)
    # log_config=None keeps the root logger configured above
    uvicorn.run("devterminal.main:app", host=settings.host, port=settings.port, log_config=None)
