from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_realtime.api.middleware.correlation_id import CorrelationIdMiddleware
from chat_realtime.api.v1.routers import health, messages, presence, ws
from chat_realtime.application.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    UnauthenticatedError,
    ValidationError,
)
from chat_realtime.application.ports.auth import TokenVerifier
from chat_realtime.application.ports.clock import Clock
from chat_realtime.application.uow import UnitOfWorkFactory
from chat_realtime.config import settings
from chat_realtime.container import build_container
from chat_realtime.infrastructure.db.session import engine, ping_database
from chat_realtime.infrastructure.db.uow import sqlalchemy_uow

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    logger.info("Chat gateway starting")

    yield

    for connection in await app.state.container.presence.all_connections():
        await app.state.container.gateway.disconnect(connection)
    await engine.dispose()
    logger.info("Database engine disposed")


def create_app(
    *,
    uow_factory: UnitOfWorkFactory | None = None,
    verifier: TokenVerifier | None = None,
    clock: Clock | None = None,
    storage_check: Callable[[], Awaitable[None]] | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Chat Realtime Gateway",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = build_container(
        settings,
        uow_factory or sqlalchemy_uow,
        verifier=verifier,
        clock=clock,
    )
    app.state.storage_check = storage_check or ping_database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(messages.router)
    app.include_router(presence.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})

    @app.exception_handler(UnauthenticatedError)
    async def _unauthenticated(_req: Request, exc: UnauthenticatedError) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"detail": exc.detail},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(StorageError)
    async def _storage(_req: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage failure: %s", exc.detail, exc_info=exc.__cause__)
        return JSONResponse(status_code=503, content={"detail": exc.detail})
