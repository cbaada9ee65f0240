from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pairchat.api.middleware.correlation_id import CorrelationIdMiddleware
from pairchat.api.middleware.timing import RequestTimingMiddleware
from pairchat.api.v1.routers import (
    conversations,
    health,
    messages,
    presence,
    ws,
)
from pairchat.application.exceptions import (
    AppError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from pairchat.bootstrap import Container
from pairchat.config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    container: Container = app.state.container
    await container.start()
    logger.info("pairchat started")

    yield

    await container.stop()
    logger.info("pairchat stopped")


def create_app(container: Container | None = None) -> FastAPI:
    container = container or Container(settings)

    app = FastAPI(
        title="pairchat",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=container.settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(presence.router)
    app.include_router(ws.router)

    return app


_STATUS_BY_ERROR: dict[type[AppError], int] = {
    NotFoundError: 404,
    ForbiddenError: 403,
    ValidationError: 422,
}


def _register_exception_handlers(app: FastAPI) -> None:
    async def _app_error(_req: Request, exc: Exception) -> JSONResponse:
        assert isinstance(exc, AppError)
        status_code = next(
            (code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)), 400,
        )
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.detail, "code": exc.code},
        )

    app.add_exception_handler(AppError, _app_error)
