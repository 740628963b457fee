from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dm_service.api.middleware.correlation_id import CorrelationIdMiddleware
from dm_service.api.middleware.metrics import RequestTimingMiddleware
from dm_service.api.v1.routers import (
    conversations,
    health,
    messages,
    typing_status,
    users,
    ws,
)
from dm_service.application.exceptions import (
    AppError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
)
from dm_service.config import settings
from dm_service.infrastructure.bus.redis_pubsub import RedisPubSubSubscriber

logger = logging.getLogger(__name__)


async def _on_pubsub_event(event_type: str, data: dict[str, Any]) -> None:
    """Fan a relayed change notification out to local WS subscribers."""
    topics = data.get("topics")
    if not isinstance(topics, list) or not topics:
        logger.debug("Dropping %s without topics", event_type)
        return
    delivered = await ws.get_manager().broadcast_to_topics(
        [str(t) for t in topics], event_type, data,
    )
    logger.debug("%s delivered to %d sockets", event_type, delivered)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the Redis pool and the fan-out listener for the life of the process."""
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    subscriber = RedisPubSubSubscriber(redis, settings.REDIS_PUBSUB_CHANNEL, _on_pubsub_event)
    app.state.redis = redis
    app.state.pubsub_subscriber = subscriber
    await subscriber.start()
    try:
        yield
    finally:
        await subscriber.stop()
        await redis.aclose()
        logger.info("Fan-out listener and Redis pool shut down")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Direct Messages Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(conversations.router)
    app.include_router(messages.router)
    app.include_router(typing_status.router)
    app.include_router(ws.router)

    return app


_HTTP_STATUS: dict[type[AppError], int] = {
    InvalidArgumentError: 422,
    NotFoundError: 404,
    PermissionDeniedError: 403,
}


async def _app_error_handler(_req: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, AppError)
    return JSONResponse(
        status_code=_HTTP_STATUS.get(type(exc), 400),
        content={"detail": exc.detail, "code": exc.code},
    )


def _register_exception_handlers(app: FastAPI) -> None:
    for exc_type in _HTTP_STATUS:
        app.add_exception_handler(exc_type, _app_error_handler)
