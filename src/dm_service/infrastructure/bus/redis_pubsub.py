"""Cross-process fan-out of change notifications over one Redis Pub/Sub channel."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

import redis.asyncio as aioredis

from dm_service.infrastructure.bus.serializer import deserialize_event, serialize_event

logger = logging.getLogger(__name__)

OnEventCallback = Callable[[str, dict[str, Any]], Coroutine[Any, Any, None]]


class RedisPubSubPublisher:
    """EventPublisher over PUBLISH; ``event_type`` in the payload names the envelope."""

    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def publish(self, channel: str, payload: dict[str, Any]) -> None:
        body = {k: v for k, v in payload.items() if k != "event_type"}
        receivers = await self._redis.publish(
            channel, serialize_event(payload.get("event_type", "unknown"), body),
        )
        logger.debug("Published %s to %s (%d receivers)", payload.get("event_type"), channel, receivers)


class RedisPubSubSubscriber:
    """Runs one listener task per API process and hands each event to ``callback``."""

    def __init__(
        self,
        redis: aioredis.Redis,
        channel: str,
        callback: OnEventCallback,
    ) -> None:
        self._redis = redis
        self._channel = channel
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._listen(), name=f"pubsub:{self._channel}")
        logger.info("Listening for change notifications on %s", self._channel)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Stopped listening on %s", self._channel)

    async def dispatch(self, raw: str | bytes) -> None:
        """Decode one envelope and run the callback; errors are logged, not raised."""
        try:
            event_type, data = deserialize_event(raw)
            await self._callback(event_type, data)
        except Exception:
            logger.exception("Error processing pubsub message")

    async def _listen(self) -> None:
        async with self._redis.pubsub() as pubsub:
            await pubsub.subscribe(self._channel)
            async for message in pubsub.listen():
                if message["type"] == "message":
                    await self.dispatch(message["data"])
