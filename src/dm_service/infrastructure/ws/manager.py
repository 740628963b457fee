"""In-process WebSocket connection manager keyed by live-query topic."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket

from dm_service.infrastructure.ws.protocol import WsOutbound

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks WebSocket connections per principal and each socket's topics.

    Topics are the strings produced by ``domain.value_objects.topics``; a
    notification on a topic tells subscribers to re-run the matching query.
    Subscriptions belong to a single socket, so two tabs of one user follow
    their conversations independently.
    """

    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = {}
        self._subscriptions: dict[str, set[WebSocket]] = {}
        self._topics: dict[WebSocket, set[str]] = {}
        self._owners: dict[WebSocket, str] = {}

    async def connect(self, ws: WebSocket, principal_key: str) -> None:
        await ws.accept()
        self._connections.setdefault(principal_key, set()).add(ws)
        self._owners[ws] = principal_key
        logger.debug("WS connected: %s (total=%d)", principal_key, len(self._connections))

    def disconnect(self, ws: WebSocket, principal_key: str) -> None:
        conns = self._connections.get(principal_key)
        if conns:
            conns.discard(ws)
            if not conns:
                del self._connections[principal_key]
        for topic in self._topics.pop(ws, set()):
            self._drop(topic, ws)
        self._owners.pop(ws, None)
        logger.debug("WS disconnected: %s", principal_key)

    def subscribe(self, ws: WebSocket, topic: str) -> None:
        self._subscriptions.setdefault(topic, set()).add(ws)
        self._topics.setdefault(ws, set()).add(topic)

    def unsubscribe(self, ws: WebSocket, topic: str) -> None:
        self._drop(topic, ws)
        topics = self._topics.get(ws)
        if topics is not None:
            topics.discard(topic)

    def subscribers(self, topic: str) -> set[WebSocket]:
        return set(self._subscriptions.get(topic, set()))

    def _drop(self, topic: str, ws: WebSocket) -> None:
        subs = self._subscriptions.get(topic)
        if subs is None:
            return
        subs.discard(ws)
        if not subs:
            del self._subscriptions[topic]

    async def broadcast_to_topics(
        self,
        topics: list[str],
        event_type: str,
        data: dict[str, Any],
    ) -> int:
        """Send one frame to every socket subscribed to any of the topics.

        A socket subscribed to several of the topics receives it once.
        Returns the number of sockets notified.
        """
        targets: set[WebSocket] = set()
        for topic in topics:
            targets |= self._subscriptions.get(topic, set())
        if not targets:
            return 0

        raw = WsOutbound(type=event_type, data=data).model_dump_json()
        delivered = 0
        for ws in targets:
            if await self._send_raw(ws, raw):
                delivered += 1
        return delivered

    async def _send_raw(self, ws: WebSocket, raw: str) -> bool:
        try:
            await ws.send_text(raw)
        except Exception:
            logger.debug("Dropping dead socket of %s", self._owners.get(ws), exc_info=True)
            self.disconnect(ws, self._owners.get(ws, ""))
            return False
        return True
