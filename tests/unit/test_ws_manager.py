from __future__ import annotations

import json
import uuid

import pytest

from dm_service.domain.value_objects.topics import (
    conversations_topic,
    messages_topic,
    typing_topic,
)
from dm_service.infrastructure.ws.manager import ConnectionManager


class FakeWebSocket:
    def __init__(self, *, broken: bool = False) -> None:
        self.accepted = False
        self.sent: list[dict] = []
        self.broken = broken

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, raw: str) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(raw))


@pytest.mark.asyncio
async def test_broadcast_reaches_each_subscriber_once():
    manager = ConnectionManager()
    alice, bob = FakeWebSocket(), FakeWebSocket()
    await manager.connect(alice, "user:alice")
    await manager.connect(bob, "user:bob")
    cid = uuid.uuid4()
    manager.subscribe(alice, conversations_topic("alice"))
    manager.subscribe(alice, messages_topic(cid))
    manager.subscribe(bob, conversations_topic("bob"))

    delivered = await manager.broadcast_to_topics(
        [messages_topic(cid), conversations_topic("alice"), conversations_topic("bob")],
        "chat.message_created",
        {"conversation_id": str(cid)},
    )

    assert delivered == 2
    assert alice.accepted is True
    assert [f["type"] for f in alice.sent] == ["chat.message_created"]
    assert bob.sent[0]["data"] == {"conversation_id": str(cid)}


@pytest.mark.asyncio
async def test_broadcast_without_subscribers():
    manager = ConnectionManager()

    assert await manager.broadcast_to_topics([typing_topic(uuid.uuid4())], "chat.typing_changed", {}) == 0


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery():
    manager = ConnectionManager()
    ws = FakeWebSocket()
    await manager.connect(ws, "user:bob")
    topic = typing_topic(uuid.uuid4())
    manager.subscribe(ws, topic)
    manager.unsubscribe(ws, topic)

    await manager.broadcast_to_topics([topic], "chat.typing_changed", {})

    assert ws.sent == []
    assert manager.subscribers(topic) == set()


@pytest.mark.asyncio
async def test_tabs_of_one_user_follow_conversations_independently():
    manager = ConnectionManager()
    tab_a, tab_b = FakeWebSocket(), FakeWebSocket()
    await manager.connect(tab_a, "user:alice")
    await manager.connect(tab_b, "user:alice")
    cid = uuid.uuid4()
    manager.subscribe(tab_a, messages_topic(cid))
    manager.subscribe(tab_b, messages_topic(cid))

    manager.unsubscribe(tab_a, messages_topic(cid))
    delivered = await manager.broadcast_to_topics(
        [messages_topic(cid)], "chat.message_created", {"conversation_id": str(cid)},
    )

    assert delivered == 1
    assert tab_a.sent == []
    assert [f["type"] for f in tab_b.sent] == ["chat.message_created"]


@pytest.mark.asyncio
async def test_closing_one_tab_keeps_the_other_subscribed():
    manager = ConnectionManager()
    tab_a, tab_b = FakeWebSocket(), FakeWebSocket()
    await manager.connect(tab_a, "user:alice")
    await manager.connect(tab_b, "user:alice")
    topic = conversations_topic("alice")
    manager.subscribe(tab_a, topic)
    manager.subscribe(tab_b, topic)

    manager.disconnect(tab_a, "user:alice")

    assert manager.subscribers(topic) == {tab_b}


@pytest.mark.asyncio
async def test_dead_socket_is_dropped_with_its_subscriptions():
    manager = ConnectionManager()
    ws = FakeWebSocket(broken=True)
    await manager.connect(ws, "user:bob")
    topic = conversations_topic("bob")
    manager.subscribe(ws, topic)

    delivered = await manager.broadcast_to_topics([topic], "chat.conversation_read", {})

    assert delivered == 0
    assert manager.subscribers(topic) == set()


@pytest.mark.asyncio
async def test_pubsub_event_fans_out_by_embedded_topics():
    from dm_service.app import _on_pubsub_event
    from dm_service.api.v1.routers.ws import get_manager
    from dm_service.infrastructure.bus.serializer import deserialize_event, serialize_event

    manager = get_manager()
    ws = FakeWebSocket()
    await manager.connect(ws, "user:fanout-bob")
    manager.subscribe(ws, conversations_topic("fanout-bob"))
    raw = serialize_event(
        "chat.conversation_read",
        {"conversation_id": str(uuid.uuid4()), "topics": [conversations_topic("fanout-bob")]},
    )

    try:
        await _on_pubsub_event(*deserialize_event(raw))
        await _on_pubsub_event("chat.conversation_read", {"conversation_id": "x"})
    finally:
        manager.disconnect(ws, "user:fanout-bob")

    assert [f["type"] for f in ws.sent] == ["chat.conversation_read"]


@pytest.mark.asyncio
async def test_subscriber_dispatch_tolerates_bad_envelopes():
    from dm_service.infrastructure.bus.redis_pubsub import RedisPubSubSubscriber

    received: list[tuple[str, dict]] = []

    async def callback(event_type: str, data: dict) -> None:
        received.append((event_type, data))

    subscriber = RedisPubSubSubscriber(redis=None, channel="dm.test", callback=callback)  # type: ignore[arg-type]

    await subscriber.dispatch("not json")
    await subscriber.dispatch('{"data": {}}')
    await subscriber.dispatch('{"event": "chat.typing_changed", "data": {"topics": []}}')

    assert received == [("chat.typing_changed", {"topics": []})]
    assert subscriber.running is False
