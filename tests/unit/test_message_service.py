from __future__ import annotations

import uuid

import pytest

from dm_service.application.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
)
from dm_service.domain.value_objects.topics import conversations_topic, messages_topic
from dm_service.services import (
    conversation_service,
    message_service,
    read_state_service,
    user_service,
)
from tests.conftest import make_conversation


@pytest.fixture
def conv(uow):
    return uow.add_conversation(make_conversation("alice", "bob"))


@pytest.mark.asyncio
async def test_send_message_updates_summary_and_unread(uow, clock, conv):
    msg = await message_service.send_message(conv.id, "alice", "  hello  ", uow, clock=clock)

    assert msg.content == "hello"
    assert msg.read_by == ["alice"]
    stored = uow.conversations._store[conv.id]
    assert stored.last_message_text == "hello"
    assert stored.last_message_at == clock.now()
    assert (await uow.memberships.get(conv.id, "alice")).unread_count == 0
    assert (await uow.memberships.get(conv.id, "bob")).unread_count == 1
    assert uow._committed is True


@pytest.mark.asyncio
async def test_send_message_locks_conversation_before_writing(uow, clock, conv):
    await message_service.send_message(conv.id, "alice", "first", uow, clock=clock)
    clock.advance(1)
    await message_service.send_message(conv.id, "bob", "second", uow, clock=clock)

    assert uow.conversations.locked == [conv.id, conv.id]
    tail = (await uow.messages.list_for_conversation(conv.id))[-1]
    stored = uow.conversations._store[conv.id]
    assert (stored.last_message_text, stored.last_message_at) == (tail.content, tail.created_at)


@pytest.mark.asyncio
async def test_send_message_notifies_thread_and_both_lists(uow, clock, conv):
    await message_service.send_message(conv.id, "bob", "yo", uow, clock=clock)

    [record] = uow.outbox._records
    assert record["event_type"] == "chat.message_created"
    assert set(record["payload"]["topics"]) == {
        messages_topic(conv.id),
        conversations_topic("alice"),
        conversations_topic("bob"),
    }


@pytest.mark.asyncio
async def test_send_blank_message_rejected(uow, clock, conv):
    with pytest.raises(InvalidArgumentError):
        await message_service.send_message(conv.id, "alice", "   ", uow, clock=clock)
    assert uow.messages._messages == []
    assert uow._committed is False


@pytest.mark.asyncio
async def test_send_to_missing_conversation(uow, clock):
    with pytest.raises(NotFoundError):
        await message_service.send_message(uuid.uuid4(), "alice", "hi", uow, clock=clock)


@pytest.mark.asyncio
async def test_send_by_outsider_rejected(uow, clock, conv):
    with pytest.raises(PermissionDeniedError):
        await message_service.send_message(conv.id, "mallory", "hi", uow, clock=clock)
    assert uow.messages._messages == []


@pytest.mark.asyncio
async def test_messages_ordered_with_insertion_tiebreak(uow, clock, conv):
    for text in ("one", "two", "three"):
        await message_service.send_message(conv.id, "alice", text, uow, clock=clock)

    result = await message_service.get_conversation_messages(conv.id, uow)

    assert [m.content for m in result] == ["one", "two", "three"]


@pytest.mark.asyncio
async def test_messages_hidden_from_non_participant(uow, clock, conv):
    await message_service.send_message(conv.id, "alice", "secret", uow, clock=clock)

    assert await message_service.get_conversation_messages(conv.id, uow, viewer_id="eve") == []
    assert len(await message_service.get_conversation_messages(conv.id, uow, viewer_id="bob")) == 1


@pytest.mark.asyncio
async def test_alice_and_bob_exchange(uow, clock):
    await user_service.sync_user("alice", "alice@x.io", "Alice", None, uow, clock=clock)
    await user_service.sync_user("bob", "bob@x.io", "Bob", None, uow, clock=clock)

    conv, _ = await conversation_service.get_or_create_direct_conversation(
        "alice", "bob", uow, clock=clock,
    )
    clock.advance(1)
    await message_service.send_message(conv.id, "alice", "hi", uow, clock=clock)

    [bob_view] = await conversation_service.list_conversations("bob", uow, clock=clock)
    assert bob_view.participant_name == "Alice"
    assert bob_view.last_message == "hi"
    assert bob_view.unread_count == 1

    await read_state_service.mark_conversation_read(conv.id, "bob", uow, clock=clock)
    [bob_view] = await conversation_service.list_conversations("bob", uow, clock=clock)
    assert bob_view.unread_count == 0

    clock.advance(1)
    await message_service.send_message(conv.id, "bob", "hey", uow, clock=clock)
    [alice_view] = await conversation_service.list_conversations("alice", uow, clock=clock)
    assert alice_view.last_message == "hey"
    assert alice_view.unread_count == 1

    messages = await message_service.get_conversation_messages(conv.id, uow, viewer_id="alice")
    assert [(m.sender_id, m.content) for m in messages] == [("alice", "hi"), ("bob", "hey")]
