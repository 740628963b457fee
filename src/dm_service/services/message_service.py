from __future__ import annotations

import logging
import uuid

from dm_service.application.exceptions import InvalidArgumentError
from dm_service.application.policies.permissions import assert_participant, is_participant
from dm_service.application.ports.clock import Clock, SystemClock
from dm_service.application.uow import UnitOfWork
from dm_service.domain.entities.message import Message
from dm_service.domain.events.message_created import MessageCreated

logger = logging.getLogger(__name__)

_system_clock = SystemClock()


async def send_message(
    conversation_id: uuid.UUID,
    sender_id: str,
    content: str,
    uow: UnitOfWork,
    *,
    clock: Clock = _system_clock,
) -> Message:
    """Append a message and update the denormalized summary in one unit of work.

    The message row, the conversation's last-message fields, every member's
    unread counter and the outbox notification are committed together.
    """
    sender_id = (sender_id or "").strip()
    content = (content or "").strip()
    if not sender_id:
        raise InvalidArgumentError("senderId is required")
    if not content:
        raise InvalidArgumentError("Message cannot be empty")

    # concurrent sends to one conversation commit in timestamp order
    conversation = await uow.conversations_w.get_for_update(conversation_id)
    conversation = assert_participant(conversation, sender_id)

    now = clock.now()
    msg = await uow.messages_w.add(
        Message(
            id=uuid.uuid4(),
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            created_at=now,
            read_by=[sender_id],
        )
    )

    await uow.conversations_w.update_last_message(conversation_id, now, content)
    await uow.memberships_w.reset_unread(conversation_id, sender_id, now)
    await uow.memberships_w.increment_unread(conversation_id, exclude_user_id=sender_id)

    event = MessageCreated(
        message_id=msg.id,
        conversation_id=conversation_id,
        sender_id=sender_id,
        participants=conversation.participants,
        created_at=now,
    )
    await uow.outbox.add(event.EVENT_TYPE, event.to_payload())
    await uow.commit()
    return msg


async def get_conversation_messages(
    conversation_id: uuid.UUID,
    uow: UnitOfWork,
    *,
    viewer_id: str | None = None,
) -> list[Message]:
    """Messages oldest first.

    With a viewer, a conversation the viewer does not belong to yields no data.
    """
    if viewer_id is not None:
        conversation = await uow.conversations.get_by_id(conversation_id)
        if not is_participant(conversation, viewer_id.strip()):
            logger.debug("Viewer %s has no access to %s", viewer_id, conversation_id)
            return []
    return await uow.messages.list_for_conversation(conversation_id)
