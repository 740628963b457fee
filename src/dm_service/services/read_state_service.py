from __future__ import annotations

import uuid

from dm_service.application.exceptions import InvalidArgumentError
from dm_service.application.policies.permissions import assert_participant
from dm_service.application.ports.clock import Clock, SystemClock
from dm_service.application.uow import UnitOfWork
from dm_service.domain.entities.membership import Membership
from dm_service.domain.events.conversation_read import ConversationRead

_system_clock = SystemClock()


async def mark_conversation_read(
    conversation_id: uuid.UUID,
    user_id: str,
    uow: UnitOfWork,
    *,
    clock: Clock = _system_clock,
) -> None:
    """Zero the user's unread counter and move their read cursor to now.

    Besides an empty user id, a missing conversation raises NotFound and a
    non-member raises PermissionDenied, so read state never exists for
    users outside the pair.
    """
    user_id = (user_id or "").strip()
    if not user_id:
        raise InvalidArgumentError("userId is required")

    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_participant(conversation, user_id)

    now = clock.now()
    membership = await uow.memberships.get(conversation_id, user_id)
    if membership is None:
        changed = await uow.memberships_w.add_if_absent(
            Membership(
                conversation_id=conversation_id,
                user_id=user_id,
                unread_count=0,
                last_read_at=now,
            )
        )
    else:
        await uow.memberships_w.reset_unread(conversation_id, user_id, now)
        changed = membership.unread_count > 0

    if changed:
        event = ConversationRead(conversation_id=conversation_id, user_id=user_id)
        await uow.outbox.add(event.EVENT_TYPE, event.to_payload())
    await uow.commit()
