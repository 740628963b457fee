from __future__ import annotations

import logging
import uuid

from dm_service.application.dto.conversation import (
    NO_MESSAGES_PLACEHOLDER,
    UNKNOWN_USER_NAME,
    ConversationSummaryDTO,
)
from dm_service.application.exceptions import InvalidArgumentError
from dm_service.application.ports.clock import Clock, SystemClock
from dm_service.application.uow import UnitOfWork
from dm_service.config import settings
from dm_service.domain.entities.conversation import Conversation, canonical_pair
from dm_service.domain.entities.membership import Membership
from dm_service.domain.events.conversation_created import ConversationCreated

logger = logging.getLogger(__name__)

_system_clock = SystemClock()


async def get_or_create_direct_conversation(
    current_user_id: str,
    other_user_id: str,
    uow: UnitOfWork,
    *,
    clock: Clock = _system_clock,
) -> tuple[Conversation, bool]:
    """Return the one conversation for this unordered pair, creating it if needed.

    Returns (conversation, created). Missing membership rows of an existing
    conversation are recreated.
    """
    current = (current_user_id or "").strip()
    other = (other_user_id or "").strip()
    if not current or not other:
        raise InvalidArgumentError("Both user IDs are required")
    if current == other:
        raise InvalidArgumentError("Cannot start a direct conversation with yourself")

    participant_a, participant_b = canonical_pair(current, other)
    now = clock.now()

    conversation = await uow.conversations.get_by_participants(participant_a, participant_b)
    created = False
    if conversation is None:
        conversation, created = await uow.conversations_w.create_if_not_exists(
            Conversation(
                id=uuid.uuid4(),
                participant_a=participant_a,
                participant_b=participant_b,
                created_at=now,
                last_message_at=now,
                last_message_text="",
            )
        )

    healed = 0
    for user_id in (current, other):
        inserted = await uow.memberships_w.add_if_absent(
            Membership(
                conversation_id=conversation.id,
                user_id=user_id,
                unread_count=0,
                last_read_at=now,
            )
        )
        healed += int(inserted)

    if created:
        event = ConversationCreated(
            conversation_id=conversation.id,
            participants=conversation.participants,
        )
        await uow.outbox.add(event.EVENT_TYPE, event.to_payload())
        logger.info("Created conversation %s for %s", conversation.id, conversation.participants)
    elif healed:
        logger.warning(
            "Restored %d missing membership(s) for conversation %s", healed, conversation.id,
        )

    if created or healed:
        await uow.commit()
    return conversation, created


async def list_conversations(
    user_id: str,
    uow: UnitOfWork,
    *,
    clock: Clock = _system_clock,
) -> list[ConversationSummaryDTO]:
    """Summaries of every conversation the user belongs to, most recent first."""
    user_id = (user_id or "").strip()
    if not user_id:
        raise InvalidArgumentError("user id is required")

    memberships = await uow.memberships.list_for_user(user_id)
    conversations = await uow.conversations.get_many(
        [m.conversation_id for m in memberships]
    )

    others: dict[uuid.UUID, str] = {}
    for m in memberships:
        conversation = conversations.get(m.conversation_id)
        if conversation is None:
            continue
        other_id = conversation.other_participant(user_id)
        if other_id is None:
            continue
        others[m.conversation_id] = other_id

    profiles = await uow.users.get_many(list(set(others.values())))
    now = clock.now()

    result: list[ConversationSummaryDTO] = []
    for m in memberships:
        if m.conversation_id not in others:
            continue
        conversation = conversations[m.conversation_id]
        other_id = others[m.conversation_id]
        profile = profiles.get(other_id)
        result.append(
            ConversationSummaryDTO(
                conversation_id=conversation.id,
                participant_id=profile.id if profile else other_id,
                participant_name=profile.name if profile else UNKNOWN_USER_NAME,
                participant_email=profile.email if profile else other_id,
                participant_avatar=profile.avatar if profile else None,
                is_online=(
                    profile.is_online(now, settings.online_threshold) if profile else False
                ),
                last_message=conversation.last_message_text or NO_MESSAGES_PLACEHOLDER,
                last_message_at=conversation.last_message_at,
                unread_count=m.unread_count,
            )
        )

    result.sort(key=lambda s: s.last_message_at, reverse=True)
    return result


async def get_conversation(
    conversation_id: uuid.UUID,
    uow: UnitOfWork,
) -> Conversation | None:
    return await uow.conversations.get_by_id(conversation_id)
