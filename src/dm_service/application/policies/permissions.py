from __future__ import annotations

from dm_service.application.exceptions import NotFoundError, PermissionDeniedError
from dm_service.domain.entities.conversation import Conversation


def assert_participant(
    conversation: Conversation | None,
    user_id: str,
) -> Conversation:
    """Raise if conversation doesn't exist or user is not one of its two members."""
    if conversation is None:
        raise NotFoundError("Conversation not found")

    if not conversation.has_participant(user_id):
        raise PermissionDeniedError("Sender is not part of this conversation")

    return conversation


def is_participant(conversation: Conversation | None, user_id: str) -> bool:
    return conversation is not None and conversation.has_participant(user_id)
