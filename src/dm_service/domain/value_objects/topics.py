"""Live-query topic names shared by the fan-out side and the client."""
from __future__ import annotations

from enum import StrEnum
from uuid import UUID


class TopicKind(StrEnum):
    CONVERSATIONS = "conversations"
    MESSAGES = "messages"
    TYPING = "typing"


def conversations_topic(user_id: str) -> str:
    return f"{TopicKind.CONVERSATIONS}:{user_id}"


def messages_topic(conversation_id: UUID | str) -> str:
    return f"{TopicKind.MESSAGES}:{conversation_id}"


def typing_topic(conversation_id: UUID | str) -> str:
    return f"{TopicKind.TYPING}:{conversation_id}"
