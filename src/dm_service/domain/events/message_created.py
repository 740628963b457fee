from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar
from uuid import UUID

from dm_service.domain.value_objects.topics import conversations_topic, messages_topic


@dataclass(frozen=True, slots=True)
class MessageCreated:
    EVENT_TYPE: ClassVar[str] = "chat.message_created"

    message_id: UUID
    conversation_id: UUID
    sender_id: str
    participants: tuple[str, str]
    created_at: datetime

    def topics(self) -> list[str]:
        return [messages_topic(self.conversation_id)] + [
            conversations_topic(p) for p in self.participants
        ]

    def to_payload(self) -> dict[str, Any]:
        return {
            "message_id": str(self.message_id),
            "conversation_id": str(self.conversation_id),
            "sender_id": self.sender_id,
            "created_at": self.created_at.isoformat(),
            "topics": self.topics(),
        }
