from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar
from uuid import UUID

from dm_service.domain.value_objects.topics import conversations_topic


@dataclass(frozen=True, slots=True)
class ConversationRead:
    EVENT_TYPE: ClassVar[str] = "chat.conversation_read"

    conversation_id: UUID
    user_id: str

    def topics(self) -> list[str]:
        return [conversations_topic(self.user_id)]

    def to_payload(self) -> dict[str, Any]:
        return {
            "conversation_id": str(self.conversation_id),
            "user_id": self.user_id,
            "topics": self.topics(),
        }
