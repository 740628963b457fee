from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar
from uuid import UUID

from dm_service.domain.value_objects.topics import conversations_topic


@dataclass(frozen=True, slots=True)
class ConversationCreated:
    EVENT_TYPE: ClassVar[str] = "chat.conversation_created"

    conversation_id: UUID
    participants: tuple[str, str]

    def topics(self) -> list[str]:
        return [conversations_topic(p) for p in self.participants]

    def to_payload(self) -> dict[str, Any]:
        return {
            "conversation_id": str(self.conversation_id),
            "participants": list(self.participants),
            "topics": self.topics(),
        }
