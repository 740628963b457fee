from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar
from uuid import UUID

from dm_service.domain.value_objects.topics import typing_topic


@dataclass(frozen=True, slots=True)
class TypingChanged:
    EVENT_TYPE: ClassVar[str] = "chat.typing_changed"

    conversation_id: UUID
    user_id: str
    is_typing: bool

    def topics(self) -> list[str]:
        return [typing_topic(self.conversation_id)]

    def to_payload(self) -> dict[str, Any]:
        return {
            "conversation_id": str(self.conversation_id),
            "user_id": self.user_id,
            "is_typing": self.is_typing,
            "topics": self.topics(),
        }
