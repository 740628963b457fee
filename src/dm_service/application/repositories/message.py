from __future__ import annotations

from typing import Protocol
from uuid import UUID

from dm_service.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_for_conversation(self, conversation_id: UUID) -> list[Message]:
        """All messages, oldest first; insertion order breaks timestamp ties."""
        ...


class MessageWriter(Protocol):
    async def add(self, message: Message) -> Message: ...
