from __future__ import annotations

from typing import Protocol
from uuid import UUID

from dm_service.domain.entities.typing_status import TypingStatus


class TypingStatusReader(Protocol):
    async def list_for_conversation(self, conversation_id: UUID) -> list[TypingStatus]: ...


class TypingStatusWriter(Protocol):
    async def upsert(self, status: TypingStatus) -> None: ...

    async def delete(self, conversation_id: UUID, user_id: str) -> bool:
        """Return True if a row was removed."""
        ...
