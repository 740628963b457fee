from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from dm_service.domain.entities.conversation import Conversation


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None: ...

    async def get_by_participants(
        self, participant_a: str, participant_b: str
    ) -> Conversation | None:
        """Find the conversation for an already canonical (sorted) pair."""
        ...

    async def get_many(
        self, conversation_ids: list[UUID]
    ) -> dict[UUID, Conversation]: ...


class ConversationWriter(Protocol):
    async def get_for_update(self, conversation_id: UUID) -> Conversation | None:
        """Read the conversation and hold its row lock until the unit of work ends."""
        ...

    async def create_if_not_exists(
        self, conversation: Conversation
    ) -> tuple[Conversation, bool]:
        """Insert conversation. On a pair-key conflict return the existing row with created=False."""
        ...

    async def update_last_message(
        self, conversation_id: UUID, ts: datetime, text: str
    ) -> None: ...
