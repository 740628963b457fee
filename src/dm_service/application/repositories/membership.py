from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from dm_service.domain.entities.membership import Membership


class MembershipReader(Protocol):
    async def get(self, conversation_id: UUID, user_id: str) -> Membership | None: ...

    async def list_for_user(self, user_id: str) -> list[Membership]: ...

    async def list_for_conversation(self, conversation_id: UUID) -> list[Membership]: ...


class MembershipWriter(Protocol):
    async def add_if_absent(self, membership: Membership) -> bool:
        """Insert membership unless one exists for (conversation, user). Return True if inserted."""
        ...

    async def reset_unread(
        self, conversation_id: UUID, user_id: str, ts: datetime
    ) -> None: ...

    async def increment_unread(
        self, conversation_id: UUID, *, exclude_user_id: str
    ) -> None: ...
