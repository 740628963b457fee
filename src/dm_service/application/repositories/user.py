from __future__ import annotations

from datetime import datetime
from typing import Protocol

from dm_service.domain.entities.user import User


class UserReader(Protocol):
    async def get_by_id(self, user_id: str) -> User | None: ...

    async def get_many(self, user_ids: list[str]) -> dict[str, User]: ...

    async def search(
        self, requester_id: str, query: str, *, limit: int = 10
    ) -> list[User]:
        """Case-insensitive substring match on name or email, requester excluded."""
        ...


class UserWriter(Protocol):
    async def upsert(self, user: User) -> User: ...

    async def touch_last_seen(self, user_id: str, ts: datetime) -> bool:
        """Return False when no such user exists."""
        ...
