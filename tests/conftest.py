"""Shared test fixtures."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import pytest

from dm_service.application.repositories.outbox import OutboxRecord
from dm_service.domain.entities.conversation import Conversation, canonical_pair
from dm_service.domain.entities.membership import Membership
from dm_service.domain.entities.message import Message
from dm_service.domain.entities.typing_status import TypingStatus
from dm_service.domain.entities.user import User

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@dataclass
class FakeClock:
    current: datetime = T0

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_user(
    user_id: str,
    *,
    name: str | None = None,
    email: str | None = None,
    last_seen_at: datetime = T0,
) -> User:
    return User(
        id=user_id,
        email=email or f"{user_id}@example.com",
        name=name or user_id.title(),
        avatar=None,
        last_seen_at=last_seen_at,
    )


def make_conversation(
    first: str = "alice",
    second: str = "bob",
    *,
    conversation_id: UUID | None = None,
    last_message_at: datetime = T0,
    last_message_text: str = "",
) -> Conversation:
    a, b = canonical_pair(first, second)
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        participant_a=a,
        participant_b=b,
        created_at=T0,
        last_message_at=last_message_at,
        last_message_text=last_message_text,
    )


@dataclass
class FakeUserRepo:
    _store: dict[str, User] = field(default_factory=dict)

    async def get_by_id(self, user_id: str) -> User | None:
        return self._store.get(user_id)

    async def get_many(self, user_ids: list[str]) -> dict[str, User]:
        return {uid: self._store[uid] for uid in user_ids if uid in self._store}

    async def search(self, requester_id: str, query: str, *, limit: int = 10) -> list[User]:
        needle = query.lower()
        matches = [
            u for u in self._store.values()
            if u.id != requester_id
            and (needle in u.name.lower() or needle in u.email.lower())
        ]
        matches.sort(key=lambda u: u.name)
        return matches[:limit]

    async def upsert(self, user: User) -> User:
        self._store[user.id] = user
        return user

    async def touch_last_seen(self, user_id: str, ts: datetime) -> bool:
        user = self._store.get(user_id)
        if user is None:
            return False
        self._store[user_id] = replace(user, last_seen_at=ts)
        return True


@dataclass
class FakeConversationRepo:
    _store: dict[UUID, Conversation] = field(default_factory=dict)
    locked: list[UUID] = field(default_factory=list)

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._store.get(conversation_id)

    async def get_by_participants(self, participant_a: str, participant_b: str) -> Conversation | None:
        for c in self._store.values():
            if (c.participant_a, c.participant_b) == (participant_a, participant_b):
                return c
        return None

    async def get_many(self, conversation_ids: list[UUID]) -> dict[UUID, Conversation]:
        return {cid: self._store[cid] for cid in conversation_ids if cid in self._store}

    async def get_for_update(self, conversation_id: UUID) -> Conversation | None:
        self.locked.append(conversation_id)
        return self._store.get(conversation_id)

    async def create_if_not_exists(self, conversation: Conversation) -> tuple[Conversation, bool]:
        existing = await self.get_by_participants(
            conversation.participant_a, conversation.participant_b,
        )
        if existing is not None:
            return existing, False
        self._store[conversation.id] = conversation
        return conversation, True

    async def update_last_message(self, conversation_id: UUID, ts: datetime, text: str) -> None:
        conv = self._store[conversation_id]
        if conv.last_message_at > ts:
            return
        self._store[conversation_id] = replace(conv, last_message_at=ts, last_message_text=text)


@dataclass
class FakeMembershipRepo:
    _rows: dict[tuple[UUID, str], Membership] = field(default_factory=dict)

    async def get(self, conversation_id: UUID, user_id: str) -> Membership | None:
        return self._rows.get((conversation_id, user_id))

    async def list_for_user(self, user_id: str) -> list[Membership]:
        return [m for m in self._rows.values() if m.user_id == user_id]

    async def list_for_conversation(self, conversation_id: UUID) -> list[Membership]:
        return [m for m in self._rows.values() if m.conversation_id == conversation_id]

    async def add_if_absent(self, membership: Membership) -> bool:
        key = (membership.conversation_id, membership.user_id)
        if key in self._rows:
            return False
        self._rows[key] = membership
        return True

    async def reset_unread(self, conversation_id: UUID, user_id: str, ts: datetime) -> None:
        row = self._rows.get((conversation_id, user_id))
        if row is not None:
            self._rows[(conversation_id, user_id)] = replace(row, unread_count=0, last_read_at=ts)

    async def increment_unread(self, conversation_id: UUID, *, exclude_user_id: str) -> None:
        for key, row in list(self._rows.items()):
            if row.conversation_id == conversation_id and row.user_id != exclude_user_id:
                self._rows[key] = replace(row, unread_count=row.unread_count + 1)


@dataclass
class FakeMessageRepo:
    _messages: list[Message] = field(default_factory=list)

    async def list_for_conversation(self, conversation_id: UUID) -> list[Message]:
        rows = [m for m in self._messages if m.conversation_id == conversation_id]
        # sorted() is stable, so append order breaks created_at ties
        return sorted(rows, key=lambda m: m.created_at)

    async def add(self, message: Message) -> Message:
        self._messages.append(message)
        return message


@dataclass
class FakeTypingRepo:
    _rows: dict[tuple[UUID, str], TypingStatus] = field(default_factory=dict)

    async def list_for_conversation(self, conversation_id: UUID) -> list[TypingStatus]:
        return [t for t in self._rows.values() if t.conversation_id == conversation_id]

    async def upsert(self, status: TypingStatus) -> None:
        self._rows[(status.conversation_id, status.user_id)] = status

    async def delete(self, conversation_id: UUID, user_id: str) -> bool:
        return self._rows.pop((conversation_id, user_id), None) is not None


@dataclass
class FakeOutboxWriter:
    _records: list[dict[str, Any]] = field(default_factory=list)
    pending: list[OutboxRecord] = field(default_factory=list)
    sent: list[int] = field(default_factory=list)
    failed: dict[int, datetime] = field(default_factory=dict)

    async def add(self, event_type: str, payload: dict[str, Any]) -> None:
        self._records.append({"event_type": event_type, "payload": payload})

    async def fetch_pending(self, batch_size: int) -> list[OutboxRecord]:
        batch, self.pending = self.pending[:batch_size], self.pending[batch_size:]
        return batch

    async def mark_sent(self, ids: list[int]) -> None:
        self.sent.extend(ids)

    async def mark_failed(self, record_id: int, next_retry_at: datetime) -> None:
        self.failed[record_id] = next_retry_at

    def event_types(self) -> list[str]:
        return [r["event_type"] for r in self._records]


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests; each reader/writer pair shares one store."""
    users: FakeUserRepo = field(default_factory=FakeUserRepo)
    conversations: FakeConversationRepo = field(default_factory=FakeConversationRepo)
    memberships: FakeMembershipRepo = field(default_factory=FakeMembershipRepo)
    messages: FakeMessageRepo = field(default_factory=FakeMessageRepo)
    typing: FakeTypingRepo = field(default_factory=FakeTypingRepo)
    outbox: FakeOutboxWriter = field(default_factory=FakeOutboxWriter)
    _committed: bool = False
    commits: int = 0

    @property
    def users_w(self) -> FakeUserRepo:
        return self.users

    @property
    def conversations_w(self) -> FakeConversationRepo:
        return self.conversations

    @property
    def memberships_w(self) -> FakeMembershipRepo:
        return self.memberships

    @property
    def messages_w(self) -> FakeMessageRepo:
        return self.messages

    @property
    def typing_w(self) -> FakeTypingRepo:
        return self.typing

    def add_users(self, *users: User) -> None:
        for u in users:
            self.users._store[u.id] = u

    def add_conversation(self, conv: Conversation, *, with_memberships: bool = True) -> Conversation:
        self.conversations._store[conv.id] = conv
        if with_memberships:
            for uid in conv.participants:
                self.memberships._rows[(conv.id, uid)] = Membership(
                    conversation_id=conv.id, user_id=uid, unread_count=0, last_read_at=T0,
                )
        return conv

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True
        self.commits += 1

    async def rollback(self) -> None:
        pass


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()
