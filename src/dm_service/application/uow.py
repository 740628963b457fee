from __future__ import annotations

from typing import Protocol

from dm_service.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from dm_service.application.repositories.membership import (
    MembershipReader,
    MembershipWriter,
)
from dm_service.application.repositories.message import MessageReader, MessageWriter
from dm_service.application.repositories.outbox import OutboxWriter
from dm_service.application.repositories.typing_status import (
    TypingStatusReader,
    TypingStatusWriter,
)
from dm_service.application.repositories.user import UserReader, UserWriter


class UnitOfWork(Protocol):
    users: UserReader
    users_w: UserWriter
    conversations: ConversationReader
    conversations_w: ConversationWriter
    memberships: MembershipReader
    memberships_w: MembershipWriter
    messages: MessageReader
    messages_w: MessageWriter
    typing: TypingStatusReader
    typing_w: TypingStatusWriter
    outbox: OutboxWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...
