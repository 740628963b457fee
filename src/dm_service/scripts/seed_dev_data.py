"""Seed development data: two users, their conversation and a short exchange."""
from __future__ import annotations

import asyncio
import logging

from dm_service.infrastructure.db.base import Base
from dm_service.infrastructure.db import models  # noqa: F401
from dm_service.infrastructure.db.session import engine, uow_scope
from dm_service.services import (
    conversation_service,
    message_service,
    read_state_service,
    user_service,
)

logger = logging.getLogger(__name__)

USERS = [
    ("user_alice", "alice@example.com", "Alice"),
    ("user_bob", "bob@example.com", "Bob"),
    ("user_carol", "carol@example.com", "Carol"),
]

EXCHANGE = [
    ("user_alice", "hi"),
    ("user_bob", "hey Alice"),
    ("user_alice", "lunch tomorrow?"),
]


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with uow_scope() as uow:
        for user_id, email, name in USERS:
            await user_service.sync_user(user_id, email, name, None, uow)

    async with uow_scope() as uow:
        conv, created = await conversation_service.get_or_create_direct_conversation(
            "user_alice", "user_bob", uow,
        )
    if not created:
        logger.info("Conversation %s already seeded, skipping messages", conv.id)
        return

    for sender_id, text in EXCHANGE:
        async with uow_scope() as uow:
            await message_service.send_message(conv.id, sender_id, text, uow)

    async with uow_scope() as uow:
        await read_state_service.mark_conversation_read(conv.id, "user_bob", uow)

    logger.info("Seeded conversation %s with %d messages", conv.id, len(EXCHANGE))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
