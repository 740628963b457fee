from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from dm_service.domain.entities.conversation import Conversation
from dm_service.infrastructure.db.mappers import conversation as mapper
from dm_service.infrastructure.db.models.conversation import ConversationModel


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        result = await self._session.get(ConversationModel, conversation_id)
        return mapper.model_to_entity(result) if result else None

    async def get_by_participants(
        self,
        participant_a: str,
        participant_b: str,
    ) -> Conversation | None:
        stmt = select(ConversationModel).where(
            ConversationModel.participant_a == participant_a,
            ConversationModel.participant_b == participant_b,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def get_many(self, conversation_ids: list[UUID]) -> dict[UUID, Conversation]:
        if not conversation_ids:
            return {}
        stmt = select(ConversationModel).where(ConversationModel.id.in_(conversation_ids))
        result = await self._session.execute(stmt)
        return {m.id: mapper.model_to_entity(m) for m in result.scalars().all()}


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for_update(self, conversation_id: UUID) -> Conversation | None:
        stmt = (
            select(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def create_if_not_exists(
        self, conversation: Conversation
    ) -> tuple[Conversation, bool]:
        """Insert on the canonical pair key. Returns (conversation, created_flag)."""
        stmt = (
            pg_insert(ConversationModel)
            .values(**mapper.entity_to_values(conversation))
            .on_conflict_do_nothing(constraint="uq_conversation_pair")
            .returning(ConversationModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()

        if row is not None:
            return mapper.model_to_entity(row), True

        # Lost the race: a concurrent transaction committed this pair first
        reader = ConversationReaderRepo(self._session)
        existing = await reader.get_by_participants(
            conversation.participant_a, conversation.participant_b,
        )
        assert existing is not None
        return existing, False

    async def update_last_message(
        self,
        conversation_id: UUID,
        ts: datetime,
        text: str,
    ) -> None:
        stmt = (
            update(ConversationModel)
            .where(
                ConversationModel.id == conversation_id,
                ConversationModel.last_message_at <= ts,
            )
            .values(last_message_at=ts, last_message_text=text)
        )
        await self._session.execute(stmt)
