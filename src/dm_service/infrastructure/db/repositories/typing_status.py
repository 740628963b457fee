from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from dm_service.domain.entities.typing_status import TypingStatus
from dm_service.infrastructure.db.mappers import typing_status as mapper
from dm_service.infrastructure.db.models.typing_status import TypingStatusModel


class TypingStatusReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_for_conversation(self, conversation_id: UUID) -> list[TypingStatus]:
        stmt = select(TypingStatusModel).where(
            TypingStatusModel.conversation_id == conversation_id
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class TypingStatusWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, status: TypingStatus) -> None:
        stmt = (
            pg_insert(TypingStatusModel)
            .values(
                conversation_id=status.conversation_id,
                user_id=status.user_id,
                expires_at=status.expires_at,
            )
            .on_conflict_do_update(
                constraint="uq_typing_status_member",
                set_={"expires_at": status.expires_at},
            )
        )
        await self._session.execute(stmt)

    async def delete(self, conversation_id: UUID, user_id: str) -> bool:
        stmt = (
            delete(TypingStatusModel)
            .where(
                TypingStatusModel.conversation_id == conversation_id,
                TypingStatusModel.user_id == user_id,
            )
            .returning(TypingStatusModel.id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None
