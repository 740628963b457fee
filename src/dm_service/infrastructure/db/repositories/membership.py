from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from dm_service.domain.entities.membership import Membership
from dm_service.infrastructure.db.mappers import membership as mapper
from dm_service.infrastructure.db.models.membership import MembershipModel


class MembershipReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, conversation_id: UUID, user_id: str) -> Membership | None:
        stmt = select(MembershipModel).where(
            MembershipModel.conversation_id == conversation_id,
            MembershipModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_user(self, user_id: str) -> list[Membership]:
        stmt = select(MembershipModel).where(MembershipModel.user_id == user_id)
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_for_conversation(self, conversation_id: UUID) -> list[Membership]:
        stmt = select(MembershipModel).where(
            MembershipModel.conversation_id == conversation_id
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class MembershipWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_if_absent(self, membership: Membership) -> bool:
        stmt = (
            pg_insert(MembershipModel)
            .values(
                conversation_id=membership.conversation_id,
                user_id=membership.user_id,
                unread_count=membership.unread_count,
                last_read_at=membership.last_read_at,
            )
            .on_conflict_do_nothing(constraint="uq_membership_member")
            .returning(MembershipModel.id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def reset_unread(
        self,
        conversation_id: UUID,
        user_id: str,
        ts: datetime,
    ) -> None:
        stmt = (
            update(MembershipModel)
            .where(
                MembershipModel.conversation_id == conversation_id,
                MembershipModel.user_id == user_id,
            )
            .values(unread_count=0, last_read_at=ts)
        )
        await self._session.execute(stmt)

    async def increment_unread(
        self,
        conversation_id: UUID,
        *,
        exclude_user_id: str,
    ) -> None:
        # computed in SQL so concurrent senders never lose an increment
        stmt = (
            update(MembershipModel)
            .where(
                MembershipModel.conversation_id == conversation_id,
                MembershipModel.user_id != exclude_user_id,
            )
            .values(unread_count=MembershipModel.unread_count + 1)
        )
        await self._session.execute(stmt)
