from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from dm_service.domain.entities.user import User
from dm_service.infrastructure.db.mappers import user as mapper
from dm_service.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: str) -> User | None:
        result = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(result) if result else None

    async def get_many(self, user_ids: list[str]) -> dict[str, User]:
        if not user_ids:
            return {}
        stmt = select(UserModel).where(UserModel.id.in_(user_ids))
        result = await self._session.execute(stmt)
        return {m.id: mapper.model_to_entity(m) for m in result.scalars().all()}

    async def search(
        self,
        requester_id: str,
        query: str,
        *,
        limit: int = 10,
    ) -> list[User]:
        needle = query.lower()
        stmt = (
            select(UserModel)
            .where(
                UserModel.id != requester_id,
                or_(
                    func.lower(UserModel.name).contains(needle, autoescape=True),
                    func.lower(UserModel.email).contains(needle, autoescape=True),
                ),
            )
            .order_by(func.lower(UserModel.name), UserModel.id)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class UserWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, user: User) -> User:
        values = {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "avatar": user.avatar,
            "last_seen_at": user.last_seen_at,
        }
        stmt = pg_insert(UserModel).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserModel.id],
            set_={
                "email": stmt.excluded.email,
                "name": stmt.excluded.name,
                "avatar": stmt.excluded.avatar,
                "last_seen_at": stmt.excluded.last_seen_at,
            },
        ).returning(UserModel)
        result = await self._session.execute(
            stmt, execution_options={"populate_existing": True},
        )
        return mapper.model_to_entity(result.scalar_one())

    async def touch_last_seen(self, user_id: str, ts: datetime) -> bool:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(last_seen_at=ts)
            .returning(UserModel.id)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None
