from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dm_service.application.repositories.outbox import OutboxRecord
from dm_service.domain.value_objects.enums import OutboxStatus
from dm_service.infrastructure.db.models.outbox import OutboxMessageModel

_RETRYABLE = (OutboxStatus.PENDING, OutboxStatus.FAILED)


class OutboxWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, event_type: str, payload: dict[str, Any]) -> None:
        self._session.add(OutboxMessageModel(event_type=event_type, payload=payload))
        await self._session.flush()

    async def fetch_pending(self, batch_size: int) -> list[OutboxRecord]:
        """Claim up to ``batch_size`` due rows by flipping them to PROCESSING.

        SKIP LOCKED lets several relay workers poll the same table.
        """
        model = OutboxMessageModel
        due = (
            select(model.id)
            .where(
                model.status.in_(_RETRYABLE),
                or_(model.next_retry_at.is_(None), model.next_retry_at <= datetime.now(timezone.utc)),
            )
            .order_by(model.id)
            .limit(batch_size)
            .with_for_update(skip_locked=True)
        )
        claim = (
            update(model)
            .where(model.id.in_(due))
            .values(status=OutboxStatus.PROCESSING)
            .returning(model.id, model.event_type, model.payload, model.attempts)
        )
        rows = (await self._session.execute(claim)).all()
        records = [
            OutboxRecord(id=r.id, event_type=r.event_type, payload=r.payload, attempts=r.attempts)
            for r in rows
        ]
        records.sort(key=lambda r: r.id)
        return records

    async def mark_sent(self, ids: list[int]) -> None:
        if ids:
            await self._session.execute(
                update(OutboxMessageModel)
                .where(OutboxMessageModel.id.in_(ids))
                .values(status=OutboxStatus.SENT)
            )

    async def mark_failed(self, record_id: int, next_retry_at: datetime) -> None:
        model = OutboxMessageModel
        await self._session.execute(
            update(model)
            .where(model.id == record_id)
            .values(
                status=OutboxStatus.FAILED,
                attempts=model.attempts + 1,
                next_retry_at=next_retry_at,
            )
        )
