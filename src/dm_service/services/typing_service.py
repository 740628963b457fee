from __future__ import annotations

import uuid

from dm_service.application.dto.typing_status import TypingUserDTO
from dm_service.application.exceptions import InvalidArgumentError
from dm_service.application.ports.clock import Clock, SystemClock
from dm_service.application.uow import UnitOfWork
from dm_service.config import settings
from dm_service.domain.entities.typing_status import TypingStatus
from dm_service.domain.events.typing_changed import TypingChanged

_system_clock = SystemClock()


async def set_typing_status(
    conversation_id: uuid.UUID,
    user_id: str,
    is_typing: bool,
    uow: UnitOfWork,
    *,
    clock: Clock = _system_clock,
) -> None:
    """Extend the user's typing deadline, or clear it.

    Rows are never swept; readers drop expired ones.
    """
    user_id = (user_id or "").strip()
    if not user_id:
        raise InvalidArgumentError("userId is required")

    if is_typing:
        await uow.typing_w.upsert(
            TypingStatus(
                conversation_id=conversation_id,
                user_id=user_id,
                expires_at=clock.now() + settings.typing_ttl,
            )
        )
    else:
        removed = await uow.typing_w.delete(conversation_id, user_id)
        if not removed:
            return

    event = TypingChanged(conversation_id=conversation_id, user_id=user_id, is_typing=is_typing)
    await uow.outbox.add(event.EVENT_TYPE, event.to_payload())
    await uow.commit()


async def get_typing_users(
    conversation_id: uuid.UUID,
    current_user_id: str,
    uow: UnitOfWork,
    *,
    clock: Clock = _system_clock,
) -> list[TypingUserDTO]:
    current_user_id = (current_user_id or "").strip()
    now = clock.now()

    rows = await uow.typing.list_for_conversation(conversation_id)
    active = [r for r in rows if r.user_id != current_user_id and r.is_active(now)]
    if not active:
        return []

    profiles = await uow.users.get_many([r.user_id for r in active])
    return [
        TypingUserDTO(user_id=r.user_id, name=profiles[r.user_id].name)
        for r in active
        if r.user_id in profiles
    ]
