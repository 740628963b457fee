from __future__ import annotations

import logging

from dm_service.application.dto.user import UserProfileDTO
from dm_service.application.exceptions import InvalidArgumentError, NotFoundError
from dm_service.application.ports.clock import Clock, SystemClock
from dm_service.application.uow import UnitOfWork
from dm_service.config import settings
from dm_service.domain.entities.user import User

logger = logging.getLogger(__name__)

_system_clock = SystemClock()


def _require(value: str | None, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidArgumentError(f"{field} is required and cannot be empty")
    return cleaned


def to_profile(user: User, clock: Clock = _system_clock) -> UserProfileDTO:
    return UserProfileDTO(
        id=user.id,
        email=user.email,
        name=user.name,
        avatar=user.avatar,
        is_online=user.is_online(clock.now(), settings.online_threshold),
    )


async def sync_user(
    user_id: str,
    email: str,
    name: str,
    avatar: str | None,
    uow: UnitOfWork,
    *,
    clock: Clock = _system_clock,
) -> str:
    """Create or refresh the local copy of an identity-provider user.

    Called on every login and periodic heartbeat; always bumps last_seen_at.
    """
    user = User(
        id=_require(user_id, "user id"),
        email=_require(email, "email"),
        name=_require(name, "name"),
        avatar=(avatar or "").strip() or None,
        last_seen_at=clock.now(),
    )
    user = await uow.users_w.upsert(user)
    await uow.commit()
    return user.id


async def touch_last_seen(
    user_id: str,
    uow: UnitOfWork,
    *,
    clock: Clock = _system_clock,
) -> None:
    user_id = _require(user_id, "user id")
    found = await uow.users_w.touch_last_seen(user_id, clock.now())
    if not found:
        raise NotFoundError(f'User with id "{user_id}" not found')
    await uow.commit()


async def get_user(
    user_id: str,
    uow: UnitOfWork,
    *,
    clock: Clock = _system_clock,
) -> UserProfileDTO | None:
    user = await uow.users.get_by_id(_require(user_id, "user id"))
    return to_profile(user, clock) if user else None


async def search_users(
    requester_id: str,
    query: str,
    uow: UnitOfWork,
    *,
    clock: Clock = _system_clock,
) -> list[UserProfileDTO]:
    """Find other members by name or email. A blank query matches nobody."""
    requester_id = _require(requester_id, "requester id")
    needle = (query or "").strip().lower()
    if not needle:
        return []

    users = await uow.users.search(
        requester_id, needle, limit=settings.USER_SEARCH_LIMIT,
    )
    logger.debug("User search %r by %s matched %d", needle, requester_id, len(users))
    return [to_profile(u, clock) for u in users if u.id != requester_id]
