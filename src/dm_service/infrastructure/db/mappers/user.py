from __future__ import annotations

from dm_service.domain.entities.user import User
from dm_service.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        email=model.email,
        name=model.name,
        avatar=model.avatar,
        last_seen_at=model.last_seen_at,
    )
