from __future__ import annotations

from dm_service.domain.entities.typing_status import TypingStatus
from dm_service.infrastructure.db.models.typing_status import TypingStatusModel


def model_to_entity(model: TypingStatusModel) -> TypingStatus:
    return TypingStatus(
        conversation_id=model.conversation_id,
        user_id=model.user_id,
        expires_at=model.expires_at,
    )
