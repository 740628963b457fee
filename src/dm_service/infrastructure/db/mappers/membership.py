from __future__ import annotations

from dm_service.domain.entities.membership import Membership
from dm_service.infrastructure.db.models.membership import MembershipModel


def model_to_entity(model: MembershipModel) -> Membership:
    return Membership(
        conversation_id=model.conversation_id,
        user_id=model.user_id,
        unread_count=model.unread_count,
        last_read_at=model.last_read_at,
    )
