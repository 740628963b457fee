from __future__ import annotations

from dm_service.domain.entities.conversation import Conversation
from dm_service.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        participant_a=model.participant_a,
        participant_b=model.participant_b,
        created_at=model.created_at,
        last_message_at=model.last_message_at,
        last_message_text=model.last_message_text or "",
    )


def entity_to_values(entity: Conversation) -> dict:
    return {
        "id": entity.id,
        "participant_a": entity.participant_a,
        "participant_b": entity.participant_b,
        "created_at": entity.created_at,
        "last_message_at": entity.last_message_at,
        "last_message_text": entity.last_message_text,
    }
