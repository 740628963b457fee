from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class StartConversationRequest(BaseModel):
    other_user_id: str = Field(..., min_length=1)


class StartConversationResponse(BaseModel):
    conversation_id: UUID
    created: bool


class ConversationSummaryResponse(BaseModel):
    conversation_id: UUID
    participant_id: str
    participant_name: str
    participant_email: str
    participant_avatar: str | None
    is_online: bool
    last_message: str
    last_message_at: datetime
    unread_count: int

    model_config = {"from_attributes": True}
