from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

NO_MESSAGES_PLACEHOLDER = "No messages yet"
UNKNOWN_USER_NAME = "Unknown user"


@dataclass(frozen=True, slots=True)
class ConversationSummaryDTO:
    conversation_id: UUID
    participant_id: str
    participant_name: str
    participant_email: str
    participant_avatar: str | None
    is_online: bool
    last_message: str
    last_message_at: datetime
    unread_count: int
