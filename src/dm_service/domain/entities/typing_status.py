from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class TypingStatus:
    conversation_id: UUID
    user_id: str
    expires_at: datetime

    def is_active(self, now: datetime) -> bool:
        return self.expires_at > now
