from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


def canonical_pair(first: str, second: str) -> tuple[str, str]:
    """Order two participant ids so that (a, b) and (b, a) share one key.

    Ordering is by code point, matching the `COLLATE "C"` check on the table.
    """
    a, b = sorted((first.strip(), second.strip()))
    return a, b


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    participant_a: str
    participant_b: str
    created_at: datetime
    last_message_at: datetime
    last_message_text: str

    @property
    def participants(self) -> tuple[str, str]:
        return self.participant_a, self.participant_b

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participants

    def other_participant(self, user_id: str) -> str | None:
        if user_id == self.participant_a:
            return self.participant_b
        if user_id == self.participant_b:
            return self.participant_a
        return None
