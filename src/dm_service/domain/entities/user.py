from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True, slots=True)
class User:
    id: str
    email: str
    name: str
    avatar: str | None
    last_seen_at: datetime

    def is_online(self, now: datetime, threshold: timedelta) -> bool:
        return now - self.last_seen_at < threshold
