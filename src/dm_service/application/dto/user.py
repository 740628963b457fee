from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserProfileDTO:
    id: str
    email: str
    name: str
    avatar: str | None
    is_online: bool
