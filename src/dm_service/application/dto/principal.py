from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Identity asserted by the external identity provider, trusted verbatim."""

    user_id: str
    email: str = ""
    name: str = ""
    avatar: str | None = None

    @property
    def principal_key(self) -> str:
        """Unique key for WS connection registry."""
        return f"user:{self.user_id}"
