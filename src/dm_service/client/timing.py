from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ClientTimings:
    """Client-side pacing, in seconds unless noted."""

    read_mark_interval: float = 0.3
    typing_interval: float = 0.35
    send_interval: float = 0.35
    start_cooldown: float = 0.8
    search_debounce: float = 0.3
    identity_refresh: float = 30.0
    near_bottom_px: int = 96
