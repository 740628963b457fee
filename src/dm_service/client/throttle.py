"""Leading-edge throttles for client mutations."""
from __future__ import annotations

import time
from typing import Callable

MonotonicClock = Callable[[], float]


class Throttle:
    """Allows one action per ``interval`` seconds; extra calls are dropped, not queued."""

    def __init__(self, interval: float, *, now: MonotonicClock = time.monotonic) -> None:
        self.interval = interval
        self._now = now
        self._last: float | None = None

    def allow(self) -> bool:
        now = self._now()
        if self._last is not None and now - self._last < self.interval:
            return False
        self._last = now
        return True

    def reset(self) -> None:
        self._last = None


class CooldownGuard:
    """Single-flight guard with a cooldown measured from the last accepted attempt."""

    def __init__(self, cooldown: float, *, now: MonotonicClock = time.monotonic) -> None:
        self._throttle = Throttle(cooldown, now=now)
        self.in_flight = False

    def try_begin(self) -> bool:
        if self.in_flight or not self._throttle.allow():
            return False
        self.in_flight = True
        return True

    def end(self) -> None:
        self.in_flight = False
