from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

OnSettle = Callable[[str], Coroutine[Any, Any, None]]


class SearchDebouncer:
    """Keeps the raw search text and the settled query apart.

    ``raw`` follows every keystroke; ``query`` only changes once input has been
    quiet for ``delay`` seconds, or immediately when the input is blanked.
    """

    def __init__(self, delay: float, on_settle: OnSettle) -> None:
        self.delay = delay
        self.raw = ""
        self.query = ""
        self._on_settle = on_settle
        self._pending: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def update(self, text: str) -> None:
        self.raw = text
        self._cancel()
        if not text.strip():
            await self._settle("")
            return
        self._pending = asyncio.create_task(self._wait_and_settle(text), name="search-debounce")

    async def clear(self) -> None:
        self.raw = ""
        self._cancel()
        await self._settle("")

    def close(self) -> None:
        self._cancel()

    def _cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    async def _wait_and_settle(self, text: str) -> None:
        await asyncio.sleep(self.delay)
        await self._settle(text)

    async def _settle(self, text: str) -> None:
        self.query = text
        try:
            await self._on_settle(text)
        except Exception:
            logger.exception("Search callback failed for %r", text)
