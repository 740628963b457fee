"""Client-side reconciliation for one signed-in chat view.

The server pushes change notifications (``chat.*`` frames) and the session
re-runs the affected query, then reconciles selection, autoscroll and read
marking against the fresh result. Every mutation failure is logged and
swallowed: there is no retry and no optimistic state.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable
from uuid import UUID

from dm_service.api.v1.schemas.conversation import ConversationSummaryResponse
from dm_service.api.v1.schemas.message import MessageResponse
from dm_service.api.v1.schemas.typing_status import TypingUserResponse
from dm_service.api.v1.schemas.user import UserProfileResponse
from dm_service.client.backend import ChatBackend
from dm_service.client.debounce import SearchDebouncer
from dm_service.client.scroll import AutoScroll, ScrollAction
from dm_service.client.selection import reconcile_selection
from dm_service.client.throttle import CooldownGuard, MonotonicClock, Throttle
from dm_service.client.timing import ClientTimings

logger = logging.getLogger(__name__)

SendFrame = Callable[[dict[str, Any]], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class LocalIdentity:
    user_id: str
    email: str
    name: str
    avatar: str | None = None


class ChatSession:
    def __init__(
        self,
        backend: ChatBackend,
        identity: LocalIdentity,
        *,
        timings: ClientTimings = ClientTimings(),
        send_frame: SendFrame | None = None,
        now: MonotonicClock = time.monotonic,
    ) -> None:
        self.backend = backend
        self.identity = identity
        self.timings = timings
        self._send_frame = send_frame

        self.conversations: list[ConversationSummaryResponse] = []
        self.selected_id: UUID | None = None
        self.messages: list[MessageResponse] = []
        self.typing_users: list[TypingUserResponse] = []
        self.search_results: list[UserProfileResponse] = []
        self.visible = True
        self.distance_from_bottom: float = 0.0
        self.last_scroll_action = ScrollAction.NONE

        self.scroll = AutoScroll(near_bottom_px=timings.near_bottom_px)
        self.search = SearchDebouncer(timings.search_debounce, self._run_search)
        self._read_throttle = Throttle(timings.read_mark_interval, now=now)
        self._typing_throttle = Throttle(timings.typing_interval, now=now)
        self._send_throttle = Throttle(timings.send_interval, now=now)
        self._start_guard = CooldownGuard(timings.start_cooldown, now=now)
        self._refresh_task: asyncio.Task[None] | None = None

    # lifecycle

    async def open(self) -> None:
        await self.sync_identity()
        self._refresh_task = asyncio.create_task(
            self._identity_refresh_loop(), name="identity-refresh",
        )
        await self.refresh_conversations()

    async def close(self) -> None:
        self.search.close()
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            try:
                await self._refresh_task
            except asyncio.CancelledError:
                pass
            self._refresh_task = None

    async def sync_identity(self) -> None:
        ident = self.identity
        try:
            await self.backend.sync_user(ident.email, ident.name, ident.avatar)
        except Exception:
            logger.warning("Identity sync failed", exc_info=True)

    async def _identity_refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self.timings.identity_refresh)
            await self.sync_identity()

    # queries

    @property
    def selected_conversation(self) -> ConversationSummaryResponse | None:
        for conv in self.conversations:
            if conv.conversation_id == self.selected_id:
                return conv
        return None

    async def refresh_conversations(self) -> None:
        try:
            self.conversations = await self.backend.list_conversations()
        except Exception:
            logger.exception("Failed to load conversations")
            return
        ids = [str(c.conversation_id) for c in self.conversations]
        current = str(self.selected_id) if self.selected_id else None
        chosen = reconcile_selection(current, ids)
        if chosen != current:
            await self._switch_to(UUID(chosen) if chosen else None)

    async def refresh_messages(self) -> None:
        if self.selected_id is None:
            self.messages = []
        else:
            try:
                self.messages = await self.backend.get_messages(self.selected_id)
            except Exception:
                logger.exception("Failed to load messages for %s", self.selected_id)
                return

        previous = self.scroll.previous_count
        latest_is_own = bool(self.messages) and self.messages[-1].sender_id == self.identity.user_id
        self.last_scroll_action = self.scroll.on_messages(
            len(self.messages),
            latest_is_own=latest_is_own,
            distance_from_bottom=self.distance_from_bottom,
        )
        if len(self.messages) != previous:
            await self._mark_read_if_visible()

    async def refresh_typing(self) -> None:
        if self.selected_id is None:
            self.typing_users = []
            return
        try:
            self.typing_users = await self.backend.get_typing_users(self.selected_id)
        except Exception:
            logger.exception("Failed to load typing users for %s", self.selected_id)

    async def _run_search(self, text: str) -> None:
        query = text.strip()
        if not query:
            self.search_results = []
            return
        try:
            self.search_results = await self.backend.search_users(query)
        except Exception:
            logger.exception("User search failed")

    # view input

    async def select_conversation(self, conversation_id: UUID) -> None:
        if conversation_id != self.selected_id:
            await self._switch_to(conversation_id)

    async def set_visible(self, visible: bool) -> None:
        self.visible = visible
        if visible:
            await self._mark_read_if_visible()

    def on_scroll(self, distance_from_bottom: float) -> None:
        self.distance_from_bottom = distance_from_bottom
        self.scroll.on_scroll(distance_from_bottom)

    async def on_search_input(self, text: str) -> None:
        await self.search.update(text)

    async def _switch_to(self, conversation_id: UUID | None) -> None:
        previous = self.selected_id
        self.selected_id = conversation_id
        self.scroll.reset()
        self.distance_from_bottom = 0.0
        if previous is not None:
            await self._frame("unsubscribe", previous)
        if conversation_id is not None:
            await self._frame("subscribe", conversation_id)
        await self.refresh_messages()
        await self.refresh_typing()

    async def _frame(self, frame_type: str, conversation_id: UUID) -> None:
        if self._send_frame is None:
            return
        try:
            await self._send_frame(
                {"type": frame_type, "data": {"conversation_id": str(conversation_id)}}
            )
        except Exception:
            logger.warning("Failed to send %s frame", frame_type, exc_info=True)

    # mutations

    async def _mark_read_if_visible(self) -> None:
        if not self.visible or self.selected_id is None:
            return
        if not self._read_throttle.allow():
            return
        try:
            await self.backend.mark_read(self.selected_id)
        except Exception:
            logger.exception("Failed to mark %s read", self.selected_id)

    async def send(self, content: str) -> bool:
        """Send trimmed text to the selected conversation; returns False when dropped."""
        text = content.strip()
        if not text or self.selected_id is None:
            return False
        if not self._send_throttle.allow():
            return False
        try:
            await self.backend.send_message(self.selected_id, text)
        except Exception:
            logger.exception("Failed to send message")
            return False
        await self.stop_typing()
        return True

    async def on_typing_activity(self) -> None:
        if self.selected_id is None or not self._typing_throttle.allow():
            return
        try:
            await self.backend.set_typing(self.selected_id, True)
        except Exception:
            logger.exception("Failed to set typing status")

    async def stop_typing(self) -> None:
        if self.selected_id is None:
            return
        try:
            await self.backend.set_typing(self.selected_id, False)
        except Exception:
            logger.exception("Failed to clear typing status")

    async def start_conversation(self, other_user_id: str) -> UUID | None:
        if not self._start_guard.try_begin():
            return None
        try:
            conversation_id = await self.backend.start_conversation(other_user_id)
        except Exception:
            logger.exception("Failed to start conversation with %s", other_user_id)
            return None
        finally:
            self._start_guard.end()

        await self.search.clear()
        await self.select_conversation(conversation_id)
        await self.refresh_conversations()
        return conversation_id

    # live queries

    async def handle_event(self, frame: dict[str, Any]) -> None:
        """React to one server frame by re-running the queries it invalidates."""
        event_type = frame.get("type")
        data = frame.get("data") or {}
        raw_id = data.get("conversation_id")
        try:
            conversation_id = UUID(str(raw_id)) if raw_id else None
        except ValueError:
            conversation_id = None
        is_selected = conversation_id is not None and conversation_id == self.selected_id

        if event_type in ("chat.conversation_created", "chat.conversation_read"):
            await self.refresh_conversations()
        elif event_type == "chat.message_created":
            await self.refresh_conversations()
            if is_selected:
                await self.refresh_messages()
        elif event_type == "chat.typing_changed":
            if is_selected:
                await self.refresh_typing()
        elif event_type == "error":
            logger.warning("Server reported error: %s", data)
