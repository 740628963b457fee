"""Transport seam between ChatSession and the REST API."""
from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID

import httpx

from dm_service.api.v1.schemas.conversation import ConversationSummaryResponse
from dm_service.api.v1.schemas.message import MessageResponse
from dm_service.api.v1.schemas.typing_status import TypingUserResponse
from dm_service.api.v1.schemas.user import UserProfileResponse

API_PREFIX = "/api/v1/chat"


class ChatBackend(Protocol):
    async def sync_user(self, email: str, name: str, avatar: str | None) -> str: ...

    async def list_conversations(self) -> list[ConversationSummaryResponse]: ...

    async def get_messages(self, conversation_id: UUID) -> list[MessageResponse]: ...

    async def get_typing_users(self, conversation_id: UUID) -> list[TypingUserResponse]: ...

    async def search_users(self, query: str) -> list[UserProfileResponse]: ...

    async def start_conversation(self, other_user_id: str) -> UUID: ...

    async def send_message(self, conversation_id: UUID, content: str) -> MessageResponse: ...

    async def mark_read(self, conversation_id: UUID) -> None: ...

    async def set_typing(self, conversation_id: UUID, is_typing: bool) -> None: ...


class HttpChatBackend:
    """ChatBackend over httpx; raises ``httpx.HTTPStatusError`` on non-2xx replies."""

    def __init__(self, client: httpx.AsyncClient, token: str) -> None:
        self._client = client
        self._headers = {"Authorization": f"Bearer {token}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = await self._client.request(
            method, f"{API_PREFIX}{path}", headers=self._headers, **kwargs,
        )
        resp.raise_for_status()
        if resp.status_code == httpx.codes.NO_CONTENT:
            return None
        return resp.json()

    async def sync_user(self, email: str, name: str, avatar: str | None) -> str:
        data = await self._request(
            "POST", "/users/sync", json={"email": email, "name": name, "avatar": avatar},
        )
        return data["user_id"]

    async def list_conversations(self) -> list[ConversationSummaryResponse]:
        data = await self._request("GET", "/conversations")
        return [ConversationSummaryResponse.model_validate(item) for item in data]

    async def get_messages(self, conversation_id: UUID) -> list[MessageResponse]:
        data = await self._request("GET", f"/conversations/{conversation_id}/messages")
        return [MessageResponse.model_validate(item) for item in data]

    async def get_typing_users(self, conversation_id: UUID) -> list[TypingUserResponse]:
        data = await self._request("GET", f"/conversations/{conversation_id}/typing")
        return [TypingUserResponse.model_validate(item) for item in data]

    async def search_users(self, query: str) -> list[UserProfileResponse]:
        data = await self._request("GET", "/users/search", params={"q": query})
        return [UserProfileResponse.model_validate(item) for item in data]

    async def start_conversation(self, other_user_id: str) -> UUID:
        data = await self._request(
            "POST", "/conversations/direct", json={"other_user_id": other_user_id},
        )
        return UUID(data["conversation_id"])

    async def send_message(self, conversation_id: UUID, content: str) -> MessageResponse:
        data = await self._request(
            "POST", f"/conversations/{conversation_id}/messages", json={"content": content},
        )
        return MessageResponse.model_validate(data)

    async def mark_read(self, conversation_id: UUID) -> None:
        await self._request("POST", f"/conversations/{conversation_id}/read")

    async def set_typing(self, conversation_id: UUID, is_typing: bool) -> None:
        await self._request(
            "PUT", f"/conversations/{conversation_id}/typing", json={"is_typing": is_typing},
        )
