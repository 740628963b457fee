"""WebSocket message envelope models."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # ping | subscribe | unsubscribe | message.send | mark_read | typing
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # chat.* change events | error | pong | message.sent
    data: dict[str, Any] = {}


def error_frame(code: str, **detail: Any) -> str:
    return WsOutbound(type="error", data={"code": code, **detail}).model_dump_json()
