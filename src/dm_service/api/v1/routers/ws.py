from __future__ import annotations

import asyncio
import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from dm_service.api.deps import get_verifier
from dm_service.application.dto.principal import Principal
from dm_service.application.exceptions import AppError
from dm_service.application.policies.permissions import is_participant
from dm_service.config import settings
from dm_service.domain.value_objects.topics import (
    conversations_topic,
    messages_topic,
    typing_topic,
)
from dm_service.infrastructure.db.session import uow_scope
from dm_service.infrastructure.ws.manager import ConnectionManager
from dm_service.infrastructure.ws.protocol import WsInbound, WsOutbound, error_frame
from dm_service.services import (
    conversation_service,
    message_service,
    read_state_service,
    typing_service,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

WS_AUTH_FAILED = 4001
PONG = WsOutbound(type="pong").model_dump_json()

manager = ConnectionManager()


def get_manager() -> ConnectionManager:
    return manager


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    token: str = Query(...),
) -> None:
    """One live session: the user's list topic on connect, thread topics on demand."""
    try:
        principal = await get_verifier().verify(token)
    except Exception as exc:
        logger.info("Rejected WS connection: %s", exc)
        await websocket.close(code=WS_AUTH_FAILED, reason="Authentication failed")
        return

    key = principal.principal_key
    await manager.connect(websocket, key)
    manager.subscribe(websocket, conversations_topic(principal.user_id))
    keepalive = asyncio.create_task(_keepalive(websocket), name=f"ws-keepalive:{key}")
    try:
        async for raw in websocket.iter_text():
            await _handle_frame(websocket, principal, raw)
    except WebSocketDisconnect:
        logger.debug("WS closed by %s", key)
    except Exception:
        logger.exception("WS session for %s failed", key)
    finally:
        keepalive.cancel()
        manager.disconnect(websocket, key)


async def _keepalive(ws: WebSocket) -> None:
    while True:
        await asyncio.sleep(settings.WS_HEARTBEAT_SECONDS)
        try:
            await ws.send_text(PONG)
        except Exception:
            logger.debug("Keepalive stopped", exc_info=True)
            return


async def _handle_frame(ws: WebSocket, principal: Principal, raw: str) -> None:
    try:
        msg = WsInbound.model_validate_json(raw)
    except ValueError:
        await ws.send_text(error_frame("invalid_payload"))
        return

    if msg.type == "ping":
        await ws.send_text(PONG)
        return

    handler = _HANDLERS.get(msg.type)
    if handler is None:
        await ws.send_text(error_frame("unknown_type", type=msg.type))
        return

    try:
        conversation_id = UUID(str(msg.data["conversation_id"]))
    except (KeyError, ValueError) as exc:
        await ws.send_text(error_frame("invalid_data", detail=str(exc), type=msg.type))
        return

    try:
        await handler(ws, principal, conversation_id, msg.data)
    except AppError as exc:
        await ws.send_text(error_frame(exc.code, detail=exc.detail, type=msg.type))


async def _handle_subscribe(
    ws: WebSocket, principal: Principal, conversation_id: UUID, data: dict[str, Any],
) -> None:
    async with uow_scope() as uow:
        conversation = await conversation_service.get_conversation(conversation_id, uow)
    if not is_participant(conversation, principal.user_id):
        await ws.send_text(error_frame("permission-denied", type="subscribe"))
        return
    manager.subscribe(ws, messages_topic(conversation_id))
    manager.subscribe(ws, typing_topic(conversation_id))


async def _handle_unsubscribe(
    ws: WebSocket, principal: Principal, conversation_id: UUID, data: dict[str, Any],
) -> None:
    manager.unsubscribe(ws, messages_topic(conversation_id))
    manager.unsubscribe(ws, typing_topic(conversation_id))


async def _handle_send(
    ws: WebSocket, principal: Principal, conversation_id: UUID, data: dict[str, Any],
) -> None:
    async with uow_scope() as uow:
        msg = await message_service.send_message(
            conversation_id, principal.user_id, str(data.get("content") or ""), uow,
        )
    await ws.send_text(
        WsOutbound(
            type="message.sent",
            data={
                "conversation_id": str(msg.conversation_id),
                "message_id": str(msg.id),
                "created_at": msg.created_at.isoformat(),
            },
        ).model_dump_json()
    )


async def _handle_mark_read(
    ws: WebSocket, principal: Principal, conversation_id: UUID, data: dict[str, Any],
) -> None:
    async with uow_scope() as uow:
        await read_state_service.mark_conversation_read(
            conversation_id, principal.user_id, uow,
        )


async def _handle_typing(
    ws: WebSocket, principal: Principal, conversation_id: UUID, data: dict[str, Any],
) -> None:
    async with uow_scope() as uow:
        await typing_service.set_typing_status(
            conversation_id, principal.user_id, bool(data.get("is_typing")), uow,
        )


_HANDLERS = {
    "subscribe": _handle_subscribe,
    "unsubscribe": _handle_unsubscribe,
    "message.send": _handle_send,
    "mark_read": _handle_mark_read,
    "typing": _handle_typing,
}
