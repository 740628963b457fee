from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, status

from dm_service.api.deps import CurrentPrincipal, UoWDep
from dm_service.api.v1.schemas.message import MessageResponse, SendMessageRequest
from dm_service.services import message_service, read_state_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["messages"])


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[MessageResponse]:
    messages = await message_service.get_conversation_messages(
        conversation_id, uow, viewer_id=principal.user_id,
    )
    return [MessageResponse.model_validate(m, from_attributes=True) for m in messages]


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    conversation_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    msg = await message_service.send_message(
        conversation_id, principal.user_id, body.content, uow,
    )
    return MessageResponse.model_validate(msg, from_attributes=True)


@router.post("/{conversation_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> None:
    await read_state_service.mark_conversation_read(conversation_id, principal.user_id, uow)
