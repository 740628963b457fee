from __future__ import annotations

from fastapi import APIRouter

from dm_service.api.deps import CurrentPrincipal, UoWDep
from dm_service.api.v1.schemas.conversation import (
    ConversationSummaryResponse,
    StartConversationRequest,
    StartConversationResponse,
)
from dm_service.services import conversation_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["conversations"])


@router.post("/direct", response_model=StartConversationResponse)
async def start_direct_conversation(
    body: StartConversationRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> StartConversationResponse:
    conv, created = await conversation_service.get_or_create_direct_conversation(
        principal.user_id, body.other_user_id, uow,
    )
    return StartConversationResponse(conversation_id=conv.id, created=created)


@router.get("", response_model=list[ConversationSummaryResponse])
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[ConversationSummaryResponse]:
    summaries = await conversation_service.list_conversations(principal.user_id, uow)
    return [
        ConversationSummaryResponse.model_validate(s, from_attributes=True)
        for s in summaries
    ]
