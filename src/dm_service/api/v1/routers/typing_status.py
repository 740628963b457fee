from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, status

from dm_service.api.deps import CurrentPrincipal, UoWDep
from dm_service.api.v1.schemas.typing_status import SetTypingRequest, TypingUserResponse
from dm_service.services import typing_service

router = APIRouter(prefix="/api/v1/chat/conversations", tags=["typing"])


@router.put("/{conversation_id}/typing", status_code=status.HTTP_204_NO_CONTENT)
async def set_typing(
    conversation_id: UUID,
    body: SetTypingRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> None:
    await typing_service.set_typing_status(
        conversation_id, principal.user_id, body.is_typing, uow,
    )


@router.get("/{conversation_id}/typing", response_model=list[TypingUserResponse])
async def get_typing_users(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[TypingUserResponse]:
    users = await typing_service.get_typing_users(conversation_id, principal.user_id, uow)
    return [TypingUserResponse.model_validate(u, from_attributes=True) for u in users]
