from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from dm_service.api.deps import CurrentPrincipal, UoWDep
from dm_service.api.v1.schemas.user import (
    SyncUserRequest,
    SyncUserResponse,
    UserProfileResponse,
)
from dm_service.services import user_service

router = APIRouter(prefix="/api/v1/chat/users", tags=["users"])


@router.post("/sync", response_model=SyncUserResponse)
async def sync_user(
    principal: CurrentPrincipal,
    uow: UoWDep,
    body: SyncUserRequest | None = None,
) -> SyncUserResponse:
    body = body or SyncUserRequest()
    user_id = await user_service.sync_user(
        principal.user_id,
        body.email or principal.email,
        body.name or principal.name,
        body.avatar or principal.avatar,
        uow,
    )
    return SyncUserResponse(user_id=user_id)


@router.post("/heartbeat", status_code=status.HTTP_204_NO_CONTENT)
async def heartbeat(principal: CurrentPrincipal, uow: UoWDep) -> None:
    await user_service.touch_last_seen(principal.user_id, uow)


@router.get("/search", response_model=list[UserProfileResponse])
async def search_users(
    principal: CurrentPrincipal,
    uow: UoWDep,
    q: str = Query("", max_length=200),
) -> list[UserProfileResponse]:
    profiles = await user_service.search_users(principal.user_id, q, uow)
    return [UserProfileResponse.model_validate(p, from_attributes=True) for p in profiles]


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_user(
    user_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> UserProfileResponse:
    profile = await user_service.get_user(user_id, uow)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserProfileResponse.model_validate(profile, from_attributes=True)
