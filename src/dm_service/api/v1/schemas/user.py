from __future__ import annotations

from pydantic import BaseModel


class SyncUserRequest(BaseModel):
    """Profile fields; any left out are taken from the identity token."""

    email: str | None = None
    name: str | None = None
    avatar: str | None = None


class SyncUserResponse(BaseModel):
    user_id: str


class UserProfileResponse(BaseModel):
    id: str
    email: str
    name: str
    avatar: str | None
    is_online: bool

    model_config = {"from_attributes": True}
