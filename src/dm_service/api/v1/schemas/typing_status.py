from __future__ import annotations

from pydantic import BaseModel


class SetTypingRequest(BaseModel):
    is_typing: bool


class TypingUserResponse(BaseModel):
    user_id: str
    name: str

    model_config = {"from_attributes": True}
