from __future__ import annotations

from typing import Any

from dm_service.application.dto.principal import Principal

DEFAULT_DISPLAY_NAME = "User"


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Map identity-provider claims onto the local identity contract."""
    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise ValueError("Token has no subject")

    name = (payload.get("name") or "").strip()
    if not name:
        given = (payload.get("given_name") or payload.get("first_name") or "").strip()
        family = (payload.get("family_name") or payload.get("last_name") or "").strip()
        name = f"{given} {family}".strip() if given else DEFAULT_DISPLAY_NAME

    return Principal(
        user_id=subject,
        email=(payload.get("email") or "").strip(),
        name=name,
        avatar=(payload.get("picture") or payload.get("image_url") or None),
    )
