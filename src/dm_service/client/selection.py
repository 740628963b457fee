from __future__ import annotations

from typing import Sequence


def reconcile_selection(selected: str | None, conversation_ids: Sequence[str]) -> str | None:
    """Keep the current selection while it exists, otherwise fall back to the newest entry."""
    if selected is not None and selected in conversation_ids:
        return selected
    return conversation_ids[0] if conversation_ids else None
