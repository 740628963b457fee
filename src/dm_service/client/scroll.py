from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ScrollAction(StrEnum):
    NONE = "none"
    JUMP = "jump"  # to bottom, no animation
    SMOOTH = "smooth"


@dataclass
class AutoScroll:
    """Decides how the message pane follows a growing timeline."""

    near_bottom_px: int = 96
    previous_count: int = 0
    show_new_messages: bool = False

    def is_near_bottom(self, distance_from_bottom: float) -> bool:
        return distance_from_bottom < self.near_bottom_px

    def on_messages(
        self,
        count: int,
        *,
        latest_is_own: bool,
        distance_from_bottom: float,
    ) -> ScrollAction:
        previous = self.previous_count
        if count == 0:
            self.previous_count = 0
            self.show_new_messages = False
            return ScrollAction.NONE

        self.previous_count = count
        if previous == 0:
            return ScrollAction.JUMP
        if count <= previous:
            return ScrollAction.NONE

        if self.is_near_bottom(distance_from_bottom) or latest_is_own:
            self.show_new_messages = False
            return ScrollAction.SMOOTH
        self.show_new_messages = True
        return ScrollAction.NONE

    def on_scroll(self, distance_from_bottom: float) -> None:
        if self.is_near_bottom(distance_from_bottom):
            self.show_new_messages = False

    def reset(self) -> None:
        self.previous_count = 0
        self.show_new_messages = False
