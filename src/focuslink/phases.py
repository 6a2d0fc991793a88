from __future__ import annotations

from enum import Enum


class Phase(str, Enum):
    IDLE = "idle"
    FOCUS = "focus"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"

    @property
    def is_break(self) -> bool:
        return self in (Phase.SHORT_BREAK, Phase.LONG_BREAK)


DEFAULT_FOCUS_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 5

# Bounds for the focus length picker (crown on the wrist side)
MIN_FOCUS_MINUTES = 1
MAX_FOCUS_MINUTES = 120
