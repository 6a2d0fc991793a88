"""Clock reference: pure remaining-time arithmetic, no state.

All instants are epoch seconds (float). The countdown is anchored on a
reference instant plus the remaining seconds at that instant, so the displayed
value never jumps on start/resume and survives the host being suspended.
"""

from __future__ import annotations

import math
from datetime import datetime

YMD_FORMAT = "%Y-%m-%d"


def remaining(start_ref: float, start_remaining: int, now: float) -> int:
    """Seconds left: start_remaining minus whole seconds elapsed, floored at 0."""
    elapsed = max(0, math.floor(now - start_ref))
    return max(start_remaining - elapsed, 0)


def make_ymd(epoch: float) -> str:
    """Local-calendar day key (YYYY-MM-DD) for an epoch instant."""
    return datetime.fromtimestamp(epoch).strftime(YMD_FORMAT)


def format_mmss(seconds: int) -> str:
    """Format seconds as 'MM:SS' for the countdown display."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def format_minutes(seconds: int) -> str:
    """Format seconds as 'Xh Ym' once past an hour, else 'Ym'."""
    total_min = max(0, int(seconds)) // 60
    if total_min >= 60:
        return f"{total_min // 60}h {total_min % 60}m"
    return f"{total_min}m"
