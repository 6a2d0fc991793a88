"""Daily totals for the wrist side.

One live DailyTotals for "today". Counters only grow within a day; a new local
date resets all of them with no carry-over.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from focuslink.phases import Phase

logger = logging.getLogger("focuslink.accumulator")


@dataclass
class DailyTotals:
    date_key: str
    focus_seconds: int = 0
    break_seconds: int = 0
    session_count: int = 0


class DailyAccumulator:
    """Tallies focus/break seconds and completed focus sessions for one day."""

    def __init__(self, date_key: str):
        self._totals = DailyTotals(date_key=date_key)

    @property
    def date_key(self) -> str:
        return self._totals.date_key

    @property
    def focus_seconds(self) -> int:
        return self._totals.focus_seconds

    @property
    def break_seconds(self) -> int:
        return self._totals.break_seconds

    @property
    def session_count(self) -> int:
        return self._totals.session_count

    def totals(self) -> DailyTotals:
        """Copy of the current totals."""
        return replace(self._totals)

    def add_elapsed(self, phase: Phase, seconds: int) -> None:
        if seconds <= 0:
            return
        if phase == Phase.FOCUS:
            self._totals.focus_seconds += seconds
        elif phase.is_break:
            self._totals.break_seconds += seconds
        else:
            return
        logger.debug(f"Added {seconds}s of {phase.value} to {self._totals.date_key}")

    def increment_session(self) -> None:
        self._totals.session_count += 1

    def roll_if_new_day(self, today: str) -> bool:
        """Reset all counters when the local date changed. Returns True if rolled."""
        if self._totals.date_key == today:
            return False
        logger.info(
            f"Day rollover {self._totals.date_key} -> {today} "
            f"(focus={self._totals.focus_seconds}s, break={self._totals.break_seconds}s, "
            f"sessions={self._totals.session_count})"
        )
        self._totals = DailyTotals(date_key=today)
        return True
