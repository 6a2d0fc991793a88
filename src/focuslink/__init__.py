"""focuslink: two-device Pomodoro focus timer.

The wrist side runs the countdown and pushes daily summaries; the phone side
merges them into a day-keyed log.
"""

from .accumulator import DailyAccumulator, DailyTotals
from .clock import make_ymd, remaining
from .messages import DailyLogEntry, DailySummaryMessage, parse_summary
from .phases import Phase
from .replicator import SummaryReceiver, SummaryReplicator, merge_entry
from .store import DailyLogStore
from .timer import PhaseTimer, TimerSnapshot

__all__ = [
    "DailyAccumulator",
    "DailyLogEntry",
    "DailyLogStore",
    "DailySummaryMessage",
    "DailyTotals",
    "Phase",
    "PhaseTimer",
    "SummaryReceiver",
    "SummaryReplicator",
    "TimerSnapshot",
    "make_ymd",
    "merge_entry",
    "parse_summary",
    "remaining",
]
