"""Phase-end alerts and haptic cues for the wrist side."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from focuslink.phases import Phase
from focuslink.scheduler import Scheduler

logger = logging.getLogger("focuslink.alerts")

PHASE_END_JOB_ID = "pomodoro_phase_end"

# (title, body) shown when the phase that just ran reaches zero
ALERT_TEXT: dict[Phase, tuple[str, str]] = {
    Phase.FOCUS: ("Focus finished", "Time for a break"),
    Phase.SHORT_BREAK: ("Break finished", "Start the next focus?"),
    Phase.LONG_BREAK: ("Break finished", "Start the next focus?"),
    Phase.IDLE: ("Done", "You can start the next session"),
}


class HapticCue(Enum):
    START = "start"
    SUCCESS = "success"
    NOTIFICATION = "notification"


FOLLOW_UP_CUE_DELAY_SECONDS = 0.5

Notifier = Callable[[str, str], None]
CuePlayer = Callable[[HapticCue], None]


def log_notifier(title: str, body: str) -> None:
    logger.info(f"ALERT: {title} | {body}")


def log_cue_player(cue: HapticCue) -> None:
    logger.info(f"HAPTIC: {cue.value}")


class PhaseAlerts:
    """One pending phase-end alert at a time, plus the per-phase start cues."""

    def __init__(
        self,
        scheduler: Scheduler,
        notifier: Optional[Notifier] = None,
        cue_player: Optional[CuePlayer] = None,
        job_id: str = PHASE_END_JOB_ID,
    ):
        self.scheduler = scheduler
        self.notifier = notifier or log_notifier
        self.cue_player = cue_player or log_cue_player
        self.job_id = job_id

    def schedule(self, phase: Phase, after_seconds: int) -> None:
        """Replace any pending alert with one firing after_seconds from now."""
        self.cancel()
        if after_seconds <= 0:
            return
        title, body = ALERT_TEXT[phase]
        self.scheduler.call_later(self.job_id, after_seconds, lambda: self.notifier(title, body))
        logger.debug(f"Alert '{title}' scheduled in {after_seconds}s")

    def cancel(self) -> None:
        self.scheduler.cancel(self.job_id)

    def play_start_cue(self, phase: Phase) -> None:
        if phase == Phase.FOCUS:
            self.cue_player(HapticCue.START)
            self.scheduler.call_later(
                f"{self.job_id}_cue",
                FOLLOW_UP_CUE_DELAY_SECONDS,
                lambda: self.cue_player(HapticCue.SUCCESS),
            )
        elif phase.is_break:
            self.cue_player(HapticCue.NOTIFICATION)
