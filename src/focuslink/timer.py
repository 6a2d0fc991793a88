"""Phase timer: the wrist-side countdown state machine.

The countdown is anchored on (start_reference, start_remaining_seconds) and the
displayed value is always recomputed from the clock, so a suspended host picks
up the right value on the next tick or refresh(). Reaching zero inside a tick
only *schedules* completion; the transition itself runs on the next scheduler
turn and re-checks that the timer is still running at zero.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from focuslink import clock as clockref
from focuslink.accumulator import DailyAccumulator
from focuslink.alerts import PhaseAlerts
from focuslink.phases import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_FOCUS_MINUTES,
    DEFAULT_LONG_BREAK_MINUTES,
    MAX_FOCUS_MINUTES,
    MIN_FOCUS_MINUTES,
    Phase,
)
from focuslink.replicator import SummaryReplicator
from focuslink.scheduler import Scheduler

logger = logging.getLogger("focuslink.timer")

TICK_INTERVAL_SECONDS = 1


@dataclass(frozen=True)
class TimerSnapshot:
    phase: Phase
    total_phase_seconds: int
    start_reference: Optional[float]
    start_remaining_seconds: int
    paused_remaining_seconds: Optional[int]
    is_active: bool
    is_paused: bool
    remaining: int


class PhaseTimer:
    """Countdown over idle/focus/shortBreak/longBreak with pause and auto-advance."""

    def __init__(
        self,
        scheduler: Scheduler,
        accumulator: DailyAccumulator,
        replicator: SummaryReplicator,
        alerts: PhaseAlerts,
        clock: Callable[[], float] = time.time,
        today: Optional[Callable[[], str]] = None,
        focus_minutes: int = DEFAULT_FOCUS_MINUTES,
        break_minutes: int = DEFAULT_BREAK_MINUTES,
        long_break_minutes: int = DEFAULT_LONG_BREAK_MINUTES,
        name: str = "pomodoro",
    ):
        self.scheduler = scheduler
        self.accumulator = accumulator
        self.replicator = replicator
        self.alerts = alerts
        self.clock = clock
        self.today = today or (lambda: clockref.make_ymd(self.clock()))
        self.break_minutes = break_minutes
        self.long_break_minutes = long_break_minutes
        self._focus_minutes = focus_minutes
        self._tick_job_id = f"{name}_tick"
        self._complete_job_id = f"{name}_complete"

        self.phase: Phase = Phase.IDLE
        self.total_phase_seconds: int = 0
        self.is_active: bool = False
        self.is_paused: bool = False
        self._remaining: int = 0
        self._start_reference: Optional[float] = None
        self._start_remaining_seconds: int = 0
        self._paused_remaining: Optional[int] = None

    # ---- Read-only views ----

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def focus_minutes(self) -> int:
        return self._focus_minutes

    @focus_minutes.setter
    def focus_minutes(self, value: int) -> None:
        # Applies to the next focus phase, never the running one
        self._focus_minutes = min(max(int(value), MIN_FOCUS_MINUTES), MAX_FOCUS_MINUTES)

    @property
    def target_end(self) -> Optional[float]:
        """Epoch instant the running phase ends; None while paused or idle."""
        if not self.is_active or self._start_reference is None:
            return None
        return self._start_reference + self._start_remaining_seconds

    def duration_for(self, phase: Phase) -> int:
        if phase == Phase.FOCUS:
            return self._focus_minutes * 60
        if phase == Phase.SHORT_BREAK:
            return self.break_minutes * 60
        if phase == Phase.LONG_BREAK:
            return self.long_break_minutes * 60
        return 0

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            phase=self.phase,
            total_phase_seconds=self.total_phase_seconds,
            start_reference=self._start_reference,
            start_remaining_seconds=self._start_remaining_seconds,
            paused_remaining_seconds=self._paused_remaining,
            is_active=self.is_active,
            is_paused=self.is_paused,
            remaining=self._remaining,
        )

    # ---- Transitions ----

    def start_focus(self) -> None:
        self.start(Phase.FOCUS)

    def start_short_break(self) -> None:
        self.start(Phase.SHORT_BREAK)

    def start_long_break(self) -> None:
        self.start(Phase.LONG_BREAK)

    def start(self, phase: Phase, duration_seconds: Optional[int] = None) -> None:
        """Begin `phase` from any state. Uses the configured length when no duration is given."""
        if phase == Phase.IDLE:
            logger.debug("start(idle) ignored; use stop()")
            return

        self.accumulator.roll_if_new_day(self.today())
        self.scheduler.cancel(self._complete_job_id)

        if duration_seconds is None:
            duration_seconds = self.duration_for(phase)
        duration_seconds = max(0, int(duration_seconds))

        self.phase = phase
        self.is_active = True
        self.is_paused = False
        self._paused_remaining = None
        self.total_phase_seconds = duration_seconds

        self._start_reference = self.clock()
        self._start_remaining_seconds = duration_seconds
        self._remaining = duration_seconds

        self.alerts.schedule(phase, duration_seconds)
        self.alerts.play_start_cue(phase)
        self._start_ticking()
        logger.info(f"Started {phase.value} for {duration_seconds}s")

    def pause(self) -> None:
        if not self.is_active or self.is_paused:
            return

        self._update_remaining_now()

        self.is_paused = True
        self.is_active = False
        self._paused_remaining = self._remaining
        self._start_reference = None

        self.alerts.cancel()
        self._stop_ticking()
        logger.info(f"Paused {self.phase.value} at {self._remaining}s")

    def resume(self) -> None:
        if not self.is_paused or self._paused_remaining is None:
            return

        still = self._paused_remaining
        self.is_paused = False
        self.is_active = True

        self._start_reference = self.clock()
        self._start_remaining_seconds = still
        self._remaining = still
        self._paused_remaining = None

        self.alerts.schedule(self.phase, still)
        self._start_ticking()
        logger.info(f"Resumed {self.phase.value} with {still}s left")

    def stop(self) -> None:
        if self.phase == Phase.IDLE:
            return

        self._update_remaining_now()
        self._finalize_contribution()
        self.replicator.push()

        stopped = self.phase
        self._stop_ticking()
        self.scheduler.cancel(self._complete_job_id)
        self.alerts.cancel()

        self.is_active = False
        self.is_paused = False
        self.phase = Phase.IDLE
        self._remaining = 0
        self.total_phase_seconds = 0
        self._start_reference = None
        self._start_remaining_seconds = 0
        self._paused_remaining = None
        logger.info(f"Stopped {stopped.value}")

    def tick(self) -> None:
        """Periodic re-evaluation; only meaningful while running."""
        if not self.is_active or self.is_paused:
            return
        self._update_remaining_now()

    def refresh(self) -> None:
        """Recompute the displayed remaining, e.g. after returning from background."""
        self._update_remaining_now()

    # ---- Internal ----

    def _update_remaining_now(self) -> None:
        if self.is_active and not self.is_paused:
            if self._start_reference is None:
                logger.warning("Running without a reference instant; leaving state untouched")
                return
            self._remaining = clockref.remaining(
                self._start_reference, self._start_remaining_seconds, self.clock()
            )
            if self._remaining <= 0:
                self.scheduler.call_soon(self._complete_job_id, self._complete_if_needed)
        elif self._paused_remaining is not None:
            self._remaining = self._paused_remaining

    def _complete_if_needed(self) -> None:
        if self.phase == Phase.IDLE:
            return
        # A manual pause at 0 is not a natural completion
        if not self.is_active or self.is_paused:
            return
        if self._remaining > 0:
            return
        self._remaining = 0
        self._phase_completed()

    def _phase_completed(self) -> None:
        finished = self.phase
        self._finalize_contribution()
        if finished == Phase.FOCUS:
            self.accumulator.increment_session()
        logger.info(f"Completed {finished.value} (sessions today: {self.accumulator.session_count})")

        # Push before the next start() so a midnight rollover cannot wipe the totals unsent
        self.replicator.push()

        if finished == Phase.FOCUS:
            self.start_short_break()
        elif finished.is_break:
            self.start_focus()

    def _finalize_contribution(self) -> None:
        self._update_remaining_now()
        if self.total_phase_seconds <= 0:
            return
        spent = self.total_phase_seconds - self._remaining
        if spent > 0:
            self.accumulator.add_elapsed(self.phase, spent)

    def _start_ticking(self) -> None:
        self.scheduler.call_every(self._tick_job_id, TICK_INTERVAL_SECONDS, self.tick)

    def _stop_ticking(self) -> None:
        self.scheduler.cancel(self._tick_job_id)
