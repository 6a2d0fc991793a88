"""Shared fixtures: a manual clock and a scheduler driven by it."""

from dataclasses import dataclass, field
from typing import Callable, Optional

import pytest

from focuslink.accumulator import DailyAccumulator
from focuslink.alerts import PhaseAlerts
from focuslink.replicator import SummaryReplicator
from focuslink.scheduler import Scheduler
from focuslink.timer import PhaseTimer
from focuslink.transport import LoopbackTransport

START_EPOCH = 1_770_800_000.0
TODAY = "2026-02-11"


class FakeClock:
    def __init__(self, now: float = START_EPOCH):
        self.now = now

    def __call__(self) -> float:
        return self.now


@dataclass
class _Job:
    due: float
    seq: int
    func: Callable[[], None]
    interval: Optional[float] = None


class FakeScheduler(Scheduler):
    """Runs jobs only when the test advances the clock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.jobs: dict[str, _Job] = {}
        self._seq = 0

    def _add(self, job_id, due, func, interval=None):
        self._seq += 1
        self.jobs[job_id] = _Job(due=due, seq=self._seq, func=func, interval=interval)

    def call_later(self, job_id, delay_seconds, func):
        self._add(job_id, self.clock.now + delay_seconds, func)

    def call_every(self, job_id, interval_seconds, func):
        self._add(job_id, self.clock.now + interval_seconds, func, interval=interval_seconds)

    def call_soon(self, job_id, func):
        self._add(job_id, self.clock.now, func)

    def cancel(self, job_id):
        self.jobs.pop(job_id, None)

    def is_pending(self, job_id):
        return job_id in self.jobs

    def due_at(self, job_id):
        return self.jobs[job_id].due

    def run_due(self) -> int:
        ran = 0
        while True:
            due = [(j.due, j.seq, jid) for jid, j in self.jobs.items() if j.due <= self.clock.now]
            if not due:
                return ran
            _, _, job_id = min(due)
            job = self.jobs[job_id]
            if job.interval:
                job.due += job.interval
            else:
                del self.jobs[job_id]
            job.func()
            ran += 1
            if ran > 10_000:
                raise RuntimeError("Scheduler did not settle")

    def advance(self, seconds: int) -> None:
        """Move the clock forward one second at a time, running due jobs each step."""
        for _ in range(seconds):
            self.clock.now += 1
            self.run_due()


@dataclass
class Rig:
    clock: FakeClock
    scheduler: FakeScheduler
    accumulator: DailyAccumulator
    transport: LoopbackTransport
    replicator: SummaryReplicator
    alerts: PhaseAlerts
    timer: PhaseTimer
    notifications: list = field(default_factory=list)
    cues: list = field(default_factory=list)
    day: list = field(default_factory=lambda: [TODAY])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return FakeScheduler(clock)


@pytest.fixture
def rig(clock, scheduler):
    """A fully wired wrist-side timer on a manual clock."""
    notifications, cues, day = [], [], [TODAY]
    accumulator = DailyAccumulator(TODAY)
    transport = LoopbackTransport()
    replicator = SummaryReplicator(accumulator, transport, clock=clock)
    alerts = PhaseAlerts(
        scheduler,
        notifier=lambda title, body: notifications.append((title, body)),
        cue_player=cues.append,
    )
    timer = PhaseTimer(
        scheduler, accumulator, replicator, alerts,
        clock=clock, today=lambda: day[0],
    )
    return Rig(
        clock=clock, scheduler=scheduler, accumulator=accumulator,
        transport=transport, replicator=replicator, alerts=alerts, timer=timer,
        notifications=notifications, cues=cues, day=day,
    )
