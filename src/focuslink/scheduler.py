"""Scheduler abstraction for the timer core.

Every pending task is addressed by a job id, so each timer instance holds at
most one tick, one completion step and one alert. Scheduling an id that is
already pending replaces it; cancelling a missing id is a no-op.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger("focuslink.scheduler")


class Scheduler:
    """Interface the timer core schedules against."""

    def call_later(self, job_id: str, delay_seconds: float, func: Callable[[], None]) -> None:
        raise NotImplementedError

    def call_every(self, job_id: str, interval_seconds: float, func: Callable[[], None]) -> None:
        raise NotImplementedError

    def call_soon(self, job_id: str, func: Callable[[], None]) -> None:
        raise NotImplementedError

    def cancel(self, job_id: str) -> None:
        raise NotImplementedError

    def is_pending(self, job_id: str) -> bool:
        raise NotImplementedError


def _as_coroutine(func: Callable[[], None]):
    # AsyncIOScheduler runs plain callables in a thread pool; coroutines run
    # as tasks on the event loop, which keeps the timer single-threaded.
    async def _run():
        func()

    _run.__name__ = getattr(func, "__name__", "job")
    return _run


class APSchedulerBackend(Scheduler):
    """Scheduler backed by APScheduler's AsyncIOScheduler."""

    def __init__(self, scheduler: AsyncIOScheduler):
        self.scheduler = scheduler

    def call_later(self, job_id: str, delay_seconds: float, func: Callable[[], None]) -> None:
        run_date = datetime.now().astimezone() + timedelta(seconds=max(0.0, delay_seconds))
        self.scheduler.add_job(
            _as_coroutine(func),
            trigger=DateTrigger(run_date=run_date),
            id=job_id,
            replace_existing=True,
            misfire_grace_time=None,
        )
        logger.debug(f"Scheduled '{job_id}' in {delay_seconds}s")

    def call_every(self, job_id: str, interval_seconds: float, func: Callable[[], None]) -> None:
        self.scheduler.add_job(
            _as_coroutine(func),
            trigger=IntervalTrigger(seconds=interval_seconds),
            id=job_id,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        logger.debug(f"Scheduled '{job_id}' every {interval_seconds}s")

    def call_soon(self, job_id: str, func: Callable[[], None]) -> None:
        # No trigger means "run once, now", on the next loop iteration
        self.scheduler.add_job(
            _as_coroutine(func),
            id=job_id,
            replace_existing=True,
            misfire_grace_time=None,
        )

    def cancel(self, job_id: str) -> None:
        try:
            self.scheduler.remove_job(job_id)
            logger.debug(f"Cancelled '{job_id}'")
        except JobLookupError:
            pass

    def is_pending(self, job_id: str) -> bool:
        return self.scheduler.get_job(job_id) is not None
