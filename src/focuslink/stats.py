"""History statistics over the daily log: goal progress, streak, period bins."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from focuslink.clock import YMD_FORMAT
from focuslink.messages import DailyLogEntry

AGGREGATE_MODES = ("week", "month")
MAX_BINS = 12


@dataclass
class PeriodBin:
    key: str
    label: str
    start_date: date
    end_date: date
    focus_seconds: int = 0
    break_seconds: int = 0
    sessions: int = 0

    @property
    def title(self) -> str:
        if self.key[5] == "W":
            return f"{self.start_date.isocalendar()[0]} {self.label}"
        return f"{self.start_date.year} {self.label}"

    @property
    def subtitle(self) -> str:
        return f"{self.start_date.month}/{self.start_date.day} - {self.end_date.month}/{self.end_date.day}"

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "label": self.label,
            "title": self.title,
            "subtitle": self.subtitle,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "focusSeconds": self.focus_seconds,
            "breakSeconds": self.break_seconds,
            "sessions": self.sessions,
        }


def parse_ymd(ymd: str) -> Optional[date]:
    try:
        return datetime.strptime(ymd, YMD_FORMAT).date()
    except ValueError:
        return None


def today_progress(entry: Optional[DailyLogEntry], target_minutes: int) -> float:
    """Whole focus minutes today over the goal; 0 when there is no goal. Not capped."""
    if target_minutes <= 0:
        return 0.0
    done_min = (entry.focus_seconds if entry else 0) // 60
    return done_min / target_minutes


def streak_days(entries: Iterable[DailyLogEntry], today: date) -> int:
    """Consecutive days ending today with any focus time. Break-only days break the streak."""
    focus_by_ymd = {e.ymd: e.focus_seconds for e in entries}
    count = 0
    cursor = today
    while focus_by_ymd.get(cursor.strftime(YMD_FORMAT), 0) > 0:
        count += 1
        cursor -= timedelta(days=1)
    return count


def _week_bin(day: date) -> PeriodBin:
    iso_year, week, weekday = day.isocalendar()
    start = day - timedelta(days=weekday - 1)
    return PeriodBin(
        key=f"{iso_year:04d}-W{week:02d}",
        label=f"W{week}",
        start_date=start,
        end_date=start + timedelta(days=6),
    )


def _month_bin(day: date) -> PeriodBin:
    last = calendar.monthrange(day.year, day.month)[1]
    return PeriodBin(
        key=f"{day.year:04d}-{day.month:02d}",
        label=calendar.month_abbr[day.month],
        start_date=date(day.year, day.month, 1),
        end_date=date(day.year, day.month, last),
    )


def aggregate(entries: Iterable[DailyLogEntry], mode: str = "week", limit: int = MAX_BINS) -> List[PeriodBin]:
    """Sum daily rows into week or month bins, oldest first, keeping the last `limit`."""
    if mode not in AGGREGATE_MODES:
        raise ValueError(f"Unknown aggregate mode: {mode}")
    make_bin = _week_bin if mode == "week" else _month_bin

    bins: dict[str, PeriodBin] = {}
    for entry in entries:
        day = parse_ymd(entry.ymd)
        if day is None:
            continue
        fresh = make_bin(day)
        bin_ = bins.setdefault(fresh.key, fresh)
        bin_.focus_seconds += entry.focus_seconds
        bin_.break_seconds += entry.break_seconds
        bin_.sessions += entry.sessions

    ordered = sorted(bins.values(), key=lambda b: b.start_date)
    return ordered[-limit:] if limit else ordered


def period_totals(bins: Iterable[PeriodBin]) -> dict:
    bins = list(bins)
    return {
        "focusSeconds": sum(b.focus_seconds for b in bins),
        "breakSeconds": sum(b.break_seconds for b in bins),
        "sessions": sum(b.sessions for b in bins),
    }
