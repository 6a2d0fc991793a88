"""Summary replication between the paired devices.

Sending side: snapshot the accumulator and hand it to the transport.
Receiving side: merge each inbound snapshot into the daily log with a
monotone max on every counter, so stale, duplicated or reordered snapshots
never make a day regress.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import aiosqlite

from focuslink.accumulator import DailyAccumulator
from focuslink.messages import DailyLogEntry, DailySummaryMessage, parse_summary
from focuslink.store import DailyLogStore
from focuslink.transport import Transport

logger = logging.getLogger("focuslink.replicator")


class SummaryReplicator:
    """Builds snapshots of today's totals and pushes them to the peer."""

    def __init__(
        self,
        accumulator: DailyAccumulator,
        transport: Transport,
        clock: Callable[[], float] = time.time,
    ):
        self.accumulator = accumulator
        self.transport = transport
        self.clock = clock

    def build_snapshot(self) -> DailySummaryMessage:
        totals = self.accumulator.totals()
        return DailySummaryMessage(
            ymd=totals.date_key,
            focusSeconds=totals.focus_seconds,
            breakSeconds=totals.break_seconds,
            sessions=totals.session_count,
            updatedAt=self.clock(),
        )

    def push(self) -> DailySummaryMessage:
        """Send the current snapshot once. Failures are the transport's to log."""
        snapshot = self.build_snapshot()
        try:
            self.transport.send(snapshot.to_payload())
        except Exception as e:
            logger.warning(f"Summary push for {snapshot.ymd} dropped: {e}")
        return snapshot


def merge_entry(existing: Optional[DailyLogEntry], incoming: DailySummaryMessage) -> Optional[DailyLogEntry]:
    """Monotone-max merge. Returns the new row, or None when nothing changed."""
    base = existing or DailyLogEntry(ymd=incoming.ymd)
    merged = DailyLogEntry(
        ymd=incoming.ymd,
        focus_seconds=max(base.focus_seconds, incoming.focusSeconds),
        break_seconds=max(base.break_seconds, incoming.breakSeconds),
        sessions=max(base.sessions, incoming.sessions),
        updated_at=max(base.updated_at, incoming.updatedAt),
    )
    if existing is not None and merged == existing:
        return None
    return merged


@dataclass
class ReceiveResult:
    accepted: bool
    changed: bool = False
    entry: Optional[DailyLogEntry] = None


class SummaryReceiver:
    """Applies inbound snapshots to the daily log store."""

    def __init__(self, store: DailyLogStore, clock: Callable[[], float] = time.time):
        self.store = store
        self.clock = clock

    def attach(self, transport: Transport) -> None:
        transport.on_receive(self.handle)

    async def handle(self, payload: dict) -> ReceiveResult:
        message = parse_summary(payload, now=self.clock())
        if message is None:
            return ReceiveResult(accepted=False)

        try:
            existing = await self.store.get(message.ymd)
            merged = merge_entry(existing, message)
            if merged is None:
                logger.debug(f"Summary for {message.ymd} changed nothing")
                return ReceiveResult(accepted=True, changed=False, entry=existing)
            await self.store.save(merged)
        except (aiosqlite.Error, OverflowError) as e:
            logger.error(f"Merge for {message.ymd} abandoned: {e}")
            return ReceiveResult(accepted=True, changed=False)

        if existing is None:
            try:
                await self.store.prune()
            except aiosqlite.Error as e:
                logger.error(f"Prune after inserting {message.ymd} failed: {e}")

        logger.info(
            f"Merged {message.ymd}: focus={merged.focus_seconds}s "
            f"break={merged.break_seconds}s sessions={merged.sessions}"
        )
        return ReceiveResult(accepted=True, changed=True, entry=merged)
