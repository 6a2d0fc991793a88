"""Day-keyed daily log on the receiving device (SQLite via aiosqlite)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import aiosqlite

from focuslink.messages import DailyLogEntry

logger = logging.getLogger("focuslink.store")

DEFAULT_RETENTION_DAYS = 365


def _row_to_entry(row: aiosqlite.Row) -> DailyLogEntry:
    return DailyLogEntry(
        ymd=row["ymd"],
        focus_seconds=row["focus_seconds"],
        break_seconds=row["break_seconds"],
        sessions=row["sessions"],
        updated_at=row["updated_at"],
    )


class DailyLogStore:
    """One row per calendar day, capped to the most recent `retention_days` keys."""

    def __init__(self, db_path: Path, retention_days: int = DEFAULT_RETENTION_DAYS):
        self.db_path = Path(db_path)
        self.retention_days = retention_days

    async def _connect(self) -> aiosqlite.Connection:
        db = await aiosqlite.connect(self.db_path)
        await db.execute("PRAGMA busy_timeout=5000")
        db.row_factory = aiosqlite.Row
        return db

    async def init_tables(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("PRAGMA journal_mode=WAL")
            await db.execute("""
                CREATE TABLE IF NOT EXISTS daily_logs (
                    ymd TEXT PRIMARY KEY,
                    focus_seconds INTEGER NOT NULL DEFAULT 0,
                    break_seconds INTEGER NOT NULL DEFAULT 0,
                    sessions INTEGER NOT NULL DEFAULT 0,
                    updated_at REAL NOT NULL DEFAULT 0
                )
            """)
            await db.commit()
        logger.info(f"Daily log store ready at {self.db_path}")

    async def get(self, ymd: str) -> Optional[DailyLogEntry]:
        db = await self._connect()
        try:
            cursor = await db.execute("SELECT * FROM daily_logs WHERE ymd = ?", (ymd,))
            row = await cursor.fetchone()
        finally:
            await db.close()
        return _row_to_entry(row) if row else None

    async def save(self, entry: DailyLogEntry) -> None:
        """Insert or overwrite one day in a single transaction."""
        db = await self._connect()
        try:
            await db.execute("""
                INSERT INTO daily_logs (ymd, focus_seconds, break_seconds, sessions, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(ymd) DO UPDATE SET
                    focus_seconds = excluded.focus_seconds,
                    break_seconds = excluded.break_seconds,
                    sessions = excluded.sessions,
                    updated_at = excluded.updated_at
            """, (entry.ymd, entry.focus_seconds, entry.break_seconds, entry.sessions, entry.updated_at))
            await db.commit()
        finally:
            await db.close()

    async def list_recent(self, limit: int = 30) -> List[DailyLogEntry]:
        """Newest first."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                "SELECT * FROM daily_logs ORDER BY ymd DESC LIMIT ?", (limit,)
            )
            rows = await cursor.fetchall()
        finally:
            await db.close()
        return [_row_to_entry(r) for r in rows]

    async def list_all(self) -> List[DailyLogEntry]:
        """Oldest first."""
        db = await self._connect()
        try:
            cursor = await db.execute("SELECT * FROM daily_logs ORDER BY ymd ASC")
            rows = await cursor.fetchall()
        finally:
            await db.close()
        return [_row_to_entry(r) for r in rows]

    async def count(self) -> int:
        db = await self._connect()
        try:
            cursor = await db.execute("SELECT COUNT(*) FROM daily_logs")
            return (await cursor.fetchone())[0]
        finally:
            await db.close()

    async def prune(self, keep: Optional[int] = None) -> int:
        """Delete all but the `keep` most recent days. Returns rows removed."""
        keep = self.retention_days if keep is None else keep
        db = await self._connect()
        try:
            cursor = await db.execute("""
                DELETE FROM daily_logs WHERE ymd NOT IN (
                    SELECT ymd FROM daily_logs ORDER BY ymd DESC LIMIT ?
                )
            """, (keep,))
            await db.commit()
            removed = cursor.rowcount
        finally:
            await db.close()
        if removed > 0:
            logger.info(f"Pruned {removed} daily logs beyond the latest {keep}")
        return removed
