"""
Phone side: FastAPI service that receives daily summaries from the wrist
device and serves the daily log.

Endpoints:
    POST /api/summary       - inbound snapshot (merged, never rejected for missing fields)
    GET  /api/logs          - recent daily rows, newest first
    GET  /api/logs/{ymd}    - one day
    GET  /api/stats         - goal progress, streak, week/month bins
    GET  /api/server-logs   - recent log buffer
    GET  /health            - heartbeat
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from datetime import date
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from pydantic import BaseModel

from focuslink import stats
from focuslink.clock import make_ymd
from focuslink.config import Settings
from focuslink.log import recent_logs
from focuslink.replicator import ReceiveResult, SummaryReceiver
from focuslink.store import DailyLogStore
from focuslink.transport import HttpTransport, Transport

logger = logging.getLogger("focuslink.phone")


class SummaryAck(BaseModel):
    accepted: bool
    changed: bool


def create_app(
    settings: Settings,
    store: Optional[DailyLogStore] = None,
    transport: Optional[Transport] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    store = store or DailyLogStore(settings.db_path, retention_days=settings.retention_days)
    transport = transport or HttpTransport()
    receiver = SummaryReceiver(store, clock=clock)
    receiver.attach(transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await store.init_tables()
        logger.info("Phone service started")
        yield
        logger.info("Phone service stopped")

    app = FastAPI(
        title="focuslink phone",
        description="Receives daily focus summaries from the wrist timer",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.transport = transport
    app.state.settings = settings

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/api/summary", response_model=SummaryAck)
    async def receive_summary(request: Request):
        """Merge one snapshot into the daily log. Wrong type tags are ignored, not errors."""
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Dropping summary with an unreadable body")
            return SummaryAck(accepted=False, changed=False)

        results = await transport.dispatch(payload)
        result = next((r for r in results if isinstance(r, ReceiveResult)), None)
        if result is None:
            return SummaryAck(accepted=False, changed=False)
        return SummaryAck(accepted=result.accepted, changed=result.changed)

    @app.get("/api/logs")
    async def list_logs(limit: int = Query(default=30, ge=1, le=366)):
        entries = await store.list_recent(limit)
        return [e.to_dict() for e in entries]

    @app.get("/api/logs/{ymd}")
    async def get_log(ymd: str):
        entry = await store.get(ymd)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"No log for {ymd}")
        return entry.to_dict()

    @app.get("/api/stats")
    async def get_stats(mode: str = Query(default="week", pattern="^(week|month)$")):
        entries = await store.list_all()
        now = clock()
        today_ymd = make_ymd(now)
        today_entry = next((e for e in entries if e.ymd == today_ymd), None)
        bins = stats.aggregate(entries, mode)
        return {
            "today": {
                "ymd": today_ymd,
                "focusSeconds": today_entry.focus_seconds if today_entry else 0,
                "targetMinutes": settings.target_minutes,
                "progress": stats.today_progress(today_entry, settings.target_minutes),
            },
            "streakDays": stats.streak_days(entries, date.fromtimestamp(now)),
            "mode": mode,
            "bins": [b.to_dict() for b in bins],
            "totals": stats.period_totals(bins),
        }

    @app.get("/api/server-logs")
    async def server_logs(limit: int = Query(default=100, ge=1, le=100)):
        return {"logs": recent_logs(limit)}

    return app
