"""Cross-device summary message and the persisted per-day record.

The wire format is a flat key/value map. Inbound payloads are validated here,
before they reach the merge: a wrong type tag drops the message, anything else
missing or malformed is defaulted field by field.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from focuslink.clock import YMD_FORMAT, make_ymd

logger = logging.getLogger("focuslink.messages")

SUMMARY_TYPE = "dailySummary"
MESSAGE_VERSION = 1

# Largest value an SQLite INTEGER column holds
MAX_COUNT = 2**63 - 1

# Older senders used short keys
LEGACY_KEYS = {
    "focus": "focusSeconds",
    "break": "breakSeconds",
    "ts": "updatedAt",
}


class DailySummaryMessage(BaseModel):
    type: Literal["dailySummary"] = SUMMARY_TYPE
    version: int = MESSAGE_VERSION
    ymd: str
    focusSeconds: int = Field(default=0, ge=0, le=MAX_COUNT)
    breakSeconds: int = Field(default=0, ge=0, le=MAX_COUNT)
    sessions: int = Field(default=0, ge=0, le=MAX_COUNT)
    updatedAt: float = Field(allow_inf_nan=False)

    @field_validator("ymd")
    @classmethod
    def _check_ymd(cls, value: str) -> str:
        if datetime.strptime(value, YMD_FORMAT).date().isoformat() != value:
            raise ValueError(f"Day key must be zero-padded YYYY-MM-DD, got '{value}'")
        return value

    def to_payload(self) -> dict:
        return self.model_dump()


@dataclass
class DailyLogEntry:
    """One persisted day on the receiving device."""

    ymd: str
    focus_seconds: int = 0
    break_seconds: int = 0
    sessions: int = 0
    updated_at: float = 0.0

    def to_dict(self) -> dict:
        return {
            "ymd": self.ymd,
            "focusSeconds": self.focus_seconds,
            "breakSeconds": self.break_seconds,
            "sessions": self.sessions,
            "updatedAt": self.updated_at,
        }


def _as_count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        count = max(0, int(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    # Counts an SQLite INTEGER cannot hold are malformed
    return count if count <= MAX_COUNT else 0


def _as_epoch(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        epoch = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return epoch if math.isfinite(epoch) else default


def _as_ymd(value: Any, default: str) -> str:
    if not isinstance(value, str):
        return default
    try:
        parsed = datetime.strptime(value, YMD_FORMAT)
    except ValueError:
        return default
    # "2026-2-11" and "2026-02-11" are the same day
    return parsed.date().isoformat()


def parse_summary(payload: Any, now: Optional[float] = None) -> Optional[DailySummaryMessage]:
    """Validate an inbound payload. Returns None when it must be dropped."""
    if not isinstance(payload, dict):
        logger.warning(f"Dropping non-mapping payload: {type(payload).__name__}")
        return None

    msg_type = payload.get("type", SUMMARY_TYPE)
    if msg_type != SUMMARY_TYPE:
        logger.info(f"Dropping message with type '{msg_type}'")
        return None

    now = time.time() if now is None else now
    fields = dict(payload)
    for old, new in LEGACY_KEYS.items():
        if new not in fields and old in fields:
            fields[new] = fields[old]

    return DailySummaryMessage(
        version=_as_count(fields.get("version", MESSAGE_VERSION)) or MESSAGE_VERSION,
        ymd=_as_ymd(fields.get("ymd"), make_ymd(now)),
        focusSeconds=_as_count(fields.get("focusSeconds")),
        breakSeconds=_as_count(fields.get("breakSeconds")),
        sessions=_as_count(fields.get("sessions")),
        updatedAt=_as_epoch(fields.get("updatedAt"), now),
    )
