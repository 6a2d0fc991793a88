"""Environment-driven configuration for both sides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from focuslink.phases import (
    DEFAULT_BREAK_MINUTES,
    DEFAULT_FOCUS_MINUTES,
    DEFAULT_LONG_BREAK_MINUTES,
    MAX_FOCUS_MINUTES,
    MIN_FOCUS_MINUTES,
)
from focuslink.store import DEFAULT_RETENTION_DAYS

DEFAULT_DB_PATH = Path.home() / ".focuslink" / "daily_logs.db"
DEFAULT_PORT = 7788

# Daily focus goal picker on the phone: 10..300 minutes in steps of 5
MIN_TARGET_MINUTES = 10
MAX_TARGET_MINUTES = 300
DEFAULT_TARGET_MINUTES = 60


class FocuslinkError(Exception):
    pass


class ConfigError(FocuslinkError):
    pass


@dataclass
class Settings:
    db_path: Path = field(default_factory=lambda: DEFAULT_DB_PATH)
    peer_url: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    focus_minutes: int = DEFAULT_FOCUS_MINUTES
    break_minutes: int = DEFAULT_BREAK_MINUTES
    long_break_minutes: int = DEFAULT_LONG_BREAK_MINUTES
    target_minutes: int = DEFAULT_TARGET_MINUTES
    retention_days: int = DEFAULT_RETENTION_DAYS
    send_timeout: float = 5.0

    def validate(self) -> "Settings":
        if not MIN_FOCUS_MINUTES <= self.focus_minutes <= MAX_FOCUS_MINUTES:
            raise ConfigError(
                f"Focus minutes must be between {MIN_FOCUS_MINUTES} and {MAX_FOCUS_MINUTES}, got {self.focus_minutes}"
            )
        if self.break_minutes < 1 or self.long_break_minutes < 1:
            raise ConfigError("Break lengths must be at least 1 minute")
        if not MIN_TARGET_MINUTES <= self.target_minutes <= MAX_TARGET_MINUTES:
            raise ConfigError(
                f"Target minutes must be between {MIN_TARGET_MINUTES} and {MAX_TARGET_MINUTES}, got {self.target_minutes}"
            )
        if self.retention_days < 1:
            raise ConfigError("Retention must keep at least one day")
        if not 0 < self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}")
        return self


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    value = env.get(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got '{value}'")


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    value = env.get(key)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got '{value}'")


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[Path] = None) -> Settings:
    """Build Settings from FOCUSLINK_* variables (reads .env when env is not given)."""
    if env is None:
        load_dotenv(dotenv_path)
        env = os.environ

    db = env.get("FOCUSLINK_DB")
    settings = Settings(
        db_path=Path(db).expanduser() if db else DEFAULT_DB_PATH,
        peer_url=env.get("FOCUSLINK_PEER_URL") or None,
        host=env.get("FOCUSLINK_HOST", "0.0.0.0"),
        port=_int(env, "FOCUSLINK_PORT", DEFAULT_PORT),
        focus_minutes=_int(env, "FOCUSLINK_FOCUS_MINUTES", DEFAULT_FOCUS_MINUTES),
        break_minutes=_int(env, "FOCUSLINK_BREAK_MINUTES", DEFAULT_BREAK_MINUTES),
        long_break_minutes=_int(env, "FOCUSLINK_LONG_BREAK_MINUTES", DEFAULT_LONG_BREAK_MINUTES),
        target_minutes=_int(env, "FOCUSLINK_TARGET_MINUTES", DEFAULT_TARGET_MINUTES),
        retention_days=_int(env, "FOCUSLINK_RETENTION_DAYS", DEFAULT_RETENTION_DAYS),
        send_timeout=_float(env, "FOCUSLINK_SEND_TIMEOUT", 5.0),
    )
    return settings.validate()
