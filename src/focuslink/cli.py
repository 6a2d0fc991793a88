#!/usr/bin/env python3
"""focuslink command line.

Usage:
    focuslink watch --peer http://phone.local:7788
    focuslink phone --port 7788
    focuslink logs --limit 14
    focuslink stats --mode month
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

import click
from rich.console import Console
from rich.table import Table

from focuslink import stats as stats_mod
from focuslink.clock import format_minutes
from focuslink.config import ConfigError, Settings, load_settings
from focuslink.log import setup_logging
from focuslink.store import DailyLogStore

console = Console()


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, verbose):
    """Two-device Pomodoro focus timer."""
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    try:
        settings = load_settings()
    except ConfigError as e:
        raise click.ClickException(str(e))
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.option("--peer", default=None, help="Phone service URL (overrides FOCUSLINK_PEER_URL)")
@click.pass_context
def watch(ctx, peer):
    """Run the wrist timer interactively."""
    from focuslink.watch import WatchRuntime

    settings = _settings(ctx)
    if peer:
        settings.peer_url = peer
    console.print("Commands: focus, short, long, pause, resume, stop, minutes N, status, quit")
    asyncio.run(WatchRuntime(settings, console=console).run())


@cli.command()
@click.option("--host", default=None, help="Bind address")
@click.option("--port", type=int, default=None, help="Bind port")
@click.pass_context
def phone(ctx, host, port):
    """Run the phone service that receives daily summaries."""
    import uvicorn

    from focuslink.phone import create_app

    settings = _settings(ctx)
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level="info",
    )


@cli.command()
@click.option("--limit", type=int, default=14, show_default=True, help="Days to show")
@click.pass_context
def logs(ctx, limit):
    """Show recent daily logs, newest first."""
    settings = _settings(ctx)
    store = DailyLogStore(settings.db_path, retention_days=settings.retention_days)

    async def _load():
        await store.init_tables()
        return await store.list_recent(limit)

    entries = asyncio.run(_load())
    if not entries:
        console.print("No daily logs yet.")
        return

    table = Table(title="Daily logs")
    table.add_column("Day")
    table.add_column("Focus", justify="right")
    table.add_column("Break", justify="right")
    table.add_column("Sessions", justify="right")
    for e in entries:
        table.add_row(e.ymd, format_minutes(e.focus_seconds), format_minutes(e.break_seconds), str(e.sessions))
    console.print(table)


@cli.command()
@click.option("--mode", type=click.Choice(stats_mod.AGGREGATE_MODES), default="week", show_default=True)
@click.pass_context
def stats(ctx, mode):
    """Show goal progress, streak and week/month totals."""
    settings = _settings(ctx)
    store = DailyLogStore(settings.db_path, retention_days=settings.retention_days)

    async def _load():
        await store.init_tables()
        return await store.list_all()

    entries = asyncio.run(_load())
    today = date.today()
    today_entry = next((e for e in entries if e.ymd == today.isoformat()), None)
    progress = stats_mod.today_progress(today_entry, settings.target_minutes)
    streak = stats_mod.streak_days(entries, today)

    console.print(
        f"Today: {format_minutes(today_entry.focus_seconds if today_entry else 0)} "
        f"of {settings.target_minutes}m goal ({progress:.0%}), streak {streak} days"
    )

    bins = stats_mod.aggregate(entries, mode)
    table = Table(title=f"By {mode}")
    table.add_column("Period")
    table.add_column("Dates")
    table.add_column("Focus", justify="right")
    table.add_column("Break", justify="right")
    table.add_column("Sessions", justify="right")
    for b in bins:
        table.add_row(b.title, b.subtitle, format_minutes(b.focus_seconds), format_minutes(b.break_seconds), str(b.sessions))
    totals = stats_mod.period_totals(bins)
    table.add_row(
        "Total", "",
        format_minutes(totals["focusSeconds"]),
        format_minutes(totals["breakSeconds"]),
        str(totals["sessions"]),
    )
    console.print(table)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
