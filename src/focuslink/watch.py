"""
Wrist side runtime: wires the phase timer to APScheduler, the alert sink and
the HTTP transport, and maps typed commands onto timer operations.

Commands:
    focus | short | long   start a phase
    pause | resume | stop  control the running phase
    minutes N              focus length for the next focus phase
    status                 show the countdown and today's totals
    quit                   stop and exit
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from focuslink.accumulator import DailyAccumulator
from focuslink.alerts import HapticCue, PhaseAlerts
from focuslink.clock import format_minutes, format_mmss, make_ymd
from focuslink.config import Settings
from focuslink.phases import Phase
from focuslink.replicator import SummaryReplicator
from focuslink.scheduler import APSchedulerBackend, Scheduler
from focuslink.timer import PhaseTimer
from focuslink.transport import HttpTransport, Transport

logger = logging.getLogger("focuslink.watch")

PHASE_LABELS = {
    Phase.IDLE: "",
    Phase.FOCUS: "FOCUS",
    Phase.SHORT_BREAK: "BREAK",
    Phase.LONG_BREAK: "BREAK",
}

PHASE_STYLES = {
    Phase.IDLE: "dim",
    Phase.FOCUS: "bold dark_orange",
    Phase.SHORT_BREAK: "bold blue",
    Phase.LONG_BREAK: "bold blue",
}

QUIT_COMMANDS = {"quit", "exit", "q"}


class WatchRuntime:
    """Owns one PhaseTimer and everything it is wired to."""

    def __init__(
        self,
        settings: Settings,
        scheduler: Optional[Scheduler] = None,
        transport: Optional[Transport] = None,
        console: Optional[Console] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.console = console or Console()
        self.clock = clock
        self._aps: Optional[AsyncIOScheduler] = None
        if scheduler is None:
            self._aps = AsyncIOScheduler()
            scheduler = APSchedulerBackend(self._aps)
        self.scheduler = scheduler
        self.transport = transport or HttpTransport(settings.peer_url, timeout=settings.send_timeout)

        self.accumulator = DailyAccumulator(make_ymd(clock()))
        self.replicator = SummaryReplicator(self.accumulator, self.transport, clock=clock)
        self.alerts = PhaseAlerts(self.scheduler, notifier=self._show_alert, cue_player=self._play_cue)
        self.timer = PhaseTimer(
            self.scheduler,
            self.accumulator,
            self.replicator,
            self.alerts,
            clock=clock,
            focus_minutes=settings.focus_minutes,
            break_minutes=settings.break_minutes,
            long_break_minutes=settings.long_break_minutes,
        )

    # ---- Output sinks ----

    def _show_alert(self, title: str, body: str) -> None:
        self.console.bell()
        self.console.print(f"[bold]{title}[/bold] {body}")

    def _play_cue(self, cue: HapticCue) -> None:
        if cue == HapticCue.START or cue == HapticCue.NOTIFICATION:
            self.console.bell()
        logger.debug(f"Cue: {cue.value}")

    # ---- Commands ----

    def status_panel(self) -> Panel:
        self.timer.refresh()
        t = self.timer
        label = "PAUSE" if t.is_paused else PHASE_LABELS[t.phase]
        totals = self.accumulator.totals()

        table = Table.grid(padding=(0, 2))
        table.add_column(justify="right", style="dim")
        table.add_column()
        table.add_row("Phase", f"[{PHASE_STYLES[t.phase]}]{label or 'idle'}[/]")
        table.add_row("Remaining", format_mmss(t.remaining))
        table.add_row("Next focus", f"{t.focus_minutes} min")
        table.add_row("Today", totals.date_key)
        table.add_row("Focus", format_minutes(totals.focus_seconds))
        table.add_row("Break", format_minutes(totals.break_seconds))
        table.add_row("Sessions", str(totals.session_count))
        return Panel(table, title="focuslink", expand=False)

    def handle_command(self, line: str) -> bool:
        """Run one command. Returns False when the runtime should exit."""
        parts = line.strip().split()
        if not parts:
            return True
        cmd, args = parts[0].lower(), parts[1:]

        if cmd in QUIT_COMMANDS:
            self.timer.stop()
            return False
        if cmd == "focus":
            self.timer.start_focus()
        elif cmd == "short":
            self.timer.start_short_break()
        elif cmd == "long":
            self.timer.start_long_break()
        elif cmd == "pause":
            self.timer.pause()
        elif cmd == "resume":
            self.timer.resume()
        elif cmd == "stop":
            self.timer.stop()
        elif cmd == "minutes":
            if len(args) != 1 or not args[0].isdigit():
                self.console.print("[red]Usage: minutes N[/red]")
                return True
            self.timer.focus_minutes = int(args[0])
        elif cmd != "status":
            self.console.print(f"[red]Unknown command:[/red] {cmd}")
            return True

        self.console.print(self.status_panel())
        return True

    # ---- Event loop ----

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        if self._aps is not None:
            self._aps.start()
        logger.info(f"Wrist timer started (peer: {self.settings.peer_url or 'none'})")
        self.console.print(self.status_panel())
        try:
            while True:
                line = await loop.run_in_executor(None, sys.stdin.readline)
                if not line:
                    self.timer.stop()
                    break
                if not self.handle_command(line):
                    break
        finally:
            if self._aps is not None:
                self._aps.shutdown(wait=False)
            logger.info("Wrist timer stopped")
