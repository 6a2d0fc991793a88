"""Unit tests for PhaseTimer, manual clock and scheduler, no event loop."""

import pytest

from focuslink.alerts import PHASE_END_JOB_ID, HapticCue
from focuslink.phases import Phase


def tick_job(timer):
    return timer._tick_job_id


# ---- start ----

class TestStart:
    def test_start_focus_sets_fields(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        snap = rig.timer.snapshot()
        assert snap.phase == Phase.FOCUS
        assert snap.total_phase_seconds == 1500
        assert snap.start_reference == rig.clock.now
        assert snap.start_remaining_seconds == 1500
        assert snap.paused_remaining_seconds is None
        assert snap.is_active and not snap.is_paused
        assert snap.remaining == 1500

    def test_start_schedules_alert_and_tick(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        assert rig.scheduler.is_pending(PHASE_END_JOB_ID)
        assert rig.scheduler.due_at(PHASE_END_JOB_ID) == rig.clock.now + 1500
        assert rig.scheduler.is_pending(tick_job(rig.timer))

    def test_start_uses_configured_lengths(self, rig):
        rig.timer.start_focus()
        assert rig.timer.total_phase_seconds == 25 * 60
        rig.timer.start_short_break()
        assert rig.timer.total_phase_seconds == 5 * 60
        rig.timer.start_long_break()
        assert rig.timer.total_phase_seconds == 5 * 60

    def test_focus_cue_differs_from_break_cue(self, rig):
        rig.timer.start_focus()
        rig.scheduler.advance(1)
        assert rig.cues == [HapticCue.START, HapticCue.SUCCESS]
        rig.cues.clear()
        rig.timer.start_short_break()
        assert rig.cues == [HapticCue.NOTIFICATION]

    def test_start_idle_is_ignored(self, rig):
        rig.timer.start(Phase.IDLE, 100)
        assert rig.timer.phase == Phase.IDLE
        assert not rig.timer.is_active

    def test_zero_duration_schedules_no_alert(self, rig):
        rig.timer.start(Phase.FOCUS, 0)
        assert not rig.scheduler.is_pending(PHASE_END_JOB_ID)

    def test_restart_replaces_pending_alert(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(10)
        rig.timer.start(Phase.SHORT_BREAK, 300)
        assert rig.scheduler.due_at(PHASE_END_JOB_ID) == rig.clock.now + 300
        rig.scheduler.advance(300)
        assert rig.notifications == [("Break finished", "Start the next focus?")]

    def test_start_rolls_day(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(30)
        rig.timer.stop()
        assert rig.accumulator.focus_seconds == 30
        rig.day[0] = "2026-02-12"
        rig.timer.start_focus()
        assert rig.accumulator.date_key == "2026-02-12"
        assert rig.accumulator.focus_seconds == 0


# ---- tick / remaining ----

class TestTick:
    def test_counts_down_once_per_second(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(10)
        assert rig.timer.remaining == 1490

    def test_refresh_after_suspension(self, rig):
        """The host was suspended: no ticks ran, but remaining catches up on refresh."""
        rig.timer.start(Phase.FOCUS, 1500)
        rig.clock.now += 600.7
        rig.timer.refresh()
        assert rig.timer.remaining == 900

    def test_tick_ignored_while_paused(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(5)
        rig.timer.pause()
        rig.clock.now += 100
        rig.timer.tick()
        assert rig.timer.remaining == 1495

    def test_missing_reference_leaves_state_untouched(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(5)
        rig.timer._start_reference = None
        rig.clock.now += 100
        rig.timer.refresh()
        assert rig.timer.remaining == 1495
        assert rig.timer.phase == Phase.FOCUS

    def test_target_end(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        assert rig.timer.target_end == rig.clock.now + 1500
        rig.timer.pause()
        assert rig.timer.target_end is None


# ---- pause / resume ----

class TestPauseResume:
    def test_pause_captures_remaining(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(100)
        rig.timer.pause()
        snap = rig.timer.snapshot()
        assert snap.is_paused and not snap.is_active
        assert snap.paused_remaining_seconds == 1400
        assert snap.start_reference is None
        assert not rig.scheduler.is_pending(PHASE_END_JOB_ID)
        assert not rig.scheduler.is_pending(tick_job(rig.timer))

    def test_pause_then_resume_does_not_jump(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(100)
        rig.timer.pause()
        rig.timer.resume()
        assert rig.timer.remaining == 1400
        rig.scheduler.advance(1)
        assert rig.timer.remaining == 1399

    def test_paused_time_is_not_counted(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(100)
        rig.timer.pause()
        rig.scheduler.advance(1000)
        assert rig.timer.remaining == 1400
        rig.timer.resume()
        assert rig.scheduler.due_at(PHASE_END_JOB_ID) == rig.clock.now + 1400
        rig.scheduler.advance(50)
        rig.timer.stop()
        assert rig.accumulator.focus_seconds == 150

    def test_pause_when_idle_is_noop(self, rig):
        rig.timer.pause()
        assert rig.timer.phase == Phase.IDLE
        assert not rig.timer.is_paused

    def test_pause_twice_is_noop(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(10)
        rig.timer.pause()
        rig.scheduler.advance(10)
        rig.timer.pause()
        assert rig.timer.snapshot().paused_remaining_seconds == 1490

    def test_resume_while_running_is_noop(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        ref = rig.timer.snapshot().start_reference
        rig.scheduler.advance(10)
        rig.timer.resume()
        assert rig.timer.snapshot().start_reference == ref
        assert rig.timer.remaining == 1490

    def test_never_active_and_paused(self, rig):
        rig.timer.start(Phase.FOCUS, 30)
        for action in (rig.timer.pause, rig.timer.resume, rig.timer.pause, rig.timer.stop):
            action()
            snap = rig.timer.snapshot()
            assert not (snap.is_active and snap.is_paused)


# ---- stop ----

class TestStop:
    def test_stop_after_ten_seconds(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(10)
        rig.timer.stop()
        assert rig.accumulator.focus_seconds == 10
        assert rig.accumulator.session_count == 0

    def test_stop_clears_everything(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(10)
        rig.timer.stop()
        snap = rig.timer.snapshot()
        assert snap.phase == Phase.IDLE
        assert snap.total_phase_seconds == 0
        assert snap.remaining == 0
        assert snap.start_reference is None
        assert snap.paused_remaining_seconds is None
        assert not snap.is_active and not snap.is_paused
        assert rig.scheduler.jobs == {}

    def test_stop_pushes_summary(self, rig):
        rig.timer.start(Phase.FOCUS, 1500)
        rig.scheduler.advance(10)
        rig.timer.stop()
        assert len(rig.transport.outbox) == 1
        payload = rig.transport.outbox[0]
        assert payload["type"] == "dailySummary"
        assert payload["focusSeconds"] == 10
        assert payload["sessions"] == 0

    def test_stale_alert_never_fires_after_stop(self, rig):
        rig.timer.start(Phase.FOCUS, 60)
        rig.scheduler.advance(10)
        rig.timer.stop()
        rig.scheduler.advance(120)
        assert rig.notifications == []
        assert rig.timer.phase == Phase.IDLE

    def test_stop_while_paused_counts_until_pause(self, rig):
        rig.timer.start(Phase.SHORT_BREAK, 300)
        rig.scheduler.advance(40)
        rig.timer.pause()
        rig.scheduler.advance(500)
        rig.timer.stop()
        assert rig.accumulator.break_seconds == 40

    def test_stop_when_idle_is_noop(self, rig):
        rig.timer.stop()
        assert len(rig.transport.outbox) == 0


# ---- completion ----

class TestCompletion:
    def test_focus_completion_starts_short_break(self, rig):
        rig.timer.start(Phase.FOCUS, 60)
        rig.scheduler.advance(60)
        assert rig.timer.phase == Phase.SHORT_BREAK
        assert rig.timer.is_active
        assert rig.timer.total_phase_seconds == 300
        assert rig.accumulator.session_count == 1
        assert rig.accumulator.focus_seconds == 60
        assert rig.notifications == [("Focus finished", "Time for a break")]

    def test_break_completion_starts_focus_without_session(self, rig):
        rig.timer.start(Phase.SHORT_BREAK, 300)
        rig.scheduler.advance(300)
        assert rig.timer.phase == Phase.FOCUS
        assert rig.timer.total_phase_seconds == 1500
        assert rig.accumulator.session_count == 0
        assert rig.accumulator.break_seconds == 300

    def test_long_break_completion_starts_focus(self, rig):
        rig.timer.start(Phase.LONG_BREAK, 120)
        rig.scheduler.advance(120)
        assert rig.timer.phase == Phase.FOCUS
        assert rig.accumulator.break_seconds == 120

    def test_completion_pushes_summary_with_session(self, rig):
        rig.timer.start(Phase.FOCUS, 60)
        rig.scheduler.advance(60)
        assert len(rig.transport.outbox) == 1
        assert rig.transport.outbox[0]["sessions"] == 1
        assert rig.transport.outbox[0]["focusSeconds"] == 60

    def test_full_cycle(self, rig):
        rig.timer.start(Phase.FOCUS, 60)
        rig.scheduler.advance(60 + 300 + 1500)
        assert rig.timer.phase == Phase.SHORT_BREAK
        assert rig.accumulator.session_count == 2
        assert rig.accumulator.focus_seconds == 60 + 1500
        assert rig.accumulator.break_seconds == 300

    def test_completion_is_deferred(self, rig):
        """Reaching zero in a tick only schedules the transition."""
        rig.timer.start(Phase.FOCUS, 5)
        rig.clock.now += 5
        rig.timer.tick()
        assert rig.timer.phase == Phase.FOCUS
        assert rig.timer.remaining == 0
        assert rig.scheduler.is_pending(rig.timer._complete_job_id)
        rig.scheduler.run_due()
        assert rig.timer.phase == Phase.SHORT_BREAK

    def test_duplicate_completion_is_noop(self, rig):
        rig.timer.start(Phase.FOCUS, 3)
        rig.scheduler.advance(3)
        rig.timer._complete_if_needed()
        rig.timer._complete_if_needed()
        assert rig.timer.phase == Phase.SHORT_BREAK
        assert rig.accumulator.session_count == 1
        assert rig.accumulator.focus_seconds == 3

    def test_completion_when_idle_is_noop(self, rig):
        rig.timer._complete_if_needed()
        assert rig.timer.phase == Phase.IDLE

    def test_pause_at_zero_is_not_completion(self, rig):
        rig.timer.start(Phase.FOCUS, 5)
        rig.clock.now += 5
        rig.timer.pause()
        assert rig.timer.remaining == 0
        rig.scheduler.run_due()
        assert rig.timer.phase == Phase.FOCUS
        assert rig.timer.is_paused
        assert rig.accumulator.session_count == 0

    def test_stop_at_zero_does_not_complete(self, rig):
        rig.timer.start(Phase.FOCUS, 5)
        rig.clock.now += 5
        rig.timer.stop()
        rig.scheduler.run_due()
        assert rig.timer.phase == Phase.IDLE
        assert rig.accumulator.session_count == 0
        assert rig.accumulator.focus_seconds == 5


# ---- settings ----

class TestFocusMinutes:
    @pytest.mark.parametrize("value,expected", [(0, 1), (45, 45), (500, 120)])
    def test_clamped(self, rig, value, expected):
        rig.timer.focus_minutes = value
        assert rig.timer.focus_minutes == expected

    def test_applies_to_next_focus_only(self, rig):
        rig.timer.start_focus()
        rig.timer.focus_minutes = 50
        assert rig.timer.total_phase_seconds == 1500
        rig.timer.start_focus()
        assert rig.timer.total_phase_seconds == 3000
