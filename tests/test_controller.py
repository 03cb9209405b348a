"""Serialization, effect dispatch and the control loop."""

import threading

import pytest

from screen_guardian.controller import ScreenTimeController
from screen_guardian.state import BlockedKind

from conftest import RecordingNotifier


@pytest.fixture
def pausable(controller, store):
    store.set("pause_min_active_time", "0")
    return controller


class TestEffects:
    def test_blocking_reaches_notifier(self, controller, notifier, store):
        store.set("remaining_time_2026-03-02", "2")
        controller.load()
        notifier.calls.clear()

        controller.tick()
        controller.tick()
        assert notifier.names() == ["show_blocking"]
        assert controller.blocked

    def test_extend_while_blocked_hides_once(self, controller, notifier, store):
        store.set("remaining_time_2026-03-02", "0")
        controller.load()
        notifier.calls.clear()

        assert controller.extend_time(15) == 900
        assert notifier.names() == ["hide_blocking"]
        assert not controller.blocked

    def test_effects_keep_mutation_order(self, controller, notifier, store):
        store.set("remaining_time_2026-03-02", "1")
        controller.load()
        notifier.calls.clear()

        controller.tick()
        controller.extend_time(1)
        controller.tick()
        assert notifier.names() == ["show_blocking", "hide_blocking"]

    def test_notifier_called_outside_lock(self, settings, clock, logger):
        seen = []

        class ReadingNotifier(RecordingNotifier):
            def refresh_countdown_display(self):
                seen.append(controller.remaining_seconds)

        controller = ScreenTimeController(settings, ReadingNotifier(), clock=clock, logger=logger)
        controller.load()
        controller.tick()
        assert seen == [7200, 7199]

    def test_notifier_failure_keeps_state(self, settings, clock, logger, store):
        class BrokenNotifier(RecordingNotifier):
            def show_blocking(self, message):
                raise RuntimeError("display gone")

        store.set("remaining_time_2026-03-02", "1")
        notifier = BrokenNotifier()
        controller = ScreenTimeController(settings, notifier, clock=clock, logger=logger)
        controller.load()
        controller.tick()
        assert controller.blocked
        assert controller.remaining_seconds == 0
        assert ("refresh",) in notifier.calls


class TestPauseOperations:
    def test_concurrent_toggles_serialize(self, pausable):
        barrier = threading.Barrier(2)
        outcomes = []

        def worker():
            barrier.wait()
            outcomes.append(pausable.toggle_pause())

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(o.paused for o in outcomes) == [False, True]
        assert all(o.ok for o in outcomes)
        assert not pausable.is_paused
        assert len(pausable.history().entries) == 1

    def test_pause_when_already_paused_succeeds(self, pausable):
        assert pausable.pause().paused
        outcome = pausable.pause()
        assert outcome.ok and outcome.paused
        assert pausable.is_paused

    def test_resume_when_not_paused(self, pausable):
        assert not pausable.resume()

    def test_refusal_reason(self, controller):
        outcome = controller.toggle_pause()
        assert outcome.reason.kind is BlockedKind.MIN_ACTIVE_TIME_NOT_MET
        assert controller.can_pause().kind is BlockedKind.MIN_ACTIVE_TIME_NOT_MET

    def test_passcode_required_when_configured(self, pausable, store):
        store.set("pause_requires_passcode", "1")
        outcome = pausable.toggle_pause()
        assert not outcome.authorized
        assert not pausable.is_paused

        assert not pausable.toggle_pause("1234").ok
        assert pausable.passcode_error

        assert pausable.toggle_pause("0000").paused
        assert pausable.toggle_pause().ok
        assert not pausable.is_paused

    def test_paused_tick_freezes_countdown(self, pausable):
        pausable.toggle_pause()
        pausable.tick()
        assert pausable.remaining_seconds == 7200
        assert pausable.status().pause_remaining_seconds == 20 * 60 - 1


class TestGateOperations:
    def test_unlock(self, controller, notifier, store):
        store.set("remaining_time_2026-03-02", "0")
        controller.load()
        notifier.calls.clear()

        assert not controller.unlock("1234")
        assert controller.passcode_error
        assert controller.unlock("0000")
        assert notifier.names() == ["hide_blocking"]
        controller.clear_passcode_error()
        assert not controller.passcode_error

    def test_shutdown_reaches_notifier(self, controller, notifier):
        notifier.calls.clear()
        assert controller.shutdown_with_auth("0000")
        assert notifier.names() == ["terminate"]

    def test_extend_with_auth(self, controller):
        assert controller.extend_with_auth("0000", 15)
        assert controller.remaining_seconds == 7200 + 900
        assert not controller.extend_with_auth("0001", 15)


class TestSnapshots:
    def test_status(self, controller):
        controller.tick()
        snap = controller.status()
        assert snap.remaining_seconds == 7199
        assert not snap.blocked
        assert not snap.paused
        assert snap.pause_budget_remaining_seconds == 45 * 60
        assert snap.daily_limit_minutes == 120
        assert snap.session_active_seconds == 1
        assert snap.day == "2026-03-02"

    def test_history(self, pausable, clock):
        pausable.toggle_pause()
        for _ in range(90):
            pausable.tick()
        clock.advance(90)
        pausable.toggle_pause()

        hist = pausable.history()
        assert hist.pause_used_seconds == 90
        assert hist.daily_budget_minutes == 45
        assert [e.encode() for e in hist.entries] == ["14:01:30:90s"]

    def test_reset_timer(self, controller):
        controller.tick()
        assert controller.reset_timer() == 7200
        assert controller.reset_timer() == 7200


class TestLifecycle:
    def test_start_and_stop_persist_countdown(self, controller, store):
        controller.start()
        controller.stop()
        assert store.get("remaining_time_2026-03-02") is not None
        assert store.get("session_active_2026-03-02") is not None

    def test_tick_rolls_over_day(self, controller, clock):
        import datetime

        controller.tick()
        clock.set(datetime.datetime(2026, 3, 3, 0, 0, 5))
        controller.tick()
        snap = controller.status()
        assert snap.day == "2026-03-03"
        assert snap.remaining_seconds == 7199
        assert snap.session_active_seconds == 1
