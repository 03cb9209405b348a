import logging
import threading
from collections import deque
from typing import Callable, TypeVar

from .budget import BudgetEngine
from .clock import Clock, SystemClock
from .config import TICK_INTERVAL_SEC
from .gate import BlockingGate
from .logging_setup import get_logger
from .notifier import Effect, Notifier, NullNotifier, dispatch
from .pause import PauseEngine
from .settings import Settings
from .state import (
    BlockedReason,
    BudgetState,
    HistorySnapshot,
    PauseState,
    StatusSnapshot,
    ToggleOutcome,
)
from .utils import day_key

T = TypeVar("T")


class ScreenTimeController:
    """Owns the countdown and pause state and serializes every change.

    All operations, the one-second tick included, run under one lock.
    Effects are queued in the order the state changed and handed to the
    notifier only after the lock is released.
    """

    def __init__(
        self,
        settings: Settings,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ):
        self._settings = settings
        self._notifier: Notifier = notifier or NullNotifier()
        self._clock = clock or SystemClock()
        self._logger = logger or get_logger()

        self._lock = threading.Lock()
        self._dispatch_lock = threading.Lock()
        self._outbox: deque[Effect] = deque()

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        self._budget_state = BudgetState()
        self._pause_state = PauseState()
        self._pause = PauseEngine(self._pause_state, self._budget_state, settings, self._clock, self._logger)
        self._budget = BudgetEngine(
            self._budget_state,
            self._pause_state,
            self._pause,
            settings,
            self._clock,
            self._logger,
        )
        self._gate = BlockingGate(self._budget, settings, self._logger)

    def set_notifier(self, notifier: Notifier) -> None:
        self._notifier = notifier

    # Locking

    def _apply(self, operation: Callable[[], tuple[T, list[Effect]]]) -> T:
        with self._lock:
            result, effects = operation()
            self._outbox.extend(effects)
        self._flush()
        return result

    def _read(self, getter: Callable[[], T]) -> T:
        with self._lock:
            return getter()

    def _flush(self) -> None:
        with self._dispatch_lock:
            while self._outbox:
                effect = self._outbox.popleft()
                dispatch([effect], self._notifier, self._logger)

    # Lifecycle

    def load(self) -> None:
        self._apply(lambda: (None, self._budget.load()))

    def start(self) -> None:
        self.load()
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._tick_loop, name="countdown", daemon=True)
        self._thread.start()
        self._logger.info("Countdown started")

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        with self._lock:
            self._budget.persist()
        self._logger.info("Countdown stopped")

    def _tick_loop(self) -> None:
        while not self._stop_event.wait(TICK_INTERVAL_SEC):
            try:
                self.tick()
            except Exception:
                self._logger.exception("Tick failed")

    # Operations

    def tick(self) -> None:
        def _do():
            effects = self._budget.roll_over_if_new_day()
            effects.extend(self._budget.tick())
            return None, effects

        self._apply(_do)

    def extend_time(self, minutes: int) -> int:
        def _do():
            effects = self._budget.extend_time(minutes)
            return self._budget_state.remaining_seconds, effects

        return self._apply(_do)

    def reset_timer(self) -> int:
        def _do():
            effects = self._budget.reset_timer()
            return self._budget_state.remaining_seconds, effects

        return self._apply(_do)

    def can_pause(self) -> BlockedReason | None:
        return self._read(self._pause.can_pause)

    def toggle_pause(self, passcode: str | None = None) -> ToggleOutcome:
        def _do():
            if not self._pause.is_paused and self._settings.pause_requires_passcode():
                if passcode is None or not self._gate.verify(passcode):
                    return ToggleOutcome(paused=False, authorized=False), []
            return self._pause.toggle()

        return self._apply(_do)

    def pause(self) -> ToggleOutcome:
        """Start a pause; already paused counts as success."""

        def _do():
            if self._pause.is_paused:
                return ToggleOutcome(paused=True), []
            return self._pause.toggle()

        return self._apply(_do)

    def resume(self) -> bool:
        def _do():
            if not self._pause.is_paused:
                return False, []
            return True, self._pause.resume()

        return self._apply(_do)

    def verify_passcode(self, code: str) -> bool:
        return self._read(lambda: self._gate.verify(code))

    def unlock(self, code: str) -> bool:
        return self._apply(lambda: self._gate.unlock(code))

    def extend_with_auth(self, code: str, minutes: int) -> bool:
        return self._apply(lambda: self._gate.extend_with_auth(code, minutes))

    def shutdown_with_auth(self, code: str) -> bool:
        return self._apply(lambda: self._gate.shutdown_with_auth(code))

    # Reads

    @property
    def passcode_error(self) -> bool:
        return self._read(lambda: self._gate.passcode_error)

    def clear_passcode_error(self) -> None:
        with self._lock:
            self._gate.passcode_error = False

    @property
    def remaining_seconds(self) -> int:
        return self._read(lambda: self._budget_state.remaining_seconds)

    @property
    def is_paused(self) -> bool:
        return self._read(lambda: self._pause_state.is_paused)

    @property
    def blocked(self) -> bool:
        return self._read(lambda: self._budget_state.blocked)

    def pause_menu_label(self) -> str:
        return self._read(self._pause.menu_label)

    def status(self) -> StatusSnapshot:
        def _snapshot():
            return StatusSnapshot(
                remaining_seconds=self._budget_state.remaining_seconds,
                blocked=self._budget_state.blocked,
                paused=self._pause_state.is_paused,
                pause_remaining_seconds=self._pause.pause_remaining_seconds(),
                pause_budget_remaining_seconds=self._pause.remaining_budget_seconds(),
                daily_limit_minutes=self._budget.daily_limit_minutes(),
                session_active_seconds=self._pause_state.session_active_seconds,
                day=self._budget_state.day,
            )

        return self._read(_snapshot)

    def history(self) -> HistorySnapshot:
        def _snapshot():
            day = day_key(self._clock.now())
            return HistorySnapshot(
                day=day,
                pause_used_seconds=self._settings.pause_used(day),
                daily_budget_minutes=self._settings.pause_config().daily_budget_minutes,
                entries=self._settings.pause_log(day),
            )

        return self._read(_snapshot)
