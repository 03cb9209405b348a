import logging

from .clock import Clock
from .config import MIN_PAUSE_REMAINING_SEC
from .logging_setup import get_logger
from .notifier import Effect, RefreshCountdown
from .settings import Settings
from .state import (
    BlockedKind,
    BlockedReason,
    BudgetState,
    PauseLogEntry,
    PauseState,
    ToggleOutcome,
)
from .utils import day_key, time_of_day


class PauseEngine:
    """Rate-limited suspension of the countdown.

    Pause settings are read fresh on every check so edits apply immediately.
    Accounting (time used, log, last end) is written only when a pause ends.
    """

    def __init__(
        self,
        state: PauseState,
        budget: BudgetState,
        settings: Settings,
        clock: Clock,
        logger: logging.Logger | None = None,
    ):
        self._state = state
        self._budget = budget
        self._settings = settings
        self._clock = clock
        self._logger = logger or get_logger()

    @property
    def is_paused(self) -> bool:
        return self._state.is_paused

    def _today(self) -> str:
        return day_key(self._clock.now())

    def can_pause(self) -> BlockedReason | None:
        if self._state.is_paused:
            return None

        config = self._settings.pause_config()
        if not config.enabled:
            return BlockedReason(BlockedKind.DISABLED)

        if self._budget.remaining_seconds < MIN_PAUSE_REMAINING_SEC:
            return BlockedReason(BlockedKind.TIME_TOO_LOW)

        if self._settings.pause_used(self._today()) >= config.daily_budget_seconds:
            return BlockedReason(BlockedKind.BUDGET_EXHAUSTED)

        last_end = self._settings.last_pause_end()
        since_last = self._clock.timestamp() - last_end
        if last_end > 0 and since_last < config.cooldown_seconds:
            return BlockedReason(BlockedKind.COOLDOWN_ACTIVE, config.cooldown_seconds - since_last)

        active = self._state.session_active_seconds
        if active < config.min_active_time_seconds:
            return BlockedReason(BlockedKind.MIN_ACTIVE_TIME_NOT_MET, config.min_active_time_seconds - active)

        return None

    def remaining_budget_seconds(self) -> int:
        config = self._settings.pause_config()
        return max(0, config.daily_budget_seconds - self._settings.pause_used(self._today()))

    def max_pause_duration(self) -> int:
        config = self._settings.pause_config()
        return min(config.max_duration_seconds, self.remaining_budget_seconds())

    def pause_remaining_seconds(self) -> int:
        if not self._state.is_paused:
            return 0
        return max(0, self.max_pause_duration() - self._state.current_pause_elapsed)

    def toggle(self) -> tuple[ToggleOutcome, list[Effect]]:
        if self._state.is_paused:
            return ToggleOutcome(paused=False), self.resume()
        reason = self.can_pause()
        if reason is not None:
            self._logger.info(f"Pause refused: {reason.describe()}")
            return ToggleOutcome(paused=False, reason=reason), []
        return ToggleOutcome(paused=True), self.pause()

    def pause(self) -> list[Effect]:
        if self._state.is_paused:
            return []
        self._state.pause_started_at = self._clock.timestamp()
        self._state.current_pause_elapsed = 0
        self._state.is_paused = True
        self._logger.info(f"Pause started, max {self.max_pause_duration()}s")
        return [RefreshCountdown()]

    def resume(self, automatic: bool = False) -> list[Effect]:
        if not self._state.is_paused:
            return []
        now = self._clock.now()
        day = day_key(now)
        duration = self._state.current_pause_elapsed

        used = self._settings.pause_used(day) + duration
        self._settings.save_pause_used(day, used)
        self._settings.append_pause_log(day, PauseLogEntry(time_of_day(now), duration))
        self._settings.save_last_pause_end(self._clock.timestamp())

        self._state.clear_pause()
        how = "auto-resumed" if automatic else "resumed"
        self._logger.info(f"Pause {how} after {duration}s, used today {used}s")
        return [RefreshCountdown()]

    def tick(self) -> list[Effect]:
        if not self._state.is_paused:
            return []
        limit = self.max_pause_duration()
        self._state.current_pause_elapsed += 1
        if self._state.current_pause_elapsed >= limit:
            return self.resume(automatic=True)
        return []

    def menu_label(self) -> str:
        if self._state.is_paused:
            return "Resume Timer"
        reason = self.can_pause()
        if reason is not None:
            return reason.menu_label()
        return f"Pause Timer ({self.remaining_budget_seconds() // 60}m left)"

