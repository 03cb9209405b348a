import logging

from .clock import Clock
from .config import PERSIST_EVERY_SEC, WARNING_DISPLAY_SEC
from .logging_setup import get_logger
from .notifier import Effect, HideBlocking, RefreshCountdown, ShowBlocking, ShowWarning
from .pause import PauseEngine
from .settings import Settings
from .state import BudgetState, PauseState
from .utils import day_key


class BudgetEngine:
    """Daily countdown and the Active/Blocked state.

    Methods mutate the owned state and return the display effects the
    change calls for; the caller decides when to dispatch them.
    """

    def __init__(
        self,
        state: BudgetState,
        pause_state: PauseState,
        pause: PauseEngine,
        settings: Settings,
        clock: Clock,
        logger: logging.Logger | None = None,
    ):
        self._state = state
        self._pause_state = pause_state
        self._pause = pause
        self._settings = settings
        self._clock = clock
        self._logger = logger or get_logger()

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    @property
    def blocked(self) -> bool:
        return self._state.blocked

    def daily_limit_minutes(self) -> int:
        return self._settings.daily_limit_minutes(self._clock.now().weekday())

    def _day(self) -> str:
        return self._state.day or day_key(self._clock.now())

    def _persist_remaining(self) -> None:
        self._settings.save_remaining_time(self._day(), self._state.remaining_seconds)

    def persist(self) -> None:
        if not self._state.initialized:
            return
        self._settings.save_countdown(
            self._day(),
            self._state.remaining_seconds,
            self._pause_state.session_active_seconds,
        )

    def load(self) -> list[Effect]:
        now = self._clock.now()
        day = day_key(now)
        stored = self._settings.load_remaining_time(day)
        if stored is None:
            remaining = self._settings.daily_limit_minutes(now.weekday()) * 60
            self._logger.info(f"No countdown stored for {day}, starting from daily limit {remaining}s")
        else:
            remaining = max(0, stored)
            self._logger.info(f"Loaded countdown for {day}: {remaining}s")

        self._state.day = day
        self._state.remaining_seconds = remaining
        self._pause_state.session_active_seconds = self._settings.load_session_active(day)

        effects: list[Effect] = []
        if remaining <= 0:
            effects.extend(self._block())
        else:
            self._state.blocked = False
        effects.append(RefreshCountdown())
        return effects

    def roll_over_if_new_day(self) -> list[Effect]:
        today = day_key(self._clock.now())
        if self._state.day is None or self._state.day == today:
            return []

        old_day = self._state.day
        effects: list[Effect] = []
        if self._pause.is_paused:
            effects.extend(self._pause.resume())
        self.persist()
        was_blocked = self._state.blocked
        self._logger.info(f"Day rollover {old_day} -> {today}")

        effects.extend(self.load())
        if was_blocked and not self._state.blocked:
            effects.insert(0, HideBlocking())
            self._logger.info("Unblocked by day rollover")
        elif was_blocked and self._state.blocked:
            # load() replayed ShowBlocking for a screen that is already up
            effects = [e for e in effects if not isinstance(e, ShowBlocking)]
        return effects

    def tick(self) -> list[Effect]:
        if self._pause.is_paused:
            effects = self._pause.tick()
            effects.append(RefreshCountdown())
            return effects

        effects: list[Effect] = []
        if self._state.remaining_seconds > 0:
            self._state.remaining_seconds -= 1
            self._pause_state.session_active_seconds += 1
            remaining = self._state.remaining_seconds

            if remaining % PERSIST_EVERY_SEC == 0:
                self.persist()

            for warning in self._settings.warnings():
                if remaining == warning.threshold_seconds:
                    self._logger.info(f"Warning at {remaining}s: {warning.message}")
                    effects.append(ShowWarning(warning.message, WARNING_DISPLAY_SEC))

            if remaining == 0:
                effects.extend(self._block())

        effects.append(RefreshCountdown())
        return effects

    def extend_time(self, minutes: int) -> list[Effect]:
        if minutes <= 0:
            return []
        additional = minutes * 60
        if self._state.remaining_seconds < 0:
            self._state.remaining_seconds = additional
        else:
            self._state.remaining_seconds += additional
        self._persist_remaining()
        self._logger.info(f"Extended by {minutes}m, remaining {self._state.remaining_seconds}s")

        effects = self._unblock()
        effects.append(RefreshCountdown())
        return effects

    def reset_timer(self) -> list[Effect]:
        self._state.remaining_seconds = self.daily_limit_minutes() * 60
        self._persist_remaining()
        self._logger.info(f"Timer reset to daily limit {self._state.remaining_seconds}s")

        effects: list[Effect] = []
        if self._state.remaining_seconds > 0:
            effects.extend(self._unblock())
        elif not self._state.blocked:
            effects.extend(self._block())
        effects.append(RefreshCountdown())
        return effects

    def unlock(self) -> list[Effect]:
        effects = self._unblock()
        if self._state.initialized:
            self._persist_remaining()
        effects.append(RefreshCountdown())
        return effects

    def _block(self) -> list[Effect]:
        self._state.blocked = True
        self._logger.info("Time limit reached, blocking")
        return [ShowBlocking(self._settings.blocking_message())]

    def _unblock(self) -> list[Effect]:
        if not self._state.blocked:
            return []
        self._state.blocked = False
        self._logger.info("Unblocked")
        return [HideBlocking()]
