import logging

from .budget import BudgetEngine
from .logging_setup import get_logger
from .notifier import Effect, TerminateSession
from .settings import Settings


class BlockingGate:
    """Passcode-checked actions offered on the blocking screen.

    A wrong passcode only raises ``passcode_error`` for the screen to show;
    there is no lockout.
    """

    def __init__(self, budget: BudgetEngine, settings: Settings, logger: logging.Logger | None = None):
        self._budget = budget
        self._settings = settings
        self._logger = logger or get_logger()
        self.passcode_error = False

    def verify(self, code: str) -> bool:
        ok = code == self._settings.passcode()
        self.passcode_error = not ok
        if not ok:
            self._logger.warning("Incorrect passcode entered")
        return ok

    def unlock(self, code: str) -> tuple[bool, list[Effect]]:
        if not self.verify(code):
            return False, []
        self._logger.info("Unlocked with passcode")
        return True, self._budget.unlock()

    def extend_with_auth(self, code: str, minutes: int) -> tuple[bool, list[Effect]]:
        if not self.verify(code):
            return False, []
        return True, self._budget.extend_time(minutes)

    def shutdown_with_auth(self, code: str) -> tuple[bool, list[Effect]]:
        if not self.verify(code):
            return False, []
        self._logger.info("Shutdown requested with passcode")
        self._budget.persist()
        return True, [TerminateSession()]
