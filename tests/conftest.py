import datetime
import logging
from dataclasses import dataclass

import pytest

from screen_guardian.budget import BudgetEngine
from screen_guardian.controller import ScreenTimeController
from screen_guardian.gate import BlockingGate
from screen_guardian.pause import PauseEngine
from screen_guardian.settings import Settings
from screen_guardian.settings_store import SettingsStore
from screen_guardian.state import BudgetState, PauseState

# Monday
START = datetime.datetime(2026, 3, 2, 14, 0, 0)
TODAY = "2026-03-02"


class FakeClock:
    def __init__(self, start: datetime.datetime = START):
        self.current = start

    def now(self) -> datetime.datetime:
        return self.current

    def timestamp(self) -> int:
        return int(self.current.timestamp())

    def advance(self, seconds: int) -> None:
        self.current += datetime.timedelta(seconds=seconds)

    def set(self, moment: datetime.datetime) -> None:
        self.current = moment


class RecordingNotifier:
    def __init__(self):
        self.calls: list[tuple] = []

    def show_warning(self, message: str, duration_seconds: int) -> None:
        self.calls.append(("show_warning", message, duration_seconds))

    def show_blocking(self, message: str) -> None:
        self.calls.append(("show_blocking", message))

    def hide_blocking(self) -> None:
        self.calls.append(("hide_blocking",))

    def refresh_countdown_display(self) -> None:
        self.calls.append(("refresh",))

    def terminate_session(self) -> None:
        self.calls.append(("terminate",))

    def names(self, include_refresh: bool = False) -> list[str]:
        return [c[0] for c in self.calls if include_refresh or c[0] != "refresh"]


@dataclass
class Engines:
    budget_state: BudgetState
    pause_state: PauseState
    pause: PauseEngine
    budget: BudgetEngine
    gate: BlockingGate


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("ScreenGuardian.tests")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path, logger) -> SettingsStore:
    s = SettingsStore(str(tmp_path / "settings.json"), logger)
    s.load()
    return s


@pytest.fixture
def settings(store, logger) -> Settings:
    s = Settings(store, logger)
    s.initialize_defaults()
    return s


@pytest.fixture
def make_engines(settings, clock, logger):
    def _make() -> Engines:
        budget_state = BudgetState()
        pause_state = PauseState()
        pause = PauseEngine(pause_state, budget_state, settings, clock, logger)
        budget = BudgetEngine(budget_state, pause_state, pause, settings, clock, logger)
        gate = BlockingGate(budget, settings, logger)
        return Engines(budget_state, pause_state, pause, budget, gate)

    return _make


@pytest.fixture
def engines(make_engines) -> Engines:
    e = make_engines()
    e.budget.load()
    return e


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def controller(settings, notifier, clock, logger) -> ScreenTimeController:
    c = ScreenTimeController(settings, notifier, clock=clock, logger=logger)
    c.load()
    return c
