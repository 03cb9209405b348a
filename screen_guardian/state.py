from dataclasses import dataclass, field
from enum import Enum

from .utils import minutes_rounded_up

# remaining_seconds before anything has been loaded from storage
UNINITIALIZED = -1


@dataclass
class BudgetState:
    remaining_seconds: int = UNINITIALIZED
    blocked: bool = False
    day: str | None = None

    @property
    def initialized(self) -> bool:
        return self.remaining_seconds != UNINITIALIZED


@dataclass
class PauseState:
    is_paused: bool = False
    pause_started_at: int = 0
    current_pause_elapsed: int = 0
    session_active_seconds: int = 0

    def clear_pause(self) -> None:
        self.is_paused = False
        self.pause_started_at = 0
        self.current_pause_elapsed = 0


@dataclass(frozen=True)
class PauseConfig:
    enabled: bool
    daily_budget_minutes: int
    max_duration_minutes: int
    cooldown_minutes: int
    min_active_time_minutes: int

    @property
    def daily_budget_seconds(self) -> int:
        return self.daily_budget_minutes * 60

    @property
    def max_duration_seconds(self) -> int:
        return self.max_duration_minutes * 60

    @property
    def cooldown_seconds(self) -> int:
        return self.cooldown_minutes * 60

    @property
    def min_active_time_seconds(self) -> int:
        return self.min_active_time_minutes * 60


@dataclass(frozen=True)
class WarningConfig:
    minutes: int
    message: str

    @property
    def threshold_seconds(self) -> int:
        return self.minutes * 60


@dataclass(frozen=True)
class PauseLogEntry:
    time_of_day: str
    duration_seconds: int

    def encode(self) -> str:
        return f"{self.time_of_day}:{self.duration_seconds}s"

    @classmethod
    def parse(cls, raw: str) -> "PauseLogEntry | None":
        raw = raw.strip()
        if not raw:
            return None
        time_part, sep, duration_part = raw.rpartition(":")
        if not sep or not duration_part.endswith("s"):
            return None
        try:
            duration = int(duration_part[:-1])
        except ValueError:
            return None
        return cls(time_of_day=time_part, duration_seconds=duration)


class BlockedKind(str, Enum):
    DISABLED = "disabled"
    TIME_TOO_LOW = "time_too_low"
    BUDGET_EXHAUSTED = "budget_exhausted"
    COOLDOWN_ACTIVE = "cooldown_active"
    MIN_ACTIVE_TIME_NOT_MET = "min_active_time_not_met"


@dataclass(frozen=True)
class BlockedReason:
    """Why a pause cannot start right now. Callers render it, nothing raises."""

    kind: BlockedKind
    seconds_remaining: int = 0

    def describe(self) -> str:
        if self.kind is BlockedKind.DISABLED:
            return "Pause feature is disabled"
        if self.kind is BlockedKind.TIME_TOO_LOW:
            return "Time is too low to pause"
        if self.kind is BlockedKind.BUDGET_EXHAUSTED:
            return "Daily pause budget exhausted"
        if self.kind is BlockedKind.COOLDOWN_ACTIVE:
            return f"Cooldown active ({self.seconds_remaining} seconds remaining)"
        return f"Need {self.seconds_remaining} more seconds of active time"

    def menu_label(self) -> str:
        if self.kind is BlockedKind.BUDGET_EXHAUSTED:
            return "Pause (Budget used)"
        if self.kind is BlockedKind.COOLDOWN_ACTIVE:
            return f"Pause ({minutes_rounded_up(self.seconds_remaining)}m cooldown)"
        if self.kind is BlockedKind.MIN_ACTIVE_TIME_NOT_MET:
            return f"Pause (wait {minutes_rounded_up(self.seconds_remaining)}m)"
        if self.kind is BlockedKind.TIME_TOO_LOW:
            return "Pause (Time too low)"
        return "Pause (Disabled)"


@dataclass(frozen=True)
class ToggleOutcome:
    paused: bool
    reason: BlockedReason | None = None
    authorized: bool = True

    @property
    def ok(self) -> bool:
        return self.authorized and self.reason is None


@dataclass(frozen=True)
class StatusSnapshot:
    remaining_seconds: int
    blocked: bool
    paused: bool
    pause_remaining_seconds: int
    pause_budget_remaining_seconds: int
    daily_limit_minutes: int
    session_active_seconds: int
    day: str | None


@dataclass(frozen=True)
class HistorySnapshot:
    day: str
    pause_used_seconds: int
    daily_budget_minutes: int
    entries: list[PauseLogEntry] = field(default_factory=list)
