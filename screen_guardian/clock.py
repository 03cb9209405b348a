import time
import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime.datetime:
        """Current local date and time."""

    def timestamp(self) -> int:
        """Whole epoch seconds, used for cooldown arithmetic across restarts."""


class SystemClock:
    def now(self) -> datetime.datetime:
        return datetime.datetime.now()

    def timestamp(self) -> int:
        return int(time.time())
