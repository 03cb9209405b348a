import logging
from dataclasses import dataclass
from typing import Iterable, Protocol


class Notifier(Protocol):
    def show_warning(self, message: str, duration_seconds: int) -> None: ...

    def show_blocking(self, message: str) -> None: ...

    def hide_blocking(self) -> None: ...

    def refresh_countdown_display(self) -> None: ...

    def terminate_session(self) -> None: ...


# Effects are produced by state transitions and applied later, outside the state lock.

@dataclass(frozen=True)
class ShowWarning:
    message: str
    duration_seconds: int

    def apply(self, notifier: Notifier) -> None:
        notifier.show_warning(self.message, self.duration_seconds)


@dataclass(frozen=True)
class ShowBlocking:
    message: str

    def apply(self, notifier: Notifier) -> None:
        notifier.show_blocking(self.message)


@dataclass(frozen=True)
class HideBlocking:
    def apply(self, notifier: Notifier) -> None:
        notifier.hide_blocking()


@dataclass(frozen=True)
class RefreshCountdown:
    def apply(self, notifier: Notifier) -> None:
        notifier.refresh_countdown_display()


@dataclass(frozen=True)
class TerminateSession:
    def apply(self, notifier: Notifier) -> None:
        notifier.terminate_session()


Effect = ShowWarning | ShowBlocking | HideBlocking | RefreshCountdown | TerminateSession


def dispatch(effects: Iterable[Effect], notifier: Notifier, logger: logging.Logger) -> None:
    for effect in effects:
        try:
            effect.apply(notifier)
        except Exception:
            logger.exception(f"Notifier failed on {effect!r}")


class NullNotifier:
    def show_warning(self, message: str, duration_seconds: int) -> None:
        pass

    def show_blocking(self, message: str) -> None:
        pass

    def hide_blocking(self) -> None:
        pass

    def refresh_countdown_display(self) -> None:
        pass

    def terminate_session(self) -> None:
        pass
