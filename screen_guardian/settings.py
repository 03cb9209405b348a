import logging

from .config import (
    DEFAULT_SETTINGS,
    FALLBACK_LIMIT_MINUTES,
    FALLBACK_WARNING_MINUTES,
    PASSCODE_LENGTH,
    WEEKDAY_KEYS,
)
from .logging_setup import get_logger
from .settings_store import SettingsStore
from .state import PauseConfig, PauseLogEntry, WarningConfig

LAST_PAUSE_END_KEY = "pause_last_end_timestamp"

_NUMERIC_KEYS = frozenset(
    list(WEEKDAY_KEYS)
    + [
        "warning1_minutes",
        "warning2_minutes",
        "pause_daily_budget",
        "pause_max_duration",
        "pause_cooldown",
        "pause_min_active_time",
    ]
)
_FLAG_KEYS = frozenset(["pause_enabled", "pause_requires_passcode", "remote_enabled"])
_TEXT_KEYS = frozenset(["warning1_message", "warning2_message", "blocking_message", "remote_admin_id"])


class InvalidSettingError(ValueError):
    pass


def _dated(name: str, day: str) -> str:
    return f"{name}_{day}"


class Settings:
    """Typed view over the settings store.

    Anything missing or unparseable falls back to ``DEFAULT_SETTINGS``.
    Date-scoped counters take the ``YYYY-MM-DD`` day explicitly.
    """

    def __init__(self, store: SettingsStore, logger: logging.Logger | None = None):
        self._store = store
        self._logger = logger or get_logger()

    @property
    def store(self) -> SettingsStore:
        return self._store

    def initialize_defaults(self) -> None:
        missing = {k: v for k, v in DEFAULT_SETTINGS.items() if not self._store.contains(k)}
        if missing:
            self._logger.info(f"Writing default settings: {sorted(missing)}")
            self._store.set_many(missing)

    # Raw access

    def get_text(self, key: str) -> str:
        value = self._store.get(key)
        if value is None:
            return DEFAULT_SETTINGS.get(key, "")
        return value

    def get_int(self, key: str, default: int | None = None) -> int:
        if default is None:
            default = int(DEFAULT_SETTINGS.get(key, "0") or 0)
        raw = self._store.get(key)
        if raw is None:
            return default
        try:
            return int(raw.strip())
        except ValueError:
            self._logger.warning(f"Setting {key}={raw!r} is not an integer, using {default}")
            return default

    def get_flag(self, key: str) -> bool:
        return self.get_text(key).strip() == "1"

    # Configuration

    def passcode(self) -> str:
        return self.get_text("passcode")

    def daily_limit_minutes(self, weekday: int) -> int:
        if not 0 <= weekday < len(WEEKDAY_KEYS):
            return FALLBACK_LIMIT_MINUTES
        return max(0, self.get_int(WEEKDAY_KEYS[weekday], FALLBACK_LIMIT_MINUTES))

    def warnings(self) -> list[WarningConfig]:
        result = []
        for n in (1, 2):
            minutes = self.get_int(f"warning{n}_minutes", FALLBACK_WARNING_MINUTES)
            message = self._store.get(f"warning{n}_message")
            if message is None:
                message = f"{minutes} minutes remaining!"
            result.append(WarningConfig(minutes=minutes, message=message))
        return result

    def blocking_message(self) -> str:
        return self.get_text("blocking_message")

    def pause_config(self) -> PauseConfig:
        return PauseConfig(
            enabled=self.get_flag("pause_enabled"),
            daily_budget_minutes=max(0, self.get_int("pause_daily_budget")),
            max_duration_minutes=max(0, self.get_int("pause_max_duration")),
            cooldown_minutes=max(0, self.get_int("pause_cooldown")),
            min_active_time_minutes=max(0, self.get_int("pause_min_active_time")),
        )

    def pause_requires_passcode(self) -> bool:
        return self.get_flag("pause_requires_passcode")

    def remote_enabled(self) -> bool:
        return self.get_flag("remote_enabled")

    def remote_admin_id(self) -> str | None:
        value = self.get_text("remote_admin_id").strip()
        return value or None

    # Date-scoped counters

    def load_remaining_time(self, day: str) -> int | None:
        raw = self._store.get(_dated("remaining_time", day))
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            self._logger.warning(f"Stored remaining time {raw!r} for {day} is unreadable")
            return None

    def save_remaining_time(self, day: str, seconds: int) -> None:
        self._store.set(_dated("remaining_time", day), str(int(seconds)))

    def load_session_active(self, day: str) -> int:
        return max(0, self.get_int(_dated("session_active", day), 0))

    def save_session_active(self, day: str, seconds: int) -> None:
        self._store.set(_dated("session_active", day), str(int(seconds)))

    def save_countdown(self, day: str, remaining_seconds: int, session_active_seconds: int) -> None:
        self._store.set_many(
            {
                _dated("remaining_time", day): str(int(remaining_seconds)),
                _dated("session_active", day): str(int(session_active_seconds)),
            }
        )

    def pause_used(self, day: str) -> int:
        return max(0, self.get_int(_dated("pause_used", day), 0))

    def save_pause_used(self, day: str, seconds: int) -> None:
        self._store.set(_dated("pause_used", day), str(int(seconds)))

    def pause_log(self, day: str) -> list[PauseLogEntry]:
        raw = self._store.get(_dated("pause_log", day)) or ""
        entries = []
        for chunk in raw.split(","):
            entry = PauseLogEntry.parse(chunk)
            if entry is not None:
                entries.append(entry)
        return entries

    def append_pause_log(self, day: str, entry: PauseLogEntry) -> None:
        key = _dated("pause_log", day)
        existing = self._store.get(key) or ""
        updated = f"{existing},{entry.encode()}" if existing else entry.encode()
        self._store.set(key, updated)

    def last_pause_end(self) -> int:
        return self.get_int(LAST_PAUSE_END_KEY, 0)

    def save_last_pause_end(self, timestamp: int) -> None:
        self._store.set(LAST_PAUSE_END_KEY, str(int(timestamp)))

    # Edits

    def _check_new_passcode(self, current: str, new: str, confirm: str) -> None:
        if current != self.passcode():
            raise InvalidSettingError("Current passcode is incorrect")
        if len(new) != PASSCODE_LENGTH or not new.isdigit():
            raise InvalidSettingError(f"New passcode must be exactly {PASSCODE_LENGTH} digits")
        if new != confirm:
            raise InvalidSettingError("New passcode and confirmation do not match")

    def change_passcode(self, current: str, new: str, confirm: str) -> None:
        self._check_new_passcode(current, new, confirm)
        self._store.set("passcode", new)
        self._logger.info("Passcode changed")

    def _clean_edits(self, values: dict[str, str]) -> dict[str, str]:
        cleaned: dict[str, str] = {}
        for key, value in values.items():
            value = str(value).strip()
            if key in _NUMERIC_KEYS:
                if not value.isdigit():
                    raise InvalidSettingError(f"{key} must be a non-negative whole number")
                cleaned[key] = str(int(value))
            elif key in _FLAG_KEYS:
                if value not in ("0", "1"):
                    raise InvalidSettingError(f"{key} must be 0 or 1")
                cleaned[key] = value
            elif key in _TEXT_KEYS:
                cleaned[key] = value
            elif key == "passcode":
                raise InvalidSettingError("Use change_passcode to change the passcode")
            else:
                raise InvalidSettingError(f"Unknown setting {key}")
        return cleaned

    def apply_edits(self, values: dict[str, str]) -> None:
        """Validate every edit first, then write them together."""
        cleaned = self._clean_edits(values)
        self._store.set_many(cleaned)
        self._logger.info(f"Settings updated: {sorted(cleaned)}")

    def editable_values(self) -> dict[str, str]:
        """Current value of every key the settings form may edit."""
        keys = sorted(_NUMERIC_KEYS | _FLAG_KEYS | _TEXT_KEYS)
        return {key: self.get_text(key) for key in keys}

    def submit_form(self, values: dict[str, str], current: str = "", new: str = "", confirm: str = "") -> bool:
        """Apply the settings form.

        The passcode only changes when ``new`` or ``confirm`` is filled in.
        Every field is validated before anything is written. Returns whether
        the passcode changed.
        """
        change = bool(new or confirm)
        self._clean_edits(values)
        if change:
            self._check_new_passcode(current, new, confirm)
        self.apply_edits(values)
        if change:
            self.change_passcode(current, new, confirm)
        return change
