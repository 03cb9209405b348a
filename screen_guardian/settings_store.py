import os
import json
import logging
import threading

from .logging_setup import get_logger
from .utils import ensure_dir


class SettingsStore:
    """Durable string-to-string mapping kept in a JSON file.

    Every write goes straight to disk. A failed write is logged and the
    in-memory value is kept, so the process carries on with what it has.
    """

    def __init__(self, path: str, logger: logging.Logger | None = None):
        self._path = path
        self._logger = logger or get_logger()
        self._lock = threading.Lock()
        # Held from snapshot to replace so the newest snapshot lands last
        self._write_lock = threading.Lock()
        self._values: dict[str, str] = {}

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> None:
        ensure_dir(os.path.dirname(os.path.abspath(self._path)))
        if not os.path.exists(self._path):
            return
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            self._logger.exception("Settings load failed, starting with defaults")
            return
        if not isinstance(data, dict):
            self._logger.warning(f"Settings file {self._path} is not an object, ignoring it")
            return
        cleaned = {str(k): str(v) for k, v in data.items() if v is not None}
        with self._lock:
            self._values = cleaned

    def save(self) -> bool:
        with self._write_lock:
            with self._lock:
                data = dict(self._values)
            try:
                ensure_dir(os.path.dirname(os.path.abspath(self._path)))
                tmp_path = self._path + ".tmp"
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, sort_keys=True)
                os.replace(tmp_path, self._path)
            except OSError:
                self._logger.exception("Settings save failed")
                return False
        return True

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> bool:
        with self._lock:
            self._values[key] = str(value)
        return self.save()

    def set_many(self, values: dict[str, str]) -> bool:
        if not values:
            return True
        with self._lock:
            for k, v in values.items():
                self._values[k] = str(v)
        return self.save()

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._values

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._values)
