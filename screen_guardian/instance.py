import os
import logging

import psutil

from .logging_setup import get_logger
from .utils import ensure_dir


class SingleInstance:
    """PID file guard so only one enforcer runs per user."""

    def __init__(self, pid_path: str, logger: logging.Logger | None = None):
        self._path = pid_path
        self._logger = logger or get_logger()
        self._held = False

    def _read_pid(self) -> int | None:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                return int(f.read().strip())
        except (OSError, ValueError):
            return None

    def _is_running(self, pid: int) -> bool:
        if pid == os.getpid() or not psutil.pid_exists(pid):
            return False
        try:
            other = psutil.Process(pid)
            return other.name() == psutil.Process().name()
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            return False

    def acquire(self) -> bool:
        pid = self._read_pid()
        if pid is not None and self._is_running(pid):
            self._logger.warning(f"Another instance is running with pid {pid}")
            return False
        ensure_dir(os.path.dirname(os.path.abspath(self._path)))
        with open(self._path, "w", encoding="utf-8") as f:
            f.write(str(os.getpid()))
        self._held = True
        return True

    def release(self) -> None:
        if not self._held:
            return
        self._held = False
        if self._read_pid() != os.getpid():
            return
        try:
            os.remove(self._path)
        except OSError:
            self._logger.exception("Could not remove pid file")
