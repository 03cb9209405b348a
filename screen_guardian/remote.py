import logging

from .config import REMOTE_MAX_EXTEND_MINUTES
from .controller import ScreenTimeController
from .logging_setup import get_logger
from .settings import Settings
from .utils import seconds_to_mmss

UNAUTHORIZED_REPLY = "Unauthorized. This bot is configured for a specific user."
NO_ADMIN_REPLY = "No admin configured. Please set your chat ID in settings."
DISABLED_REPLY = "Remote control is disabled."

COMMANDS = {
    "start": "Start the bot",
    "status": "Show remaining time and status",
    "time": "Quick time check",
    "extend": "Extend time by minutes (e.g., /extend 30)",
    "pause": "Pause the timer",
    "resume": "Resume the timer",
    "history": "Show today's pause activity",
    "chatid": "Get your chat ID for setup",
    "help": "Show this help message",
}

# Answered for anyone so a new parent can find their identity
_OPEN_COMMANDS = frozenset(["start", "chatid"])


def _status_marker(remaining: int) -> str:
    if remaining <= 60:
        return "🔴"
    if remaining <= 300:
        return "🟠"
    return "🟢"


def help_text() -> str:
    lines = ["Screen Time Guardian commands:"]
    lines.extend(f"/{name} - {description}" for name, description in COMMANDS.items())
    return "\n".join(lines)


class RemoteCommands:
    """Text front end for a remote channel.

    Every command except ``start`` and ``chatid`` requires the caller to be
    the configured admin identity; anyone else gets a fixed reply and
    nothing changes.
    """

    def __init__(self, controller: ScreenTimeController, settings: Settings, logger: logging.Logger | None = None):
        self._controller = controller
        self._settings = settings
        self._logger = logger or get_logger()

    def rejection_for(self, sender_id: str | int) -> str | None:
        if not self._settings.remote_enabled():
            return DISABLED_REPLY
        admin_id = self._settings.remote_admin_id()
        if admin_id is None:
            return NO_ADMIN_REPLY
        if str(sender_id).strip() != admin_id:
            return UNAUTHORIZED_REPLY
        return None

    def handle_text(self, sender_id: str | int, text: str) -> str | None:
        text = (text or "").strip()
        if not text.startswith("/"):
            return None
        head, _, argument = text[1:].partition(" ")
        command = head.split("@", 1)[0].lower()
        return self.handle(sender_id, command, argument.strip())

    def handle(self, sender_id: str | int, command: str, argument: str = "") -> str:
        command = command.lower()
        self._logger.info(f"Remote command {command!r} from {sender_id}")

        if command not in COMMANDS:
            return f"Unknown command: /{command}\nUse /help to see available commands."

        if command == "start":
            return (
                "Welcome to Screen Time Guardian!\n\n"
                f"Your chat ID is: {sender_id}\n\n"
                "Use /help to see available commands."
            )
        if command == "chatid":
            return f"Your chat ID is: {sender_id}"

        rejection = self.rejection_for(sender_id)
        if rejection is not None:
            self._logger.warning(f"Remote command {command!r} rejected for {sender_id}")
            return rejection

        if command == "status":
            return self.status()
        if command == "time":
            return self.time()
        if command == "extend":
            return self.extend(argument)
        if command == "pause":
            return self.pause()
        if command == "resume":
            return self.resume()
        if command == "history":
            return self.history()
        return help_text()

    def status(self) -> str:
        snap = self._controller.status()
        if snap.paused:
            pause_line = f"⏸ Paused: Yes ({seconds_to_mmss(snap.pause_remaining_seconds)} left)"
        else:
            pause_line = "⏸ Paused: No"
        lines = [
            "Screen Time Status",
            "━━━━━━━━━━━━━━━━━━",
            f"{_status_marker(snap.remaining_seconds)} Remaining: {seconds_to_mmss(snap.remaining_seconds)}",
            pause_line,
            f"🔋 Pause budget: {snap.pause_budget_remaining_seconds // 60} min",
        ]
        if snap.blocked:
            lines.append("🔒 Screen is blocked")
        return "\n".join(lines)

    def time(self) -> str:
        remaining = self._controller.remaining_seconds
        return f"{_status_marker(remaining)} {seconds_to_mmss(remaining)} remaining"

    def extend(self, argument: str) -> str:
        try:
            minutes = int(argument)
        except ValueError:
            return "Please specify a positive number of minutes"
        if minutes <= 0:
            return "Please specify a positive number of minutes"
        if minutes > REMOTE_MAX_EXTEND_MINUTES:
            return f"Maximum extension is {REMOTE_MAX_EXTEND_MINUTES} minutes"

        remaining = self._controller.extend_time(minutes)
        return f"✅ Extended by {minutes} minutes\nNew remaining: {seconds_to_mmss(remaining)}"

    def pause(self) -> str:
        if self._controller.is_paused:
            return "⏸ Timer is already paused. Use /resume to continue."
        outcome = self._controller.pause()
        if outcome.reason is not None:
            return f"Cannot pause: {outcome.reason.describe()}"
        return "⏸ Timer paused"

    def resume(self) -> str:
        if not self._controller.resume():
            return "▶️ Timer is not paused"
        return "▶️ Timer resumed"

    def history(self) -> str:
        snap = self._controller.history()
        lines = [
            "📊 Today's Activity",
            "━━━━━━━━━━━━━━━━━━",
            f"Pause used: {snap.pause_used_seconds // 60} / {snap.daily_budget_minutes} min",
            "",
        ]
        if not snap.entries:
            lines.append("No pause events today")
        else:
            lines.append("Pause log:")
            lines.extend(f"• {entry.encode()}" for entry in snap.entries)
        return "\n".join(lines)
