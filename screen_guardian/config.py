import os

APP_TITLE = "Screen Time Guardian"
APPDATA_DIR = os.path.join(os.getenv("APPDATA") or os.path.expanduser("~"), "ScreenGuardian")

SETTINGS_FILE = os.path.join(APPDATA_DIR, "settings.json")
PID_FILE = os.path.join(APPDATA_DIR, "screen_guardian.pid")

LOG_DIR = os.path.join(APPDATA_DIR, "logs")
LOG_FILE = os.path.join(LOG_DIR, "screen_guardian.log")
LOGGER_NAME = "ScreenGuardian"

TICK_INTERVAL_SEC = 1.0
PERSIST_EVERY_SEC = 30
WARNING_DISPLAY_SEC = 10

# Pausing is refused below this many seconds of remaining time
MIN_PAUSE_REMAINING_SEC = 60

REMOTE_MAX_EXTEND_MINUTES = 120
BLOCKING_EXTEND_PRESETS = (15, 30, 60)
TRAY_EXTEND_PRESETS = (15, 45)

# Countdown readout colours
COLOR_TIME_OK = "#ffffff"
COLOR_TIME_LOW = "#ff9933"
COLOR_TIME_CRITICAL = "#ff4444"
COLOR_TIME_PAUSED = "#66ccff"
LOW_TIME_SEC = 300
CRITICAL_TIME_SEC = 60

WEEKDAY_KEYS = (
    "limit_monday",
    "limit_tuesday",
    "limit_wednesday",
    "limit_thursday",
    "limit_friday",
    "limit_saturday",
    "limit_sunday",
)
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

DEFAULT_SETTINGS = {
    "passcode": "0000",
    "limit_monday": "120",
    "limit_tuesday": "120",
    "limit_wednesday": "120",
    "limit_thursday": "120",
    "limit_friday": "180",
    "limit_saturday": "240",
    "limit_sunday": "240",
    "warning1_minutes": "10",
    "warning1_message": "10 minutes remaining!",
    "warning2_minutes": "5",
    "warning2_message": "5 minutes remaining!",
    "blocking_message": "Your screen time limit has been reached.",
    "pause_enabled": "1",
    "pause_daily_budget": "45",
    "pause_max_duration": "20",
    "pause_cooldown": "15",
    "pause_min_active_time": "10",
    "pause_requires_passcode": "0",
    "remote_enabled": "0",
    "remote_admin_id": "",
}

PASSCODE_LENGTH = 4

# Used when a key is missing from the store or unreadable
FALLBACK_LIMIT_MINUTES = 120
FALLBACK_WARNING_MINUTES = 5
