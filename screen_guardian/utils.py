import os
import datetime


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def day_key(moment: datetime.datetime | datetime.date) -> str:
    if isinstance(moment, datetime.datetime):
        moment = moment.date()
    return moment.isoformat()


def time_of_day(moment: datetime.datetime) -> str:
    return moment.strftime("%H:%M:%S")


def seconds_to_mmss(seconds: float) -> str:
    seconds = max(0, int(seconds))
    m, s = divmod(seconds, 60)
    return f"{m}:{s:02d}"


def format_compact(seconds: int) -> str:
    """Countdown readout: ``h:mm:ss`` above an hour, ``m:ss`` below, ``--:--`` when unset."""
    if seconds < 0:
        return "--:--"
    h, rest = divmod(int(seconds), 3600)
    m, s = divmod(rest, 60)
    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m}:{s:02d}"


def format_long(seconds: int) -> str:
    if seconds < 0:
        return "--:--"
    h, rest = divmod(int(seconds), 3600)
    m, s = divmod(rest, 60)
    if h > 0:
        return f"{h}h {m}m {s}s"
    if m > 0:
        return f"{m}m {s}s"
    return f"{s}s"


def minutes_rounded_up(seconds: int) -> int:
    return (max(0, int(seconds)) + 59) // 60
