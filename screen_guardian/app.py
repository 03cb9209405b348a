import platform
import subprocess

import customtkinter as ctk

from .audio import trigger_blocking_sound, trigger_passcode_error_sound, trigger_warning_sound
from .config import (
    APP_TITLE,
    APPDATA_DIR,
    BLOCKING_EXTEND_PRESETS,
    COLOR_TIME_CRITICAL,
    COLOR_TIME_LOW,
    COLOR_TIME_OK,
    COLOR_TIME_PAUSED,
    CRITICAL_TIME_SEC,
    LOW_TIME_SEC,
    PID_FILE,
    SETTINGS_FILE,
    TRAY_EXTEND_PRESETS,
    WEEKDAY_KEYS,
    WEEKDAY_NAMES,
)
from .instance import SingleInstance
from .logging_setup import setup_logger
from .services import build_services
from .settings import InvalidSettingError
from .tray import TrayController
from .utils import ensure_dir, format_compact, format_long, seconds_to_mmss


ctk.set_appearance_mode("Dark")
ctk.set_default_color_theme("blue")


class CtkNotifier:
    """Notifier that hops every call onto the Tk thread."""

    def __init__(self, app: "ScreenGuardianApp"):
        self._app = app

    def show_warning(self, message: str, duration_seconds: int) -> None:
        self._app.root.after(0, lambda: self._app.show_warning(message, duration_seconds))

    def show_blocking(self, message: str) -> None:
        self._app.root.after(0, lambda: self._app.show_blocking(message))

    def hide_blocking(self) -> None:
        self._app.root.after(0, self._app.hide_blocking)

    def refresh_countdown_display(self) -> None:
        self._app.root.after(0, self._app.refresh_countdown)

    def terminate_session(self) -> None:
        self._app.root.after(0, self._app.shutdown_machine)


def countdown_color(seconds: int, paused: bool) -> str:
    if paused:
        return COLOR_TIME_PAUSED
    if 0 <= seconds <= CRITICAL_TIME_SEC:
        return COLOR_TIME_CRITICAL
    if 0 <= seconds <= LOW_TIME_SEC:
        return COLOR_TIME_LOW
    return COLOR_TIME_OK


class ScreenGuardianApp:
    def __init__(self):
        ensure_dir(APPDATA_DIR)

        self.logger = setup_logger()
        self.logger.info("App start")

        self.instance = SingleInstance(PID_FILE, self.logger)
        if not self.instance.acquire():
            raise SystemExit(f"{APP_TITLE} is already running.")

        services = build_services(SETTINGS_FILE, self.logger)
        self.settings = services.settings
        self.controller = services.controller
        # A chat transport attaches here and forwards (sender, text) to handle_text
        self.remote = services.remote

        self.root = ctk.CTk()
        self.root.title(APP_TITLE)
        self.root.overrideredirect(True)
        self.root.attributes("-topmost", True)
        self.root.geometry(f"120x40+{self.root.winfo_screenwidth() - 140}+20")

        self.countdown_label = ctk.CTkLabel(self.root, text="--:--", font=("Consolas", 22, "bold"))
        self.countdown_label.pack(expand=True, fill="both")

        self._blocking_window = None
        self._passcode_entry = None
        self._passcode_error_label = None
        self._blocking_time_label = None
        self._settings_window = None

        self.controller.set_notifier(CtkNotifier(self))

        self.tray = TrayController(
            title=APP_TITLE,
            pause_label=self.controller.pause_menu_label,
            on_toggle_pause=lambda: self.root.after(0, self.toggle_pause),
            on_extend=lambda minutes: self.root.after(0, lambda: self.extend_from_tray(minutes)),
            extend_presets=TRAY_EXTEND_PRESETS,
            on_reset=lambda: self.root.after(0, self.reset_timer),
            on_stats=lambda: self.root.after(0, self.show_stats),
            on_settings=lambda: self.root.after(0, self.show_settings),
            on_show=lambda: self.root.after(0, self.show_countdown),
            on_quit=lambda: self.root.after(0, self.quit_app),
        )

    # Countdown readout

    def refresh_countdown(self) -> None:
        snap = self.controller.status()
        if snap.paused:
            text = f"II {format_compact(snap.pause_remaining_seconds)}"
        else:
            text = format_compact(snap.remaining_seconds)
        self.countdown_label.configure(text=text, text_color=countdown_color(snap.remaining_seconds, snap.paused))
        if self._blocking_time_label is not None:
            self._blocking_time_label.configure(text=f"Remaining: {format_long(snap.remaining_seconds)}")

    def show_countdown(self) -> None:
        if self._blocking_window is None:
            self.root.deiconify()
            self.root.lift()

    # Warning popup

    def show_warning(self, message: str, duration_seconds: int) -> None:
        self.logger.info(f"Showing warning for {duration_seconds}s")
        popup = ctk.CTkToplevel(self.root)
        popup.overrideredirect(True)
        popup.attributes("-topmost", True)
        width, height = 420, 120
        x = (popup.winfo_screenwidth() - width) // 2
        popup.geometry(f"{width}x{height}+{x}+60")
        ctk.CTkLabel(popup, text=message, font=("Roboto", 20, "bold"), wraplength=380).pack(expand=True, fill="both")
        popup.after(duration_seconds * 1000, popup.destroy)
        try:
            trigger_warning_sound()
        except Exception:
            self.logger.exception("Warning sound failed")

    # Blocking screen

    def show_blocking(self, message: str) -> None:
        if self._blocking_window is not None:
            return
        self.logger.info("Showing blocking screen")
        self.root.withdraw()

        win = ctk.CTkToplevel(self.root, fg_color="#001a33")
        win.overrideredirect(True)
        win.attributes("-topmost", True)
        win.geometry(f"{win.winfo_screenwidth()}x{win.winfo_screenheight()}+0+0")
        win.protocol("WM_DELETE_WINDOW", lambda: None)

        panel = ctk.CTkFrame(win, fg_color="#002244", corner_radius=16)
        panel.place(relx=0.5, rely=0.5, anchor="center")

        ctk.CTkLabel(panel, text="Time's Up!", font=("Roboto", 34, "bold"), text_color="#ff9933").pack(
            padx=40, pady=(30, 10)
        )
        ctk.CTkLabel(panel, text=message, font=("Roboto", 18), wraplength=420).pack(padx=40, pady=(0, 10))

        self._blocking_time_label = ctk.CTkLabel(panel, text="", text_color="#cccccc")
        self._blocking_time_label.pack(pady=(0, 14))

        extend_row = ctk.CTkFrame(panel, fg_color="transparent")
        extend_row.pack(pady=(0, 14))
        for minutes in BLOCKING_EXTEND_PRESETS:
            ctk.CTkButton(
                extend_row,
                text=f"+{minutes} min",
                width=100,
                command=lambda m=minutes: self._blocking_extend(m),
            ).pack(side="left", padx=10)

        self._passcode_entry = ctk.CTkEntry(panel, show="*", width=200, justify="center", placeholder_text="Passcode")
        self._passcode_entry.pack(pady=(0, 6))
        self._passcode_entry.bind("<Return>", lambda event: self._blocking_unlock())

        self._passcode_error_label = ctk.CTkLabel(panel, text="", text_color="#ff4444")
        self._passcode_error_label.pack()

        ctk.CTkButton(panel, text="Unlock", width=200, command=self._blocking_unlock).pack(pady=(6, 6))
        ctk.CTkButton(
            panel,
            text="Shut down",
            width=200,
            fg_color="#7f8c8d",
            hover_color="#95a5a6",
            command=self._blocking_shutdown,
        ).pack(pady=(0, 30))

        self._blocking_window = win
        self._reassert_topmost()
        self.refresh_countdown()
        self._passcode_entry.focus_set()
        try:
            trigger_blocking_sound()
        except Exception:
            self.logger.exception("Blocking sound failed")

    def _reassert_topmost(self) -> None:
        win = self._blocking_window
        if win is None:
            return
        win.attributes("-topmost", True)
        win.lift()
        win.after(500, self._reassert_topmost)

    def hide_blocking(self) -> None:
        if self._blocking_window is None:
            return
        self.logger.info("Hiding blocking screen")
        win = self._blocking_window
        self._blocking_window = None
        self._passcode_entry = None
        self._passcode_error_label = None
        self._blocking_time_label = None
        self.controller.clear_passcode_error()
        win.destroy()
        self.root.deiconify()

    def _take_passcode(self) -> str:
        code = self._passcode_entry.get() if self._passcode_entry is not None else ""
        if self._passcode_entry is not None:
            self._passcode_entry.delete(0, "end")
        return code

    def _render_passcode_result(self, ok: bool) -> None:
        if ok or self._passcode_error_label is None:
            return
        self._passcode_error_label.configure(text="Incorrect passcode")
        try:
            trigger_passcode_error_sound()
        except Exception:
            self.logger.exception("Error sound failed")

    def _blocking_unlock(self) -> None:
        self._render_passcode_result(self.controller.unlock(self._take_passcode()))

    def _blocking_extend(self, minutes: int) -> None:
        self._render_passcode_result(self.controller.extend_with_auth(self._take_passcode(), minutes))

    def _blocking_shutdown(self) -> None:
        self._render_passcode_result(self.controller.shutdown_with_auth(self._take_passcode()))

    def shutdown_machine(self) -> None:
        self.logger.info("Shutting down the machine")
        system = platform.system()
        if system == "Windows":
            cmd = ["shutdown", "/s", "/t", "0"]
        elif system == "Darwin":
            cmd = ["osascript", "-e", 'tell app "System Events" to shut down']
        else:
            cmd = ["systemctl", "poweroff"]
        try:
            subprocess.run(cmd, check=False)
        except OSError:
            self.logger.exception("Shutdown command failed")

    # Tray actions

    def _ask_passcode(self, title: str) -> bool:
        dialog = ctk.CTkInputDialog(text="Enter passcode:", title=title)
        code = dialog.get_input()
        if code is None:
            return False
        if self.controller.verify_passcode(code):
            return True
        trigger_passcode_error_sound()
        return False

    def toggle_pause(self) -> None:
        code = None
        if not self.controller.is_paused and self.settings.pause_requires_passcode():
            dialog = ctk.CTkInputDialog(text="Enter passcode:", title="Pause")
            code = dialog.get_input()
            if code is None:
                return
        outcome = self.controller.toggle_pause(code)
        if outcome.reason is not None:
            self.logger.info(f"Tray pause refused: {outcome.reason.describe()}")
        self.tray.refresh()

    def extend_from_tray(self, minutes: int) -> None:
        if self._ask_passcode(f"Extend +{minutes} min"):
            self.controller.extend_time(minutes)

    def reset_timer(self) -> None:
        if self._ask_passcode("Reset Timer"):
            self.controller.reset_timer()

    def show_stats(self) -> None:
        if not self._ask_passcode("Today's Stats"):
            return
        snap = self.controller.status()
        hist = self.controller.history()
        lines = [
            f"Date: {hist.day}",
            f"Daily limit: {snap.daily_limit_minutes} min",
            f"Remaining: {format_long(snap.remaining_seconds)}",
            f"Active today: {seconds_to_mmss(snap.session_active_seconds)}",
            f"Pause used: {hist.pause_used_seconds // 60} / {hist.daily_budget_minutes} min",
            "",
            "Pause log:",
        ]
        if not hist.entries:
            lines.append("(no pauses today)")
        else:
            lines.extend(f"- {e.time_of_day}  {seconds_to_mmss(e.duration_seconds)}" for e in hist.entries)

        win = ctk.CTkToplevel(self.root)
        win.title("Today's Stats")
        win.geometry("360x380")
        win.attributes("-topmost", True)
        box = ctk.CTkTextbox(win)
        box.pack(fill="both", expand=True, padx=12, pady=12)
        box.insert("1.0", "\n".join(lines))
        box.configure(state="disabled")
        ctk.CTkButton(win, text="Close", command=win.destroy).pack(pady=(0, 12))

    # Settings form

    def show_settings(self) -> None:
        if self._settings_window is not None:
            self._settings_window.lift()
            return
        if not self._ask_passcode("Settings"):
            return

        current = self.settings.editable_values()
        win = ctk.CTkToplevel(self.root)
        win.title("Settings")
        win.geometry("460x640")
        win.attributes("-topmost", True)
        win.protocol("WM_DELETE_WINDOW", self._close_settings)

        form = ctk.CTkScrollableFrame(win)
        form.pack(fill="both", expand=True, padx=12, pady=(12, 6))
        form.grid_columnconfigure(1, weight=1)

        entries: dict[str, ctk.CTkEntry] = {}
        flags: dict[str, ctk.CTkCheckBox] = {}
        row = 0

        def section(title: str) -> None:
            nonlocal row
            ctk.CTkLabel(form, text=title, font=("Roboto", 15, "bold")).grid(
                row=row, column=0, columnspan=2, sticky="w", pady=(10, 4)
            )
            row += 1

        def entry(key: str, label: str, show: str = "") -> ctk.CTkEntry:
            nonlocal row
            ctk.CTkLabel(form, text=label).grid(row=row, column=0, sticky="w", padx=(0, 10), pady=2)
            field = ctk.CTkEntry(form, show=show)
            field.grid(row=row, column=1, sticky="ew", pady=2)
            if key in current:
                field.insert(0, current[key])
                entries[key] = field
            row += 1
            return field

        def flag(key: str, label: str) -> None:
            nonlocal row
            box = ctk.CTkCheckBox(form, text=label, onvalue="1", offvalue="0")
            if current.get(key) == "1":
                box.select()
            box.grid(row=row, column=0, columnspan=2, sticky="w", pady=2)
            flags[key] = box
            row += 1

        section("Daily limits (minutes)")
        for key, name in zip(WEEKDAY_KEYS, WEEKDAY_NAMES):
            entry(key, name)

        section("Warnings")
        for n in (1, 2):
            entry(f"warning{n}_minutes", f"Warning {n} at (min)")
            entry(f"warning{n}_message", f"Warning {n} message")
        entry("blocking_message", "Blocking message")

        section("Pause")
        flag("pause_enabled", "Allow pausing")
        flag("pause_requires_passcode", "Ask for passcode to pause")
        entry("pause_daily_budget", "Daily budget (min)")
        entry("pause_max_duration", "Max duration (min)")
        entry("pause_cooldown", "Cooldown (min)")
        entry("pause_min_active_time", "Min active time (min)")

        section("Remote control")
        flag("remote_enabled", "Enable remote commands")
        entry("remote_admin_id", "Admin chat ID")

        section("Change passcode (leave empty to keep)")
        current_code = entry("", "Current passcode", show="*")
        new_code = entry("", "New passcode", show="*")
        confirm_code = entry("", "Confirm passcode", show="*")

        error_label = ctk.CTkLabel(win, text="", text_color="#ff4444", wraplength=420)
        error_label.pack(padx=12)

        def save() -> None:
            values = {key: field.get() for key, field in entries.items()}
            values.update({key: box.get() for key, box in flags.items()})
            try:
                self.settings.submit_form(values, current_code.get(), new_code.get(), confirm_code.get())
            except InvalidSettingError as e:
                error_label.configure(text=str(e))
                trigger_passcode_error_sound()
                return
            self.tray.refresh()
            self.refresh_countdown()
            self._close_settings()

        buttons = ctk.CTkFrame(win, fg_color="transparent")
        buttons.pack(pady=(6, 12))
        ctk.CTkButton(buttons, text="Save", width=120, command=save).pack(side="left", padx=8)
        ctk.CTkButton(
            buttons,
            text="Cancel",
            width=120,
            fg_color="#7f8c8d",
            hover_color="#95a5a6",
            command=self._close_settings,
        ).pack(side="left", padx=8)

        self._settings_window = win

    def _close_settings(self) -> None:
        win = self._settings_window
        self._settings_window = None
        if win is not None:
            win.destroy()

    def quit_app(self) -> None:
        if not self._ask_passcode("Quit"):
            return
        self.logger.info("Quit requested")
        self.controller.stop()
        self.tray.stop()
        self.instance.release()
        self.root.destroy()

    def run(self) -> None:
        self.tray.ensure_running()
        self.controller.start()
        self.root.mainloop()
