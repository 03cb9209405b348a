import threading
from typing import Callable

import pystray
from PIL import Image, ImageDraw

from .logging_setup import get_logger


class TrayController:
    def __init__(
        self,
        title: str,
        pause_label: Callable[[], str],
        on_toggle_pause: Callable[[], None],
        on_extend: Callable[[int], None],
        extend_presets: tuple[int, ...],
        on_reset: Callable[[], None],
        on_stats: Callable[[], None],
        on_settings: Callable[[], None],
        on_show: Callable[[], None],
        on_quit: Callable[[], None],
    ):
        self._title = title
        self._pause_label = pause_label
        self._on_toggle_pause = on_toggle_pause
        self._on_extend = on_extend
        self._extend_presets = extend_presets
        self._on_reset = on_reset
        self._on_stats = on_stats
        self._on_settings = on_settings
        self._on_show = on_show
        self._on_quit = on_quit

        self._icon = None
        self._thread = None
        self._running = False

    def _make_icon_image(self) -> Image.Image:
        img = Image.new("RGB", (64, 64), color=(40, 40, 40))
        draw = ImageDraw.Draw(img)
        draw.ellipse((8, 8, 56, 56), fill=(255, 153, 51))
        draw.line((32, 32, 32, 16), fill=(245, 245, 245), width=5)
        draw.line((32, 32, 44, 38), fill=(245, 245, 245), width=5)
        return img

    def _extend_item(self, minutes: int) -> pystray.MenuItem:
        def on_click(icon, item):
            self._on_extend(minutes)

        return pystray.MenuItem(f"Extend +{minutes} min", on_click)

    def _build_menu(self) -> pystray.Menu:
        def pause_text(item):
            return self._pause_label()

        def pause_enabled(item):
            label = self._pause_label()
            return label.startswith("Pause Timer") or label == "Resume Timer"

        return pystray.Menu(
            pystray.MenuItem("Today's Stats...", lambda icon, item: self._on_stats()),
            pystray.MenuItem("Settings...", lambda icon, item: self._on_settings()),
            pystray.Menu.SEPARATOR,
            *[self._extend_item(m) for m in self._extend_presets],
            pystray.Menu.SEPARATOR,
            pystray.MenuItem(pause_text, lambda icon, item: self._on_toggle_pause(), enabled=pause_enabled),
            pystray.MenuItem("Reset Timer", lambda icon, item: self._on_reset()),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem("Show Countdown", lambda icon, item: self._on_show(), default=True),
            pystray.MenuItem("Quit", lambda icon, item: self._on_quit()),
        )

    def ensure_running(self) -> None:
        if self._icon is not None and self._running:
            return

        self._icon = pystray.Icon("ScreenGuardian", self._make_icon_image(), self._title, self._build_menu())

        def run_icon():
            self._running = True
            try:
                self._icon.run()
            finally:
                self._running = False

        self._thread = threading.Thread(target=run_icon, daemon=True)
        self._thread.start()

    def refresh(self) -> None:
        if self._icon is not None:
            self._icon.update_menu()

    def stop(self) -> None:
        if self._icon is None:
            return
        try:
            self._icon.stop()
        except Exception:
            get_logger().exception("Tray icon stop failed")
