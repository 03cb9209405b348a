import logging
from dataclasses import dataclass

from .clock import Clock
from .controller import ScreenTimeController
from .notifier import Notifier
from .remote import RemoteCommands
from .settings import Settings
from .settings_store import SettingsStore


@dataclass
class Services:
    store: SettingsStore
    settings: Settings
    controller: ScreenTimeController
    remote: RemoteCommands


def build_services(
    settings_file: str,
    logger: logging.Logger,
    notifier: Notifier | None = None,
    clock: Clock | None = None,
) -> Services:
    """Load the settings file and wire the controller and remote commands to it."""
    store = SettingsStore(settings_file, logger)
    store.load()
    settings = Settings(store, logger)
    settings.initialize_defaults()

    controller = ScreenTimeController(settings, notifier, clock=clock, logger=logger)
    remote = RemoteCommands(controller, settings, logger)
    logger.info(f"Services ready, remote commands {'on' if settings.remote_enabled() else 'off'}")
    return Services(store=store, settings=settings, controller=controller, remote=remote)
