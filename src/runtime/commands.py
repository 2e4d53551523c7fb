"""Dispatcher that maps typed command words onto cycle controller actions."""

from __future__ import annotations

import logging
import threading
from queue import Queue
from typing import Callable, Optional, TextIO

from app_config import AppConfig, AppConfigurationError
from pomodoro import InvalidTransitionError, PomodoroError

from .controller import CycleController

COMMAND_STATUS = "status"
COMMAND_QUIT = "quit"
COMMAND_HELP = "help"
COMMAND_RELOAD = "reload"

# Command word -> CycleController method name.
CONTROLLER_COMMANDS: dict[str, str] = {
    "toggle": "toggle",
    "start": "start",
    "pause": "pause",
    "resume": "resume",
    "stop": "stop",
    "cycle": "start_cycle",
    "focus": "start_focus",
    "short": "start_short_break",
    "long": "start_long_break",
}

COMMAND_NAMES: tuple[str, ...] = (
    *CONTROLLER_COMMANDS,
    COMMAND_STATUS,
    COMMAND_RELOAD,
    COMMAND_HELP,
    COMMAND_QUIT,
)


def normalize_command(raw: str) -> str:
    return " ".join(raw.split()).lower()


class CommandDispatcher:
    """Runs one command word and returns the text to show the user."""

    def __init__(
        self,
        controller: CycleController,
        *,
        config_loader: Optional[Callable[[], AppConfig]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._controller = controller
        self._config_loader = config_loader
        self._logger = logger or logging.getLogger("runtime")

    def handle(self, raw_command: str) -> str:
        command = normalize_command(raw_command)
        if command == COMMAND_STATUS:
            return self._controller.status_message()
        if command == COMMAND_HELP:
            return "Commands: " + ", ".join(COMMAND_NAMES)
        if command == COMMAND_RELOAD:
            return self._reload()

        method_name = CONTROLLER_COMMANDS.get(command)
        if method_name is None:
            self._logger.warning("Unsupported command: %s", command)
            return f"Unknown command '{command}'. Type '{COMMAND_HELP}' for a list."

        action: Callable[[], None] = getattr(self._controller, method_name)
        try:
            action()
        except InvalidTransitionError as error:
            self._logger.warning("Command rejected: %s (%s)", command, error)
            return f"Cannot {error.action} while the timer is {error.state}."
        except PomodoroError as error:
            self._logger.error("Command failed: %s (%s)", command, error)
            return str(error)
        return self._controller.status_message()

    def _reload(self) -> str:
        if self._config_loader is None:
            return "Reloading settings is not available."
        try:
            settings = self._config_loader()
        except AppConfigurationError as error:
            self._logger.error("Reload failed: %s", error)
            return f"Reload failed: {error}"
        self._controller.reload(settings)
        return self._controller.status_message()


class StdinCommandReader:
    """Daemon thread that forwards each input line into the runtime queue."""

    def __init__(self, queue: Queue[str], stream: TextIO):
        self._queue = queue
        self._stream = stream
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="stdin-commands",
        )
        self._thread.start()

    def _run(self) -> None:
        for line in self._stream:
            command = normalize_command(line)
            if command:
                self._queue.put(command)
