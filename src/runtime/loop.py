"""Runtime loop that fires scheduled countdown callbacks and handles commands."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Callable, Optional, Protocol

from app_config import AppConfig
from pomodoro import CooperativeScheduler

from .commands import COMMAND_QUIT, CommandDispatcher, normalize_command
from .controller import CycleController

# Upper bound on how long the loop blocks waiting for a command.
MAX_WAIT_SECONDS = 0.25


class UIServerLike(Protocol):
    def stop(self, timeout_seconds: float = 5.0) -> None:
        ...


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    scheduler: CooperativeScheduler
    controller: CycleController
    ui_server: Optional[UIServerLike] = None
    config_loader: Optional[Callable[[], AppConfig]] = None
    output: Callable[[str], None] = print


class RuntimeEngine:
    """Single-threaded loop: run due timer callbacks, then wait for a command."""

    def __init__(self, bootstrap: RuntimeBootstrap, *, commands: Optional[Queue[str]] = None):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._scheduler = bootstrap.scheduler
        self._controller = bootstrap.controller
        self._dispatcher = CommandDispatcher(
            self._controller,
            config_loader=bootstrap.config_loader,
            logger=self._logger,
        )
        self._commands: Queue[str] = commands if commands is not None else Queue()
        self._shutdown = threading.Event()

    @property
    def commands(self) -> Queue[str]:
        return self._commands

    def submit(self, command: str) -> None:
        self._commands.put(command)

    def request_shutdown(self) -> None:
        self._shutdown.set()

    def run(self) -> int:
        try:
            if self._bootstrap.app_config.timer.autostart:
                self._controller.start_cycle()
                self._logger.info("Cycle started: %s", self._controller.status_message())
            else:
                self._logger.info("Ready: %s", self._controller.status_message())

            while not self._shutdown.is_set():
                self.run_once()
            return 0

        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown_resources()

    def run_once(self) -> None:
        """Fire due callbacks, then block until a command or the next deadline."""
        self._scheduler.run_due()

        command = self._poll_command()
        if command is None:
            return
        if command == COMMAND_QUIT:
            self._logger.info("Quit requested.")
            self._shutdown.set()
            return
        self._bootstrap.output(self._dispatcher.handle(command))

    def _poll_command(self) -> Optional[str]:
        timeout = self._scheduler.seconds_until_next(MAX_WAIT_SECONDS)
        try:
            raw = self._commands.get(timeout=timeout)
        except Empty:
            return None
        return normalize_command(raw)

    def _shutdown_resources(self) -> None:
        self._logger.info("Disposing cycle controller...")
        self._controller.dispose()

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
