import logging
import signal
import sys
from typing import Optional

from app_config import AppConfigurationError, load_app_config, resolve_config_path
from pomodoro import CooperativeScheduler
from runtime import CycleController, RuntimeBootstrap, RuntimeEngine
from runtime.commands import StdinCommandReader
from runtime.ui import RuntimeUIPublisher
from server import ServerConfigurationError, UIServer, UIServerConfig


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_cycle")


def setup_signal_handlers(engine: RuntimeEngine) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logging.getLogger("pomodoro_cycle").info(
            "%s received, stopping...",
            signal.Signals(signum).name,
        )
        engine.request_shutdown()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def main() -> int:
    """Run the focus/break cycle until quit or interrupted."""
    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path()
        app_config = load_app_config()
        if app_config.source_file:
            logger.info("Loaded runtime config: %s", config_path)
        else:
            logger.info("No config file at %s, using defaults", config_path)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    ui_server: Optional[UIServer] = None
    try:
        server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        return 1

    if server_config.enabled:
        ui_server = UIServer(config=server_config, logger=logging.getLogger("ui_server"))
        try:
            ui_server.start()
        except RuntimeError as error:
            logger.error("Failed to start UI server: %s", error)
            return 1

    scheduler = CooperativeScheduler()
    controller = CycleController(
        app_config,
        scheduler=scheduler,
        ui=RuntimeUIPublisher(ui_server),
        logger=logging.getLogger("runtime"),
    )
    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            scheduler=scheduler,
            controller=controller,
            ui_server=ui_server,
            config_loader=load_app_config,
        )
    )

    setup_signal_handlers(engine)
    StdinCommandReader(engine.commands, sys.stdin).start()
    logger.info("Type 'help' for commands.")
    return engine.run()


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
