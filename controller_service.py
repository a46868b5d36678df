"""
Home Controller Service

Main service coordinator for the home automation controller.
Wires the GPIO driver, the pin events configuration and the event manager
together and keeps them running until shutdown.

Flow:
    create driver -> load config/pin_events.yaml -> register every pin
        -> idle while polling loops dispatch events -> stop all -> cleanup

Application modules subscribe through add_listener(); every ChangeEvent is
logged and then fanned out to the listeners on the polling thread of the
pin that changed.
"""

import logging
import logging.handlers
import signal
import sys
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from config.settings import (
    LOG_DIR,
    LOG_LEVEL,
    LOG_SERVICE_FILE,
    PIN_EVENT_STOP_TIMEOUT,
)
from hardware import (
    ChangeEvent,
    EventManager,
    GPIOInterface,
    HardwareFactory,
    PinEventsConfig,
)
from hardware.utils.gpio_utils import safe_gpio_cleanup


class ControllerService:
    """
    Main service coordinator.

    Usage:
        service = ControllerService()
        service.run()  # Blocks until shutdown
    """

    def __init__(
        self,
        gpio: Optional[GPIOInterface] = None,
        pin_config: Optional[PinEventsConfig] = None,
    ):
        """
        Initialize driver, configuration and event manager.

        Args:
            gpio: GPIO driver to use, or None to create one from settings
            pin_config: Pin events configuration, or None to load the default file
        """
        self.logger = logging.getLogger(__name__)
        self.logger.info("Initializing Home Controller Service...")

        self.gpio = gpio or HardwareFactory.create_gpio()
        self.pin_config = pin_config or PinEventsConfig()

        self.events = EventManager(
            self.gpio,
            poll_interval=self.pin_config.poll_interval,
            registration_timeout=self.pin_config.registration_timeout,
        )

        self._listeners: list[Callable[[ChangeEvent], None]] = []
        self._listeners_lock = threading.Lock()

        self.running = False
        self._stopped = False

    def add_listener(self, listener: Callable[[ChangeEvent], None]) -> None:
        """
        Subscribe to every pin change.

        Listeners run on the polling thread of the pin that changed and
        must be thread-safe.
        """
        with self._listeners_lock:
            self._listeners.append(listener)

    def _on_pin_event(self, event: ChangeEvent) -> None:
        """Log a pin change and forward it to listeners"""
        physical = event.pin_info.physical_pin if event.pin_info else None
        self.logger.info(
            f"Pin {event.pin} (header {physical}) "
            f"{event.previous_state.name} -> {event.current_state.name}"
        )

        with self._listeners_lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                self.logger.error(f"Error in pin event listener: {e}", exc_info=True)

    def start(self) -> int:
        """
        Register every configured pin.

        Returns:
            Number of pins being polled
        """
        configs = self.pin_config.build_configurations(self._on_pin_event)
        if not configs:
            self.logger.warning("No pins configured for events")
            return 0

        results = self.events.register_events(configs)
        for pin, result in sorted(results.items()):
            if not result.succeeded:
                self.logger.warning(f"Pin {pin} not watched: {result.value}")

        return sum(1 for result in results.values() if result.succeeded)

    def run(self) -> None:
        """
        Main service loop.

        Runs until shutdown signal received. The polling loops do the work;
        this thread only waits.
        """
        # Register signal handlers for graceful shutdown
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        self.running = True
        active = self.start()
        self.logger.info(f"Home Controller Service running ({active} pin(s) watched)")

        try:
            while self.running:
                time.sleep(0.1)
        except KeyboardInterrupt:
            self.logger.info("Keyboard interrupt received")
        finally:
            self.shutdown()

    def _signal_handler(self, signum, _frame):
        """
        Handle shutdown signals.

        Args:
            signum: Signal number
            _frame: Current stack frame (unused, required by signal API)
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received signal {signal_name}, shutting down...")
        self.running = False

    def shutdown(self) -> None:
        """
        Graceful shutdown.

        Stops all polling loops, waits for them to exit, cleans up GPIO.
        Safe to call multiple times.
        """
        if self._stopped:
            return

        self.logger.info("Shutting down Home Controller Service...")
        self.running = False

        self.events.stop_all()
        if not self.events.wait_until_stopped(timeout=PIN_EVENT_STOP_TIMEOUT):
            self.logger.warning("Some polling loops did not stop in time")

        safe_gpio_cleanup(self.gpio, self.events.registered_pins, self.logger)

        self._stopped = True
        self.logger.info("Home Controller Service shutdown complete")


def setup_logging():
    """
    Setup logging with rotation.

    Logs to both console and file with rotation:
    - Daily rotation
    - Keep 7 days of logs
    """
    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    # Console handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    log_format = logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s | %(name)s",
    )
    console_handler.setFormatter(log_format)
    logger.addHandler(console_handler)

    log_file = Path(LOG_DIR) / LOG_SERVICE_FILE
    try:
        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(log_file),
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
    except (PermissionError, FileNotFoundError):
        # Fallback to local logs directory if LOG_DIR not writable
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)

        fallback_log = logs_dir / "home-controller.log"
        logger.warning(
            f"Cannot write to {log_file}, using fallback: {fallback_log}",
        )

        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(fallback_log),
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )

    file_handler.setLevel(level)
    file_handler.setFormatter(log_format)
    logger.addHandler(file_handler)


def main():
    """
    Main entry point for the service.

    Sets up logging and runs the service.
    """
    setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("Home Controller Service Starting")
    logger.info("=" * 60)

    try:
        service = ControllerService()
        service.run()
    except Exception as e:
        logger.critical(f"Fatal error in main: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
