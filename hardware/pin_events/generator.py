"""
Pin Event Generator

Owns the polling loop and edge detection for exactly ONE pin.

How it works:
1. Construction checks the driver, then runs the initialization protocol
   synchronously (pin validity, supported mode, hardware mode, baseline)
2. A dedicated background thread samples the pin every poll interval
3. Each sample is compared with the previous one through the configured
   PinEventFilter; matches invoke the callback on the polling thread
4. request_stop() sets a flag that the loop checks once per cycle

Startup outcome is published through a one-shot Future so callers can wait
for the loop with a timeout instead of spinning on is_registered. A
generator that fails initialization resolves that Future with the failure
and never touches the hardware again.
"""

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Dict, Optional

from hardware.constants import POLL_INTERVAL, POLL_THREAD_NAME_PREFIX
from hardware.interfaces.gpio_interface import (
    GPIOError,
    GPIOInterface,
    PinInfo,
    PinMode,
    PinState,
)
from hardware.pin_events.exceptions import DriverUnavailableError
from hardware.pin_events.models import (
    ChangeEvent,
    PinEventConfiguration,
    RegistrationResult,
    SampleState,
)
from hardware.utils.gpio_utils import check_driver_ready


class EventGenerator:
    """
    Polls one GPIO pin and dispatches ChangeEvents.

    Usage:
        generator = EventGenerator(gpio, config)
        if generator.wait_until_started(timeout=2.0).succeeded:
            ...
        generator.request_stop()
        generator.wait_until_stopped(timeout=1.0)
    """

    def __init__(
        self,
        driver: Optional[GPIOInterface],
        config: PinEventConfiguration,
        poll_interval: float = POLL_INTERVAL,
    ):
        """
        Create the generator and run its initialization protocol.

        Args:
            driver: Initialized GPIO driver shared by all generators
            config: Pin event configuration this generator will own
            poll_interval: Delay between samples (seconds)

        Raises:
            DriverUnavailableError: If driver is None or not initialized
        """
        self.logger = logging.getLogger(__name__)

        if not check_driver_ready(driver, self.logger):
            raise DriverUnavailableError(
                f"Cannot create event generator for pin {config.pin}: "
                f"GPIO driver is not initialized"
            )

        self.driver = driver
        self.config = config
        self.poll_interval = poll_interval

        self._stop_event = threading.Event()

        # Held for the whole polling loop - one loop per instance
        self._sync = threading.Lock()

        self._startup: Future = Future()
        self._thread: Optional[threading.Thread] = None
        self._previous = SampleState.baseline()
        self._pin_info: Optional[PinInfo] = None

        # Counters (only written by the polling thread)
        self._sample_count = 0
        self._event_count = 0
        self._read_error_count = 0
        self._consecutive_failures = 0

        self._initialize()

    @property
    def pin(self) -> int:
        return self.config.pin

    @property
    def is_registered(self) -> bool:
        """True while the polling loop is running"""
        return self.config.is_registered

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    def _initialize(self) -> None:
        """
        Validate, configure the pin, seed the baseline and start polling.

        Every failure leaves the generator inert: logged, startup resolved
        with the reason, no thread started.
        """
        pin = self.config.pin

        if not self.driver.is_valid_pin(pin):
            self.logger.warning(f"Pin {pin} is not a valid GPIO pin, polling not started")
            self._resolve_startup(RegistrationResult.INVALID_PIN)
            return

        if not self.driver.is_initialized():
            self.logger.warning(f"GPIO driver not ready, polling for pin {pin} not started")
            self._resolve_startup(RegistrationResult.DRIVER_UNAVAILABLE)
            return

        if self.config.is_registered:
            self.logger.warning(f"Pin {pin} configuration is already being polled")
            self._resolve_startup(RegistrationResult.DUPLICATE)
            return

        if not self.config.mode.is_pollable:
            self.logger.warning(
                f"Pin {pin}: only INPUT/OUTPUT polling is supported "
                f"(got {self.config.mode.name})"
            )
            self._resolve_startup(RegistrationResult.UNSUPPORTED_MODE)
            return

        # Outputs come up at the OFF level so an active-low load never blips on
        initial_level = (
            PinState.OFF.digital_value if self.config.mode == PinMode.OUTPUT else None
        )

        try:
            mode_set = self.driver.set_pin_mode(
                pin, self.config.mode, initial_level=initial_level,
            )
        except Exception as e:
            self.logger.error(f"Error setting mode of pin {pin}: {e}", exc_info=True)
            mode_set = False

        if not mode_set:
            self.logger.error(f"Failed to set pin {pin} to {self.config.mode.name}")
            self._resolve_startup(RegistrationResult.INITIALIZATION_FAILED)
            return

        self._set_initial_value()
        self._start_worker()

    def _set_initial_value(self) -> None:
        """
        Seed the previous sample with the OFF sentinel.

        Output pins were already set up at the OFF level; the write re-asserts
        it for drivers that ignore the initial level. The baseline is not a
        hardware read, so the first real sample may itself be a transition.
        """
        pin = self.config.pin

        if self.config.mode == PinMode.OUTPUT:
            try:
                self.driver.digital_write(pin, PinState.OFF.digital_value)
            except GPIOError as e:
                self.logger.warning(f"Could not drive pin {pin} to OFF: {e}")

        try:
            self._pin_info = self.driver.get_pin_metadata(pin)
        except GPIOError as e:
            self.logger.debug(f"No metadata for pin {pin}: {e}")

        self._previous = SampleState.baseline()
        self.logger.debug(f"Initial pin event values set for pin {pin}")

    def _start_worker(self) -> None:
        """Start the polling thread for this pin"""
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,  # Dies when main program exits
            name=f"{POLL_THREAD_NAME_PREFIX}-{self.config.pin}",
        )
        self._thread.start()

    def _resolve_startup(self, result: RegistrationResult) -> None:
        if not self._startup.done():
            self._startup.set_result(result)

    # =========================================================================
    # POLLING LOOP
    # =========================================================================

    def _poll_loop(self) -> None:
        """
        Sample the pin until a stop is requested.

        The stop flag is checked once per cycle, so a stop takes effect
        within one poll interval.
        """
        if not self._sync.acquire(blocking=False):
            self.logger.warning(f"Polling loop for pin {self.config.pin} is already running")
            self._resolve_startup(RegistrationResult.DUPLICATE)
            return

        try:
            self.config._set_registered(True)
            self._resolve_startup(RegistrationResult.REGISTERED)
            self.logger.debug(
                f"Started {self.config.mode.name} pin polling for pin {self.config.pin} "
                f"(filter: {self.config.event_filter.name})"
            )

            while not self._stop_event.is_set():
                self._poll_once()
                self._stop_event.wait(self.poll_interval)
        finally:
            self.config._set_registered(False)
            self.logger.debug(f"Polling for pin {self.config.pin} has been stopped")
            self._sync.release()

    def _poll_once(self) -> None:
        """
        One sampling cycle: read, compare, maybe dispatch, remember.

        A failed read is transient: it is logged, the previous sample is
        kept, and the next cycle tries again.
        """
        pin = self.config.pin

        try:
            value = self.driver.digital_read(pin)
        except Exception as e:
            self._on_read_error(e)
            return

        if self._consecutive_failures:
            self.logger.info(
                f"Pin {pin} readable again after "
                f"{self._consecutive_failures} failed read(s)"
            )
            self._consecutive_failures = 0

        current = SampleState.from_digital(value)
        previous = self._previous
        self._sample_count += 1

        if self.config.event_filter.matches(previous.state, current.state):
            self._dispatch(ChangeEvent(
                pin=pin,
                current_state=current.state,
                current_value=current.value,
                pin_mode=self.config.mode,
                matched_filter=self.config.event_filter,
                previous_state=previous.state,
                previous_value=previous.value,
                pin_info=self._pin_info,
            ))

        self._previous = current

    def _on_read_error(self, error: Exception) -> None:
        """Log a failed read without flooding the log at the poll rate"""
        self._read_error_count += 1
        self._consecutive_failures += 1

        if self._consecutive_failures == 1:
            self.logger.error(
                f"Failed to read pin {self.config.pin}: {error}", exc_info=True,
            )
        else:
            self.logger.debug(
                f"Pin {self.config.pin} read failed again "
                f"({self._consecutive_failures} in a row): {error}"
            )

    def _dispatch(self, event: ChangeEvent) -> None:
        """
        Call the registered callback on the polling thread.

        A slow callback slows down sampling of this pin only.
        """
        self._event_count += 1
        callback = self.config.on_event

        if callback is None:
            self.logger.debug(
                f"Pin {event.pin} changed to {event.current_state.name} "
                f"but no callback registered"
            )
            return

        try:
            callback(event)
        except Exception as e:
            # Never let callback errors kill the polling loop
            self.logger.error(
                f"Error in pin {event.pin} event callback: {e}", exc_info=True,
            )

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def request_stop(self) -> None:
        """
        Ask the polling loop to exit after its current cycle.

        Idempotent, callable from any thread, never blocks. Use
        wait_until_stopped() when you need the loop to be gone.
        """
        if not self._stop_event.is_set():
            self._stop_event.set()
            self.logger.debug(f"Stop requested for pin {self.config.pin}")

    def wait_until_started(self, timeout: Optional[float] = None) -> RegistrationResult:
        """
        Wait for the startup outcome.

        Args:
            timeout: Seconds to wait, None waits forever

        Returns:
            REGISTERED once the loop is running, the failure reason for an
            inert generator, or TIMEOUT
        """
        try:
            return self._startup.result(timeout=timeout)
        except FutureTimeoutError:
            return RegistrationResult.TIMEOUT

    def wait_until_stopped(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the polling thread has exited.

        Returns:
            True if no loop is running anymore, False on timeout
        """
        if self._thread is None:
            return True

        self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    def get_status(self) -> Dict[str, Any]:
        """
        Get current generator status.

        Returns:
            Dictionary with configuration and loop counters
        """
        startup = self._startup.result() if self._startup.done() else None

        return {
            "pin": self.config.pin,
            "mode": self.config.mode.value,
            "event_filter": self.config.event_filter.value,
            "registered": self.is_registered,
            "startup": startup.value if startup else None,
            "stop_requested": self.stop_requested,
            "worker_alive": self._thread is not None and self._thread.is_alive(),
            "samples": self._sample_count,
            "events": self._event_count,
            "read_errors": self._read_error_count,
            "last_state": self._previous.state.value,
        }
