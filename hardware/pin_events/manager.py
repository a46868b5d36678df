"""
Pin Event Manager

Registry of event generators, one per pin, plus lifecycle orchestration.

Registration contract:
- A pin is rejected if it's invalid for the board or already has an entry
- A generator is created for the configuration and the manager waits (with
  a timeout) for its polling loop to come up
- Only running generators are added to the registry

Stopping a generator does NOT free its registry entry: once a pin has been
registered, it stays reserved for the lifetime of the manager.
"""

import logging
import threading
from typing import Any, Dict, Iterable, Optional

from hardware.constants import POLL_INTERVAL, REGISTRATION_TIMEOUT, STOP_TIMEOUT
from hardware.interfaces.gpio_interface import GPIOInterface
from hardware.pin_events.exceptions import DriverUnavailableError
from hardware.pin_events.generator import EventGenerator
from hardware.pin_events.models import PinEventConfiguration, RegistrationResult


class EventManager:
    """
    Registers and stops pin event generators.

    Usage:
        with EventManager(gpio) as events:
            config = PinEventConfiguration(17, PinMode.INPUT, PinEventFilter.BOTH, on_change)
            if not events.register_event(config):
                print("pin 17 not watched")
            ...
        # All polling loops are told to stop on exit
    """

    def __init__(
        self,
        driver: Optional[GPIOInterface],
        poll_interval: float = POLL_INTERVAL,
        registration_timeout: float = REGISTRATION_TIMEOUT,
    ):
        """
        Initialize the manager.

        Args:
            driver: GPIO driver handed to every generator
            poll_interval: Delay between samples for each pin (seconds)
            registration_timeout: Default wait for a loop to start (seconds)

        Raises:
            DriverUnavailableError: If driver is None
        """
        self.logger = logging.getLogger(__name__)

        if driver is None:
            raise DriverUnavailableError("EventManager requires a GPIO driver")

        self.driver = driver
        self.poll_interval = poll_interval
        self.registration_timeout = registration_timeout

        self._events: Dict[int, EventGenerator] = {}

        # Pins with a registration in flight (reserved but not yet in _events)
        self._pending: set[int] = set()
        self._lock = threading.Lock()

        self.logger.info(
            f"Pin event manager initialized (poll interval: {poll_interval * 1000:.1f}ms)"
        )

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register(
        self,
        config: PinEventConfiguration,
        timeout: Optional[float] = None,
    ) -> RegistrationResult:
        """
        Start polling a pin and report exactly what happened.

        Args:
            config: Pin, mode, filter and callback to register
            timeout: Seconds to wait for the loop (None = manager default)

        Returns:
            RegistrationResult.REGISTERED on success, otherwise the reason
        """
        pin = config.pin
        wait = self.registration_timeout if timeout is None else timeout

        if not self.driver.is_valid_pin(pin):
            self.logger.warning(f"Pin {pin} is invalid, event not registered")
            return RegistrationResult.INVALID_PIN

        with self._lock:
            if pin in self._events or pin in self._pending:
                self.logger.warning(f"Pin {pin} already has an event registered")
                return RegistrationResult.DUPLICATE
            self._pending.add(pin)

        generator = None
        try:
            try:
                generator = EventGenerator(self.driver, config, self.poll_interval)
            except DriverUnavailableError as e:
                self.logger.error(f"Cannot register pin {pin}: {e}")
                return RegistrationResult.DRIVER_UNAVAILABLE

            result = generator.wait_until_started(timeout=wait)

            if result is RegistrationResult.TIMEOUT:
                # Don't leave a late-starting loop running unregistered
                generator.request_stop()
                self.logger.error(
                    f"Polling loop for pin {pin} didn't start within {wait}s"
                )
                return result

            if not result.succeeded:
                self.logger.warning(f"Pin {pin} event not registered ({result.value})")
                return result

            with self._lock:
                self._events[pin] = generator

            self.logger.info(
                f"Registered {config.event_filter.name} event for pin {pin} "
                f"({config.mode.name})"
            )
            return result
        finally:
            with self._lock:
                self._pending.discard(pin)

    def register_event(
        self,
        config: PinEventConfiguration,
        timeout: Optional[float] = None,
    ) -> bool:
        """
        Start polling a pin.

        Returns:
            True if the pin's polling loop is running and registered
        """
        return self.register(config, timeout=timeout).succeeded

    def register_events(
        self,
        configs: Iterable[PinEventConfiguration],
        timeout: Optional[float] = None,
    ) -> Dict[int, RegistrationResult]:
        """
        Register several pins, continuing past failures.

        Returns:
            Mapping of pin -> RegistrationResult. When a pin repeats, a
            successful result is never replaced by a later failure.
        """
        results: Dict[int, RegistrationResult] = {}
        for config in configs:
            result = self.register(config, timeout=timeout)
            previous = results.get(config.pin)
            if previous is None or not previous.succeeded:
                results[config.pin] = result

        registered = sum(1 for result in results.values() if result.succeeded)
        self.logger.info(f"Registered {registered}/{len(results)} pin events")
        return results

    # =========================================================================
    # STOPPING
    # =========================================================================

    def stop_event_generator(self, pin: int) -> bool:
        """
        Signal the generator of a pin to stop. Does not block.

        The registry entry is kept, so the pin can't be registered again.

        Returns:
            True if a generator was found and signalled
        """
        if not self.driver.is_valid_pin(pin):
            return False

        with self._lock:
            generator = self._events.get(pin)

        if generator is None:
            return False

        generator.request_stop()
        self.logger.debug(f"Stopped pin polling for pin {pin}")
        return True

    def stop_all(self) -> None:
        """Signal every registered generator to stop"""
        for pin in self.registered_pins:
            self.stop_event_generator(pin)

    def wait_until_stopped(
        self,
        pin: Optional[int] = None,
        timeout: float = STOP_TIMEOUT,
    ) -> bool:
        """
        Block until polling loops have exited.

        Args:
            pin: One pin to wait for, or None for every registered pin
            timeout: Seconds to wait per generator

        Returns:
            True if all awaited loops have exited
        """
        with self._lock:
            if pin is None:
                generators = list(self._events.values())
            else:
                generators = [self._events[pin]] if pin in self._events else []

        stopped = True
        for generator in generators:
            if not generator.wait_until_stopped(timeout=timeout):
                self.logger.warning(
                    f"Polling loop for pin {generator.pin} still running after {timeout}s"
                )
                stopped = False
        return stopped

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def registered_pins(self) -> list[int]:
        """Pins with a registry entry (running or stopped)"""
        with self._lock:
            return sorted(self._events)

    def get_generator(self, pin: int) -> Optional[EventGenerator]:
        with self._lock:
            return self._events.get(pin)

    def is_registered(self, pin: int) -> bool:
        """True if the pin's polling loop is currently running"""
        generator = self.get_generator(pin)
        return generator is not None and generator.is_registered

    def get_status(self) -> Dict[str, Any]:
        """
        Get manager status.

        Returns:
            Dictionary with per-pin generator status
        """
        with self._lock:
            generators = dict(self._events)

        return {
            "poll_interval": self.poll_interval,
            "registration_timeout": self.registration_timeout,
            "registered_pins": sorted(generators),
            "active_pins": sorted(
                pin for pin, gen in generators.items() if gen.is_registered
            ),
            "generators": {pin: gen.get_status() for pin, gen in generators.items()},
        }

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop every polling loop on exit"""
        self.stop_all()
        return False
