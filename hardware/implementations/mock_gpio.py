"""
Mock GPIO Implementation

Simulated GPIO driver for development and testing without Raspberry Pi hardware.
Allows you to develop and test pin event logic on your laptop or in CI.

This is a "Test Double" (specifically, a "Fake" - it has working logic but no real hardware).

Besides the GPIOInterface methods it offers testing helpers to:
- change a pin's level from "outside" (simulating a switch or sensor)
- script an exact sequence of digital reads
- inject read/setup failures
- count and wait for reads (polling loops read constantly)

Polling threads read while tests change levels, so all state is guarded by
a single condition variable.
"""

import logging
import threading
import time
from collections import deque
from typing import Iterable, Optional

from hardware.interfaces.gpio_interface import (
    GPIOError,
    GPIOInterface,
    PinInfo,
    PinMode,
)
from hardware.utils.gpio_utils import build_pin_info, is_board_pin


class MockGPIO(GPIOInterface):
    """
    Simulated GPIO driver that mimics a Raspberry Pi board.

    Levels follow the active-low wiring used by the pin event subsystem:
    an idle input reads HIGH (True, logically OFF).
    """

    def __init__(self, initialized: bool = True):
        self.logger = logging.getLogger(__name__)

        # Key: pin number, Value: dict with 'mode' and 'level'
        self._pins: dict[int, dict] = {}

        # Scripted reads consumed before falling back to the pin level
        self._scripted_reads: dict[int, deque] = {}

        # Number of upcoming reads that raise GPIOError, per pin
        self._read_failures: dict[int, int] = {}

        # Pins whose set_pin_mode() reports failure
        self._mode_failures: set[int] = set()

        self._read_counts: dict[int, int] = {}
        self._condition = threading.Condition()
        self._initialized = initialized

        self.logger.info("Mock GPIO initialized (simulation mode)")

    # =========================================================================
    # GPIOInterface
    # =========================================================================

    def is_initialized(self) -> bool:
        """Mock driver is ready unless a test says otherwise"""
        return self._initialized

    def is_valid_pin(self, pin: int) -> bool:
        """Same board rules as the real driver"""
        return is_board_pin(pin)

    def set_pin_mode(
        self,
        pin: int,
        mode: PinMode,
        initial_level: Optional[bool] = None,
    ) -> bool:
        """Configure pin mode"""
        with self._condition:
            if pin in self._mode_failures or not is_board_pin(pin):
                self.logger.debug(f"[MOCK] Pin {pin} mode change rejected")
                return False

            previous = self._pins.get(pin, {})
            if mode == PinMode.INPUT:
                # Pull-up: idle input reads HIGH
                level = previous.get('level', True)
            elif initial_level is not None:
                level = initial_level
            else:
                level = previous.get('level', False)

            self._pins[pin] = {'mode': mode, 'level': level}

        self.logger.debug(
            f"[MOCK] Pin {pin} configured as {mode.name} "
            f"(level: {'HIGH' if level else 'LOW'})"
        )
        return True

    def digital_read(self, pin: int) -> bool:
        """Read pin level, consuming scripted values first"""
        with self._condition:
            if pin not in self._pins:
                raise GPIOError(f"Pin {pin} not configured")

            self._read_counts[pin] = self._read_counts.get(pin, 0) + 1
            self._condition.notify_all()

            if self._read_failures.get(pin, 0) > 0:
                self._read_failures[pin] -= 1
                raise GPIOError(f"[MOCK] Simulated read failure on pin {pin}")

            script = self._scripted_reads.get(pin)
            if script:
                value = script.popleft()
                # Pin keeps the last scripted level once the script runs out
                self._pins[pin]['level'] = value
                return value

            return self._pins[pin]['level']

    def digital_write(self, pin: int, value: bool) -> None:
        """Set output pin level"""
        with self._condition:
            if pin not in self._pins:
                raise GPIOError(f"Pin {pin} not configured")

            if self._pins[pin]['mode'] != PinMode.OUTPUT:
                raise GPIOError(f"Pin {pin} not configured as output")

            old_level = self._pins[pin]['level']
            self._pins[pin]['level'] = bool(value)

        if old_level != value:
            self.logger.debug(
                f"[MOCK] Pin {pin}: {'HIGH' if old_level else 'LOW'} -> "
                f"{'HIGH' if value else 'LOW'}"
            )

    def get_pin_metadata(self, pin: int) -> PinInfo:
        """Board metadata for a pin"""
        if not is_board_pin(pin):
            raise GPIOError(f"Pin {pin} is not a valid GPIO pin")
        return build_pin_info(pin)

    def cleanup(self, pins: Optional[list[int]] = None) -> None:
        """Reset pins to unconfigured state"""
        with self._condition:
            if pins is None:
                pins_to_clean = list(self._pins.keys())
            else:
                pins_to_clean = pins

            for pin in pins_to_clean:
                self._pins.pop(pin, None)
                self._scripted_reads.pop(pin, None)
                self._read_failures.pop(pin, None)

        self.logger.info(f"[MOCK] Cleaned up pins: {pins_to_clean}")

    # =========================================================================
    # TESTING HELPER METHODS (not part of GPIOInterface)
    # =========================================================================
    # These methods are ONLY for testing - they simulate hardware events

    def set_initialized(self, initialized: bool) -> None:
        """Simulate the driver becoming (un)available"""
        self._initialized = initialized

    def set_level(self, pin: int, value: bool) -> None:
        """
        Drive a pin's level from "outside" (a switch closing, a sensor firing).

        Works on any configured pin regardless of mode.
        """
        with self._condition:
            if pin not in self._pins:
                raise GPIOError(f"Pin {pin} not configured")
            self._pins[pin]['level'] = bool(value)

        self.logger.debug(f"[MOCK] Pin {pin} forced {'HIGH' if value else 'LOW'}")

    def simulate_pulse(self, pin: int, duration: float = 0.05) -> None:
        """
        Simulate an active-low pulse: ON (LOW) for duration, then back OFF (HIGH).

        Args:
            pin: Configured pin number
            duration: How long the pin stays active (seconds)
        """
        self.set_level(pin, False)
        self.logger.info(f"[MOCK] Simulated pulse START on pin {pin}")
        time.sleep(duration)
        self.set_level(pin, True)
        self.logger.info(f"[MOCK] Simulated pulse END on pin {pin}")

    def script_reads(self, pin: int, values: Iterable[bool]) -> None:
        """
        Queue exact digital read results for a pin.

        The pin does not need to be configured yet. Once the script is
        exhausted the pin keeps reading the last scripted value.
        """
        with self._condition:
            self._scripted_reads.setdefault(pin, deque()).extend(
                bool(v) for v in values
            )

    def fail_reads(self, pin: int, count: int = 1) -> None:
        """Make the next `count` reads of a pin raise GPIOError"""
        with self._condition:
            self._read_failures[pin] = self._read_failures.get(pin, 0) + count

    def fail_set_mode(self, pin: int) -> None:
        """Make set_pin_mode() report failure for a pin"""
        with self._condition:
            self._mode_failures.add(pin)

    def get_read_count(self, pin: int) -> int:
        """Number of digital_read() calls made on a pin"""
        with self._condition:
            return self._read_counts.get(pin, 0)

    def wait_for_reads(self, pin: int, count: int, timeout: float = 2.0) -> bool:
        """
        Block until a pin has been read at least `count` times.

        Returns:
            True if reached, False on timeout
        """
        with self._condition:
            return self._condition.wait_for(
                lambda: self._read_counts.get(pin, 0) >= count,
                timeout=timeout,
            )

    def get_pin_level(self, pin: int) -> bool:
        """Helper for tests to check current pin level"""
        with self._condition:
            if pin not in self._pins:
                raise GPIOError(f"Pin {pin} not configured")
            return self._pins[pin]['level']

    def get_pin_info(self, pin: int) -> dict:
        """
        Get detailed pin information for debugging.

        Returns:
            Dictionary with pin configuration and state
        """
        with self._condition:
            if pin not in self._pins:
                raise GPIOError(f"Pin {pin} not configured")

            info = self._pins[pin].copy()
            info['reads'] = self._read_counts.get(pin, 0)
            info['scripted_remaining'] = len(self._scripted_reads.get(pin, ()))
            return info
