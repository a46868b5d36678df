"""
Raspberry Pi GPIO Implementation

Concrete implementation of GPIOInterface for Raspberry Pi hardware using
the RPi.GPIO library. This wraps RPi.GPIO to match our driver capability.

Why wrap an existing library?
1. Decoupling: If RPi.GPIO changes, only this file needs updating
2. Simplification: Hide RPi.GPIO's constants behind our enums
3. Testing: Can swap this for MockGPIO in tests
4. Portability: Other backends (pigpio, gpiozero) implement the same interface
"""

import logging
import threading
from typing import Optional

try:
    from RPi import GPIO

    GPIO_AVAILABLE = True
except (ImportError, RuntimeError):
    # RuntimeError: library installed but not running on a Raspberry Pi
    GPIO_AVAILABLE = False

from hardware.interfaces.gpio_interface import (
    GPIOError,
    GPIOInterface,
    PinInfo,
    PinMode,
)
from hardware.utils.gpio_utils import build_pin_info, is_board_pin


class RaspberryPiGPIO(GPIOInterface):
    """
    Raspberry Pi GPIO driver using the RPi.GPIO library.

    Pins are addressed with BCM numbering. Inputs get the internal pull-up
    so an idle line reads HIGH (logically OFF under active-low wiring).
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

        # Track which pins we've configured (for cleanup)
        self._configured_pins: set[int] = set()
        self._initialized = False

        # Setup and cleanup touch RPi.GPIO's global state
        self._setup_lock = threading.Lock()

        if not GPIO_AVAILABLE:
            raise GPIOError(
                "RPi.GPIO library not available. Install with: pip install RPi.GPIO",
            )

        # BCM uses GPIO numbers (GPIO17) vs BOARD uses physical pin numbers (pin 11)
        try:
            GPIO.setmode(GPIO.BCM)
            GPIO.setwarnings(False)  # Disable warnings about pins already in use
            self._initialized = True
            self.logger.info("Raspberry Pi GPIO initialized (BCM mode)")
        except Exception as e:
            raise GPIOError(f"Failed to initialize GPIO: {e}") from e

    def is_initialized(self) -> bool:
        """Driver is usable between setmode() and a full cleanup()"""
        return GPIO_AVAILABLE and self._initialized

    def is_valid_pin(self, pin: int) -> bool:
        """Check pin against the BCM allow-list of the 40-pin header"""
        return is_board_pin(pin)

    def set_pin_mode(
        self,
        pin: int,
        mode: PinMode,
        initial_level: Optional[bool] = None,
    ) -> bool:
        """Configure pin as input (pull-up) or output"""
        if not mode.is_pollable:
            # RPi.GPIO has no API for selecting ALT functions
            self.logger.warning(
                f"Pin {pin}: mode {mode.name} is not supported by RPi.GPIO",
            )
            return False

        try:
            with self._setup_lock:
                if mode == PinMode.INPUT:
                    GPIO.setup(pin, GPIO.IN, pull_up_down=GPIO.PUD_UP)
                elif initial_level is None:
                    GPIO.setup(pin, GPIO.OUT)
                else:
                    GPIO.setup(
                        pin,
                        GPIO.OUT,
                        initial=GPIO.HIGH if initial_level else GPIO.LOW,
                    )
                self._configured_pins.add(pin)
            self.logger.debug(f"Pin {pin} configured as {mode.name}")
            return True
        except Exception as e:
            self.logger.error(f"Failed to setup pin {pin} as {mode.name}: {e}")
            return False

    def digital_read(self, pin: int) -> bool:
        """Read pin level"""
        try:
            return bool(GPIO.input(pin))
        except Exception as e:
            raise GPIOError(f"Failed to read pin {pin}: {e}") from e

    def digital_write(self, pin: int, value: bool) -> None:
        """Set output pin HIGH or LOW"""
        try:
            GPIO.output(pin, GPIO.HIGH if value else GPIO.LOW)
            # Don't log every write - too verbose
        except Exception as e:
            raise GPIOError(f"Failed to write to pin {pin}: {e}") from e

    def get_pin_metadata(self, pin: int) -> PinInfo:
        """Board metadata for a pin"""
        if not is_board_pin(pin):
            raise GPIOError(f"Pin {pin} is not a valid BCM GPIO pin")
        return build_pin_info(pin)

    def cleanup(self, pins: Optional[list[int]] = None) -> None:
        """
        Reset GPIO pins and release resources.

        Important: Always call this before program exits to leave pins in safe state.
        """
        try:
            with self._setup_lock:
                if pins is None:
                    # Clean up all pins we configured
                    if self._configured_pins:
                        GPIO.cleanup(list(self._configured_pins))
                        self.logger.info(
                            f"Cleaned up {len(self._configured_pins)} GPIO pins",
                        )
                        self._configured_pins.clear()
                else:
                    GPIO.cleanup(pins)
                    self._configured_pins.difference_update(pins)
                    self.logger.info(f"Cleaned up GPIO pins: {pins}")
        except Exception as e:
            # Don't raise during cleanup - just log
            self.logger.error(f"Error during GPIO cleanup: {e}")
