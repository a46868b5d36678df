"""
Hardware Factory

Builds the GPIO driver handle for the pin event subsystem.

The mode comes from GPIO_HARDWARE_MODE in config/settings.py unless the
caller overrides it:
- "real": RPi.GPIO driver, error if it can't be brought up
- "mock": simulated board
- "auto": real driver when it initializes, mock otherwise

The handle is created ONCE by the application and then passed explicitly
to the EventManager. There is no global driver singleton.
"""

import logging
from typing import Literal, Optional

from config.settings import GPIO_HARDWARE_MODE
from hardware.implementations.mock_gpio import MockGPIO
from hardware.implementations.rpi_gpio import RaspberryPiGPIO
from hardware.interfaces.gpio_interface import GPIOError, GPIOInterface

HardwareMode = Literal["auto", "real", "mock"]

HARDWARE_MODES = ("auto", "real", "mock")


class HardwareFactory:
    """
    Factory for GPIO driver handles.

    Usage:
        gpio = HardwareFactory.create_gpio()             # mode from settings
        gpio = HardwareFactory.create_gpio(mode="mock")  # tests, laptops
        gpio = HardwareFactory.create_gpio(mode="real")  # raises off-Pi
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_gpio(cls, mode: Optional[HardwareMode] = None) -> GPIOInterface:
        """
        Create a GPIO driver that is ready for pin operations.

        Args:
            mode: "auto", "real" or "mock" (None = GPIO_HARDWARE_MODE)

        Returns:
            Initialized GPIOInterface implementation

        Raises:
            RuntimeError: If mode="real" but the driver can't be initialized
            ValueError: If mode is not one of the known values
        """
        mode = (mode or GPIO_HARDWARE_MODE).strip().lower()
        if mode not in HARDWARE_MODES:
            raise ValueError(
                f"Unknown hardware mode: {mode!r}. Expected one of: "
                f"{', '.join(HARDWARE_MODES)}",
            )

        if mode == "mock":
            cls._logger.info("Using Mock GPIO (forced)")
            return MockGPIO()

        try:
            gpio = cls._create_real_gpio()
        except GPIOError as e:
            if mode == "real":
                raise RuntimeError(f"Real GPIO requested but not available: {e}") from e
            cls._logger.warning(f"Real GPIO not available ({e}), using Mock GPIO")
            return MockGPIO()

        cls._logger.info(f"Using Raspberry Pi GPIO ({mode})")
        return gpio

    @classmethod
    def _create_real_gpio(cls) -> GPIOInterface:
        """
        Bring up the RPi.GPIO driver and make sure it is usable.

        Raises:
            GPIOError: If the library is missing or the driver didn't initialize
        """
        try:
            gpio = RaspberryPiGPIO()
        except GPIOError:
            raise
        except Exception as e:
            raise GPIOError(f"Failed to create RPi.GPIO driver: {e}") from e

        if not gpio.is_initialized():
            gpio.cleanup()
            raise GPIOError("RPi.GPIO driver created but not initialized")

        return gpio

    @classmethod
    def is_real_hardware_available(cls) -> bool:
        """
        Check whether the RPi.GPIO driver can be brought up on this machine.

        Useful for diagnostics and the hardware check scripts.
        """
        try:
            gpio = cls._create_real_gpio()
        except GPIOError:
            return False

        gpio.cleanup()
        return True


def create_gpio(force_mock: bool = False) -> GPIOInterface:
    """
    Quick GPIO creation with simple mock override.

    Args:
        force_mock: If True, always use mock (good for testing)

    Returns:
        GPIO driver (mode from settings unless forced to mock)
    """
    return HardwareFactory.create_gpio(mode="mock" if force_mock else None)
