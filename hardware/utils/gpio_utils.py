"""
GPIO Utilities

Shared utility functions for GPIO drivers and the pin event subsystem.
Extracted here so every driver answers "is this a real pin?" the same way.
"""

import logging
from typing import Optional

from hardware.constants import (
    BCM_GPIO_PINS,
    BCM_TO_PHYSICAL_PIN,
    MAX_GPIO_PIN,
    MIN_GPIO_PIN,
    PIN_CAPABILITIES,
)
from hardware.interfaces.gpio_interface import GPIOInterface, PinInfo


def safe_gpio_cleanup(
    gpio: Optional[GPIOInterface],
    pins: Optional[list[int]] = None,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Safely clean up GPIO pins with error handling.

    Cleanup should never crash your program, even if something goes wrong.

    Args:
        gpio: GPIO driver to clean up, or None
        pins: Specific pins to clean, or None for all
        logger: Optional logger for error messages

    Example:
        safe_gpio_cleanup(self.gpio, [17, 27], self.logger)
    """
    if gpio is None:
        return

    try:
        gpio.cleanup(pins)
    except Exception as e:
        if logger:
            logger.error(f"Error during GPIO cleanup: {e}")


def is_board_pin(pin: int) -> bool:
    """
    Check a logical pin against the numeric bound and the board allow-list.

    Args:
        pin: Pin number (BCM numbering)

    Returns:
        True if the pin can be used on this board

    Example:
        is_board_pin(17)  # True
        is_board_pin(0)   # False (reserved)
        is_board_pin(41)  # False (out of range)
    """
    if isinstance(pin, bool) or not isinstance(pin, int):
        return False

    if pin < MIN_GPIO_PIN or pin > MAX_GPIO_PIN:
        return False

    return pin in BCM_GPIO_PINS


def validate_pin_number(pin: int) -> None:
    """
    Validate GPIO pin number for this board.

    Args:
        pin: Pin number to validate

    Raises:
        ValueError: If pin number is invalid

    Example:
        validate_pin_number(18)  # OK
        validate_pin_number(99)  # Raises ValueError
    """
    if isinstance(pin, bool) or not isinstance(pin, int):
        raise ValueError(f"Pin must be an integer, got {type(pin)}")

    if not is_board_pin(pin):
        raise ValueError(
            f"Invalid pin number: {pin}. "
            f"Must be a BCM GPIO pin between {MIN_GPIO_PIN} and {MAX_GPIO_PIN}"
        )


def build_pin_info(pin: int) -> PinInfo:
    """
    Build static metadata for a board pin from the layout tables.

    Args:
        pin: Valid BCM pin number

    Returns:
        PinInfo with physical position and capability flags
    """
    capabilities = {"gpio"}
    for capability, pins in PIN_CAPABILITIES.items():
        if pin in pins:
            capabilities.add(capability)

    return PinInfo(
        bcm_pin=pin,
        physical_pin=BCM_TO_PHYSICAL_PIN.get(pin),
        name=f"GPIO{pin}",
        capabilities=frozenset(capabilities),
    )


def check_driver_ready(
    gpio: Optional[GPIOInterface],
    logger: Optional[logging.Logger] = None
) -> bool:
    """
    Check if a GPIO driver exists and is initialized, logging if not.

    Args:
        gpio: GPIO driver to check, or None
        logger: Optional logger for messages

    Returns:
        True if the driver can be used for pin operations
    """
    if gpio is None:
        if logger:
            logger.warning("GPIO driver hasn't been created yet")
        return False

    if not gpio.is_initialized():
        if logger:
            logger.warning("GPIO driver is not initialized")
        return False

    return True
