"""
Hardware Utilities Package

Exposes shared utility functions for hardware operations.

Public API:
    - build_pin_info: Static metadata for a board pin
    - check_driver_ready: Check a driver exists and is initialized
    - is_board_pin: Check a pin against the board allow-list
    - safe_gpio_cleanup: Safe GPIO pin cleanup with error handling
    - validate_pin_number: Validate GPIO pin number (raises ValueError)
"""

from hardware.utils.gpio_utils import (
    build_pin_info,
    check_driver_ready,
    is_board_pin,
    safe_gpio_cleanup,
    validate_pin_number,
)

# Public API
__all__ = [
    "build_pin_info",
    "check_driver_ready",
    "is_board_pin",
    "safe_gpio_cleanup",
    "validate_pin_number",
]
