"""
Hardware Interfaces Package

Exposes the abstract driver capability and its value types.
"""

from hardware.interfaces.gpio_interface import (
    GPIOError,
    GPIOInterface,
    PinInfo,
    PinMode,
    PinState,
)

# Public API (sorted alphabetically)
__all__ = [
    "GPIOError",
    "GPIOInterface",
    "PinInfo",
    "PinMode",
    "PinState",
]
