"""
Hardware Implementations Package

Exposes concrete GPIO driver implementations.
"""

from hardware.implementations.mock_gpio import MockGPIO
from hardware.implementations.rpi_gpio import RaspberryPiGPIO

# Public API (sorted alphabetically)
__all__ = [
    "MockGPIO",
    "RaspberryPiGPIO",
]
