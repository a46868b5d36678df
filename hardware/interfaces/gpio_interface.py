"""
GPIO Interface - Driver Capability

This defines the contract (interface) that any GPIO driver must follow.
The pin event subsystem performs ALL hardware interaction through this
narrow interface, so it never knows which board library is underneath.

Why use an abstract interface?
1. Testability: Can swap real GPIO with mock for tests
2. Flexibility: Each hardware backend implements the same capability
3. Simulation: Can run on non-Raspberry Pi machines

Drivers are expected to make concurrent access to DISTINCT pins safe.
The event subsystem performs no locking across pins.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class PinMode(Enum):
    """How a GPIO pin is configured"""

    INPUT = "input"  # Read signals (switches, sensors)
    OUTPUT = "output"  # Drive signals (relays, LEDs)
    ALT1 = "alt1"  # Alternate function 1 (not pollable)
    ALT2 = "alt2"  # Alternate function 2 (not pollable)

    @property
    def is_pollable(self) -> bool:
        """Only plain input/output pins can be sampled by an event loop"""
        return self in (PinMode.INPUT, PinMode.OUTPUT)


class PinState(Enum):
    """
    Logical pin states.

    Active-low wiring: a HIGH (True) digital read means OFF,
    a LOW (False) digital read means ON.
    """

    ON = "on"
    OFF = "off"

    @classmethod
    def from_digital(cls, value: bool) -> "PinState":
        """Map a raw digital read to its logical state"""
        return cls.OFF if value else cls.ON

    @property
    def digital_value(self) -> bool:
        """Digital level that produces this logical state"""
        return self is PinState.OFF


@dataclass(frozen=True)
class PinInfo:
    """
    Static metadata about a GPIO pin.

    bcm_pin is the logical (Broadcom) number used everywhere in this
    project; physical_pin is the position on the 40-pin header.
    """

    bcm_pin: int
    physical_pin: Optional[int] = None
    name: str = ""
    capabilities: frozenset = field(default_factory=frozenset)


class GPIOInterface(ABC):
    """
    Abstract base class for GPIO drivers.

    Any class that inherits from this MUST implement all @abstractmethod methods.
    """

    @abstractmethod
    def is_initialized(self) -> bool:
        """
        Check if the driver is ready for pin operations.

        Returns:
            True once the underlying library is set up and not yet cleaned up
        """

    @abstractmethod
    def is_valid_pin(self, pin: int) -> bool:
        """
        Check a logical pin number against the board.

        Args:
            pin: GPIO pin number (BCM numbering)

        Returns:
            True if the pin is inside the numeric bound AND the board allow-list
        """

    @abstractmethod
    def set_pin_mode(
        self,
        pin: int,
        mode: PinMode,
        initial_level: Optional[bool] = None,
    ) -> bool:
        """
        Configure the hardware mode of a pin.

        Args:
            pin: GPIO pin number (BCM numbering)
            mode: Desired pin mode
            initial_level: Digital level to drive right away (output pins only)

        Returns:
            True on success, False if the driver rejected the request
        """

    @abstractmethod
    def digital_read(self, pin: int) -> bool:
        """
        Read the digital level of a pin.

        Args:
            pin: GPIO pin number

        Returns:
            True for HIGH, False for LOW

        Raises:
            GPIOError: If the read fails
        """

    @abstractmethod
    def digital_write(self, pin: int, value: bool) -> None:
        """
        Drive an output pin HIGH (True) or LOW (False).

        Raises:
            GPIOError: If the pin isn't an output or the write fails
        """

    @abstractmethod
    def get_pin_metadata(self, pin: int) -> PinInfo:
        """
        Get static metadata for a pin.

        Raises:
            GPIOError: If the pin is not valid on this board
        """

    @abstractmethod
    def cleanup(self, pins: Optional[list[int]] = None) -> None:
        """
        Reset GPIO pins to safe state and release resources.

        Args:
            pins: Specific pins to cleanup, or None for all pins
        """


class GPIOError(Exception):
    """
    Custom exception for GPIO-related errors.

    Raised by drivers for hardware faults (failed reads/writes, bad setup).
    """
