"""
Hardware Module

GPIO driver abstraction and pin change events for the home controller.

Provides automatic detection and graceful fallback between the real
Raspberry Pi driver and a mock implementation for testing.

Public API:
    - HardwareFactory: Factory for creating GPIO drivers
    - create_gpio: Quick GPIO creation (mode from settings, or forced mock)
    - GPIOInterface: Driver capability contract
    - EventManager: Per-pin polling loops with change callbacks
    - PinEventConfiguration / PinEventFilter: What to watch
    - PinEventsConfig: YAML list of pins to watch

Usage:
    from hardware import EventManager, PinEventConfiguration, create_gpio

    gpio = create_gpio()
    events = EventManager(gpio)
    events.register_event(PinEventConfiguration(17, on_event=print))
"""

from hardware.config import PinEventsConfig
from hardware.factory import HardwareFactory, create_gpio
from hardware.interfaces.gpio_interface import (
    GPIOError,
    GPIOInterface,
    PinInfo,
    PinMode,
    PinState,
)
from hardware.pin_events import (
    ChangeEvent,
    DriverUnavailableError,
    EventGenerator,
    EventManager,
    PinConfigurationError,
    PinEventConfiguration,
    PinEventFilter,
    RegistrationResult,
)

__all__ = [
    "ChangeEvent",
    "DriverUnavailableError",
    "EventGenerator",
    "EventManager",
    "GPIOError",
    "GPIOInterface",
    "HardwareFactory",
    "PinConfigurationError",
    "PinEventConfiguration",
    "PinEventFilter",
    "PinEventsConfig",
    "PinInfo",
    "PinMode",
    "PinState",
    "RegistrationResult",
    "create_gpio",
]
