"""
Pin Events Package

Polling-based GPIO change detection.

Public API:
    - EventManager: Registry of per-pin polling loops
    - EventGenerator: Polling loop + edge detection for one pin
    - PinEventConfiguration: Which pin/mode/filter to watch and the callback
    - PinEventFilter: Which transitions produce events
    - ChangeEvent: Payload handed to callbacks
    - RegistrationResult: Typed outcome of a registration

Usage:
    from hardware import create_gpio
    from hardware.pin_events import EventManager, PinEventConfiguration

    events = EventManager(create_gpio())
    events.register_event(PinEventConfiguration(17, on_event=print))
"""

from hardware.pin_events.exceptions import (
    DriverUnavailableError,
    PinConfigurationError,
    PinEventError,
)
from hardware.pin_events.generator import EventGenerator
from hardware.pin_events.manager import EventManager
from hardware.pin_events.models import (
    ChangeEvent,
    PinEventConfiguration,
    PinEventFilter,
    RegistrationResult,
    SampleState,
)

__all__ = [
    "ChangeEvent",
    "DriverUnavailableError",
    "EventGenerator",
    "EventManager",
    "PinConfigurationError",
    "PinEventConfiguration",
    "PinEventError",
    "PinEventFilter",
    "RegistrationResult",
    "SampleState",
]
