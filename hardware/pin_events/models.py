"""
Pin Event Models

Value types shared by the event generator, the event manager and the
application callbacks.
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from hardware.interfaces.gpio_interface import PinInfo, PinMode, PinState
from hardware.pin_events.exceptions import PinConfigurationError


class PinEventFilter(Enum):
    """Which logical transitions produce a ChangeEvent"""

    NONE = "none"  # Never fires
    ACTIVATED = "activated"  # Anything -> ON
    DEACTIVATED = "deactivated"  # Anything -> OFF
    BOTH = "both"  # Any change

    def matches(self, previous: PinState, current: PinState) -> bool:
        """
        Check whether a transition passes this filter.

        Args:
            previous: Logical state of the previous sample
            current: Logical state of the new sample

        Returns:
            True if a ChangeEvent should be dispatched
        """
        if self is PinEventFilter.ACTIVATED:
            return current is PinState.ON and previous is not PinState.ON
        if self is PinEventFilter.DEACTIVATED:
            return current is PinState.OFF and previous is not PinState.OFF
        if self is PinEventFilter.BOTH:
            return previous is not current
        return False


class RegistrationResult(Enum):
    """Outcome of starting a polling loop for a pin"""

    REGISTERED = "registered"
    INVALID_PIN = "invalid_pin"
    DUPLICATE = "duplicate"
    UNSUPPORTED_MODE = "unsupported_mode"
    DRIVER_UNAVAILABLE = "driver_unavailable"
    INITIALIZATION_FAILED = "initialization_failed"
    TIMEOUT = "timeout"

    @property
    def succeeded(self) -> bool:
        return self is RegistrationResult.REGISTERED


@dataclass(frozen=True)
class SampleState:
    """One sample of a pin: logical state plus the raw digital value"""

    state: PinState
    value: bool

    @classmethod
    def from_digital(cls, value: bool) -> "SampleState":
        value = bool(value)
        return cls(PinState.from_digital(value), value)

    @classmethod
    def baseline(cls) -> "SampleState":
        """Sentinel seeded before the first real read (not a hardware value)"""
        return cls(PinState.OFF, True)


@dataclass(frozen=True)
class ChangeEvent:
    """
    Payload handed to on_event callbacks.

    Carries both the new and the previous sample so consumers need no
    state of their own.
    """

    pin: int
    current_state: PinState
    current_value: bool
    pin_mode: PinMode
    matched_filter: PinEventFilter
    previous_state: PinState
    previous_value: bool
    pin_info: Optional[PinInfo] = None
    timestamp: float = field(default_factory=time.time)


EventCallback = Callable[[ChangeEvent], None]


def _coerce_enum(enum_cls, value, field_name: str):
    """Accept an enum member, its value, or its name (case-insensitive)"""
    if isinstance(value, enum_cls):
        return value

    if isinstance(value, str):
        key = value.strip().lower()
        for member in enum_cls:
            if key in (member.value, member.name.lower()):
                return member

    valid = ", ".join(member.value for member in enum_cls)
    raise PinConfigurationError(
        f"Invalid {field_name}: {value!r}. Expected one of: {valid}"
    )


@dataclass(frozen=True, eq=False)
class PinEventConfiguration:
    """
    Which pin to watch, in which mode, and for which transitions.

    Pin, mode and filter are fixed once created. Construction never touches
    hardware - validity against the board is checked by the manager and the
    generator before any pin is configured.

    is_registered is owned by the generator that polls this pin: it is True
    exactly while that polling loop is running.

    Usage:
        config = PinEventConfiguration(
            pin=17,
            mode=PinMode.INPUT,
            event_filter=PinEventFilter.ACTIVATED,
            on_event=lambda event: print(event.current_state),
        )
    """

    pin: int
    mode: PinMode = PinMode.INPUT
    event_filter: PinEventFilter = PinEventFilter.BOTH
    on_event: Optional[EventCallback] = None
    _registered: threading.Event = field(
        default_factory=threading.Event, init=False, repr=False,
    )

    def __post_init__(self):
        if isinstance(self.pin, bool) or not isinstance(self.pin, int):
            raise PinConfigurationError(
                f"Pin must be an integer, got {type(self.pin).__name__}"
            )

        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "mode", _coerce_enum(PinMode, self.mode, "pin mode"))
        object.__setattr__(
            self,
            "event_filter",
            _coerce_enum(PinEventFilter, self.event_filter, "event filter"),
        )

        if self.on_event is not None and not callable(self.on_event):
            raise PinConfigurationError("on_event must be callable")

    @property
    def is_registered(self) -> bool:
        return self._registered.is_set()

    def _set_registered(self, registered: bool) -> None:
        """Only the owning EventGenerator calls this"""
        if registered:
            self._registered.set()
        else:
            self._registered.clear()
