"""
Hardware Constants

This file centralizes board layout tables and timing values used by the
GPIO drivers and the pin event subsystem. Tunable values are imported from
config.settings so there is a single source of truth.
"""

from config.settings import (
    PIN_EVENT_POLL_INTERVAL,
    PIN_EVENT_REGISTRATION_TIMEOUT,
    PIN_EVENT_STOP_TIMEOUT,
)

# =============================================================================
# BOARD LAYOUT (Raspberry Pi 40-pin header, BCM numbering)
# =============================================================================

# Numeric bound every logical pin must fall inside
MIN_GPIO_PIN = 1
MAX_GPIO_PIN = 40

# BCM number -> physical header position
# BCM 0/1 are reserved for the HAT ID EEPROM and are left out on purpose
BCM_TO_PHYSICAL_PIN = {
    2: 3,
    3: 5,
    4: 7,
    5: 29,
    6: 31,
    7: 26,
    8: 24,
    9: 21,
    10: 19,
    11: 23,
    12: 32,
    13: 33,
    14: 8,
    15: 10,
    16: 36,
    17: 11,
    18: 12,
    19: 35,
    20: 38,
    21: 40,
    22: 15,
    23: 16,
    24: 18,
    25: 22,
    26: 37,
    27: 13,
}

# Board-specific allow-list of usable logical pins
BCM_GPIO_PINS = frozenset(BCM_TO_PHYSICAL_PIN)

# Alternate functions available on each pin (every pin is plain "gpio" too)
PIN_CAPABILITIES = {
    "i2c": frozenset({2, 3}),
    "spi": frozenset({7, 8, 9, 10, 11}),
    "uart": frozenset({14, 15}),
    "pwm": frozenset({12, 13, 18, 19}),
    "pcm": frozenset({18, 19, 20, 21}),
}


# =============================================================================
# PIN EVENT TIMING
# =============================================================================

# Delay between samples of one pin (seconds), on the order of 1ms
POLL_INTERVAL = PIN_EVENT_POLL_INTERVAL

# Upper bound for a polling loop to report it is running (seconds)
REGISTRATION_TIMEOUT = PIN_EVENT_REGISTRATION_TIMEOUT

# How long to wait for polling loops to exit on shutdown (seconds)
STOP_TIMEOUT = PIN_EVENT_STOP_TIMEOUT

# Polling thread name prefix (thread name is "<prefix>-<pin>")
POLL_THREAD_NAME_PREFIX = "PinEvents-Poll"
