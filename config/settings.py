"""
Central Configuration File

ALL configuration values live here. This is the single source of truth.

Guidelines:
- Machine-specific overrides go in .env, NOT here
- Import these settings in modules: from config.settings import PIN_EVENT_POLL_INTERVAL
- Per-pin event wiring lives in the YAML file at PIN_EVENTS_CONFIG_PATH
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# =============================================================================
# HARDWARE CONFIGURATION
# =============================================================================

# Which GPIO driver to use: "auto" (real if available), "real", or "mock"
GPIO_HARDWARE_MODE = os.getenv("GPIO_HARDWARE_MODE", "auto")

# =============================================================================
# PIN EVENT CONFIGURATION
# =============================================================================

# Delay between two samples of the same pin (seconds)
PIN_EVENT_POLL_INTERVAL = float(os.getenv("PIN_EVENT_POLL_INTERVAL", "0.001"))

# How long register_event() waits for a polling loop to come up (seconds)
PIN_EVENT_REGISTRATION_TIMEOUT = float(
    os.getenv("PIN_EVENT_REGISTRATION_TIMEOUT", "2.0"),
)

# How long shutdown waits for each polling loop to exit (seconds)
PIN_EVENT_STOP_TIMEOUT = float(os.getenv("PIN_EVENT_STOP_TIMEOUT", "1.0"))

# YAML file listing which pins to watch
PIN_EVENTS_CONFIG_PATH = Path(
    os.getenv("PIN_EVENTS_CONFIG_PATH", "config/pin_events.yaml"),
)

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "/var/log/home-controller")
LOG_SERVICE_FILE = "service.log"
