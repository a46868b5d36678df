"""
Pin Events Configuration Handler

Reads the list of pins to watch from a YAML file.
Provides defaults and validation.

File format (config/pin_events.yaml):

    poll_interval: 0.001         # seconds, optional
    registration_timeout: 2.0    # seconds, optional
    pins:
      - pin: 17
        mode: input
        filter: activated
      - pin: 27
        mode: output
        filter: both
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from config.settings import PIN_EVENTS_CONFIG_PATH
from hardware.constants import POLL_INTERVAL, REGISTRATION_TIMEOUT
from hardware.pin_events.exceptions import PinConfigurationError
from hardware.pin_events.models import EventCallback, PinEventConfiguration
from hardware.utils.gpio_utils import validate_pin_number


class PinEventsConfig:
    """
    Pin event configuration with YAML file support.

    Reads from config/pin_events.yaml if it exists, otherwise watches no
    pins and uses timing defaults from constants.py. Entries that fail
    validation are logged and skipped; the rest still load.

    Usage:
        config = PinEventsConfig()
        for pin_config in config.build_configurations(on_event):
            manager.register_event(pin_config)
    """

    DEFAULT_CONFIG_PATH = PIN_EVENTS_CONFIG_PATH

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to YAML config file (None = use default)
        """
        self.logger = logging.getLogger(__name__)
        self.config_path = Path(config_path or self.DEFAULT_CONFIG_PATH)

        # Load configuration (defaults + file overrides)
        self._config = self._load_config()

        self.logger.info(
            f"Pin events config loaded: {len(self._config['pins'])} pin(s) "
            f"from {self.config_path}"
        )

    def _get_defaults(self) -> Dict[str, Any]:
        """Get default configuration values from constants"""
        return {
            'poll_interval': POLL_INTERVAL,
            'registration_timeout': REGISTRATION_TIMEOUT,
            'pins': [],
        }

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file or use defaults"""
        config = self._get_defaults()

        if not self.config_path.exists():
            self.logger.info(
                f"Config file not found at {self.config_path}. Using defaults."
            )
            return config

        try:
            with open(self.config_path, 'r') as f:
                file_config = yaml.safe_load(f) or {}

            if not isinstance(file_config, dict):
                raise PinConfigurationError("top level must be a mapping")

            config.update(file_config)
        except (OSError, yaml.YAMLError, PinConfigurationError) as e:
            self.logger.warning(
                f"Failed to load config from {self.config_path}: {e}. "
                f"Using defaults."
            )
            return self._get_defaults()

        self._validate_config(config)
        return config

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate timing values and normalize the pin list"""
        defaults = self._get_defaults()

        for key in ('poll_interval', 'registration_timeout'):
            value = config.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                self.logger.warning(
                    f"Invalid {key}: {value!r}. Using default {defaults[key]}"
                )
                config[key] = defaults[key]

        pins = config.get('pins') or []
        if not isinstance(pins, list):
            self.logger.warning("'pins' must be a list. Ignoring it.")
            pins = []

        entries: List[Dict[str, Any]] = []
        seen: set[int] = set()
        for index, entry in enumerate(pins):
            try:
                normalized = self._validate_entry(entry)
            except (PinConfigurationError, ValueError) as e:
                self.logger.warning(f"Skipping pin entry #{index}: {e}")
                continue

            if normalized['pin'] in seen:
                self.logger.warning(
                    f"Skipping pin entry #{index}: pin {normalized['pin']} listed twice"
                )
                continue

            seen.add(normalized['pin'])
            entries.append(normalized)

        config['pins'] = entries

    def _validate_entry(self, entry: Any) -> Dict[str, Any]:
        """Check one {pin, mode, filter} entry"""
        if not isinstance(entry, dict) or 'pin' not in entry:
            raise PinConfigurationError(f"expected a mapping with 'pin', got {entry!r}")

        validate_pin_number(entry['pin'])

        # Build once to get mode/filter validated the same way as at runtime
        probe = PinEventConfiguration(
            pin=entry['pin'],
            mode=entry.get('mode', 'input'),
            event_filter=entry.get('filter', 'both'),
        )
        return {
            'pin': probe.pin,
            'mode': probe.mode,
            'filter': probe.event_filter,
        }

    @property
    def poll_interval(self) -> float:
        return float(self._config['poll_interval'])

    @property
    def registration_timeout(self) -> float:
        return float(self._config['registration_timeout'])

    @property
    def pin_entries(self) -> List[Dict[str, Any]]:
        """Validated {pin, mode, filter} entries"""
        return [dict(entry) for entry in self._config['pins']]

    def build_configurations(
        self,
        on_event: Optional[EventCallback] = None,
    ) -> List[PinEventConfiguration]:
        """
        Create fresh PinEventConfiguration objects for every configured pin.

        Args:
            on_event: Callback attached to every configuration

        Returns:
            One configuration per valid entry, in file order
        """
        return [
            PinEventConfiguration(
                pin=entry['pin'],
                mode=entry['mode'],
                event_filter=entry['filter'],
                on_event=on_event,
            )
            for entry in self._config['pins']
        ]

    def get(self, key: str, default: Any = None) -> Any:
        """Get raw configuration value"""
        return self._config.get(key, default)
