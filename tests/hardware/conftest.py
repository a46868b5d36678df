"""
Test Configuration and Fixtures

This file contains pytest fixtures that are shared across multiple test files.
Fixtures are reusable test setup/teardown code.

To use pytest:
    pip install -e ".[test]"
    pytest tests/hardware/
"""

import threading

import pytest

from hardware.implementations.mock_gpio import MockGPIO
from hardware.pin_events.manager import EventManager

# Short enough to keep tests fast, same order as production
TEST_POLL_INTERVAL = 0.001


# =============================================================================
# GPIO FIXTURES
# =============================================================================

@pytest.fixture
def mock_gpio():
    """
    Provide a fresh MockGPIO instance for each test.

    Usage in test:
        def test_something(mock_gpio):
            mock_gpio.set_pin_mode(17, PinMode.INPUT)
    """
    gpio = MockGPIO()
    yield gpio
    gpio.cleanup()


# =============================================================================
# PIN EVENT FIXTURES
# =============================================================================

@pytest.fixture
def event_manager(mock_gpio):
    """
    Provide an EventManager on mock GPIO.

    Every polling loop is stopped and joined after the test so no thread
    leaks into the next one.
    """
    manager = EventManager(
        mock_gpio,
        poll_interval=TEST_POLL_INTERVAL,
        registration_timeout=1.0,
    )
    yield manager
    manager.stop_all()
    manager.wait_until_stopped(timeout=1.0)


@pytest.fixture
def generators():
    """
    Collect EventGenerators created directly by a test and stop them afterwards.

    Usage:
        def test_loop(mock_gpio, generators):
            gen = generators.add(EventGenerator(mock_gpio, config))
    """
    class GeneratorRegistry:
        def __init__(self):
            self.items = []

        def add(self, generator):
            self.items.append(generator)
            return generator

    registry = GeneratorRegistry()
    yield registry
    for generator in registry.items:
        generator.request_stop()
        generator.wait_until_stopped(timeout=1.0)


# =============================================================================
# HELPER FIXTURES
# =============================================================================

@pytest.fixture
def callback_tracker():
    """
    Provide a thread-safe helper for tracking callback calls.

    Pin event callbacks run on polling threads, so tests wait for calls
    instead of sleeping.

    Usage:
        def test_callback(event_manager, callback_tracker):
            config = PinEventConfiguration(17, on_event=callback_tracker.track)
            ...
            assert callback_tracker.wait_for_calls(1)
    """
    class CallbackTracker:
        def __init__(self):
            self.calls = []
            self._condition = threading.Condition()

        def track(self, *args, **kwargs):
            """Record a callback invocation"""
            with self._condition:
                self.calls.append({'args': args, 'kwargs': kwargs})
                self._condition.notify_all()

        def wait_for_calls(self, count: int, timeout: float = 2.0) -> bool:
            """Block until at least `count` calls were recorded"""
            with self._condition:
                return self._condition.wait_for(
                    lambda: len(self.calls) >= count, timeout=timeout,
                )

        def was_called(self) -> bool:
            """Check if callback was called"""
            return len(self.calls) > 0

        def get_call_count(self) -> int:
            """Get number of times callback was called"""
            return len(self.calls)

        def get_events(self) -> list:
            """First positional argument of every call (the ChangeEvent)"""
            with self._condition:
                return [call['args'][0] for call in self.calls]

        def reset(self):
            """Clear call history"""
            with self._condition:
                self.calls.clear()

    return CallbackTracker()


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================

def pytest_configure(config):
    """
    Configure pytest with custom markers.

    Markers let you categorize and selectively run tests:
        pytest -m unit          # Only unit tests
        pytest -m integration   # Only integration tests
        pytest -m "not slow"    # Skip slow tests
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (may be slower)")
    config.addinivalue_line("markers", "slow: Slow tests (use sparingly)")
    config.addinivalue_line("markers", "hardware: Tests requiring real hardware")
