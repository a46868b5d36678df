"""
Event Generator Tests

Tests for the single-pin polling loop showing:
- Initialization protocol and inert failure modes
- Edge detection against scripted read sequences
- Cooperative stop
- Resilience to read and callback errors

Scripted reads make the sequences deterministic: MockGPIO hands out the
scripted values in order, then keeps reading the last one.

To run these tests:
    pytest tests/hardware/pin_events/test_event_generator.py -v
"""

import threading

import pytest

from hardware.interfaces.gpio_interface import GPIOError, PinMode, PinState
from hardware.pin_events.exceptions import (
    DriverUnavailableError,
    PinConfigurationError,
)
from hardware.pin_events.generator import EventGenerator
from hardware.pin_events.models import (
    PinEventConfiguration,
    PinEventFilter,
    RegistrationResult,
)

PIN = 17
POLL = 0.001


def record_with_read_count(mock_gpio, pin, sink):
    """Callback that remembers which read produced each event"""
    def on_event(event):
        sink.append((mock_gpio.get_read_count(pin), event))
    return on_event


def run_script(mock_gpio, generators, values, event_filter, mode=PinMode.INPUT):
    """Start a generator on a scripted pin and let it consume the whole script"""
    received = []
    mock_gpio.script_reads(PIN, values)
    config = PinEventConfiguration(
        PIN, mode, event_filter, record_with_read_count(mock_gpio, PIN, received),
    )
    generator = generators.add(EventGenerator(mock_gpio, config, poll_interval=POLL))

    assert generator.wait_until_started(timeout=1.0) is RegistrationResult.REGISTERED
    # Read well past the script so trailing reads prove nothing else fires
    assert mock_gpio.wait_for_reads(PIN, len(values) + 10)

    generator.request_stop()
    assert generator.wait_until_stopped(timeout=1.0)
    return generator, received


# =============================================================================
# CONSTRUCTION
# =============================================================================

@pytest.mark.unit
def test_missing_driver_raises_driver_unavailable():
    with pytest.raises(DriverUnavailableError):
        EventGenerator(None, PinEventConfiguration(PIN))


@pytest.mark.unit
def test_uninitialized_driver_raises_driver_unavailable(mock_gpio):
    mock_gpio.set_initialized(False)

    with pytest.raises(DriverUnavailableError) as exc_info:
        EventGenerator(mock_gpio, PinEventConfiguration(PIN))

    # Distinct from every other error kind
    assert not isinstance(exc_info.value, (GPIOError, PinConfigurationError))


# =============================================================================
# INITIALIZATION
# =============================================================================

@pytest.mark.unit
def test_valid_configuration_starts_polling(mock_gpio, generators):
    config = PinEventConfiguration(PIN, PinMode.INPUT, PinEventFilter.BOTH)
    generator = generators.add(EventGenerator(mock_gpio, config, poll_interval=POLL))

    assert generator.wait_until_started(timeout=1.0) is RegistrationResult.REGISTERED
    assert config.is_registered is True
    assert generator.is_registered is True

    poll_threads = [t for t in threading.enumerate() if t.name == f"PinEvents-Poll-{PIN}"]
    assert len(poll_threads) == 1


@pytest.mark.unit
@pytest.mark.parametrize("pin, mode, expected", [
    (0, PinMode.INPUT, RegistrationResult.INVALID_PIN),
    (41, PinMode.INPUT, RegistrationResult.INVALID_PIN),
    (PIN, PinMode.ALT1, RegistrationResult.UNSUPPORTED_MODE),
    (PIN, PinMode.ALT2, RegistrationResult.UNSUPPORTED_MODE),
])
def test_rejected_configuration_leaves_generator_inert(mock_gpio, pin, mode, expected):
    """Inert generators never register and never sample"""
    config = PinEventConfiguration(pin, mode)
    generator = EventGenerator(mock_gpio, config, poll_interval=POLL)

    assert generator.wait_until_started(timeout=0.5) is expected
    assert config.is_registered is False
    assert mock_gpio.get_read_count(pin) == 0
    assert generator.wait_until_stopped(timeout=0) is True


@pytest.mark.unit
def test_failed_mode_setup_leaves_generator_inert(mock_gpio):
    mock_gpio.fail_set_mode(PIN)
    config = PinEventConfiguration(PIN)

    generator = EventGenerator(mock_gpio, config, poll_interval=POLL)

    assert generator.wait_until_started(timeout=0.5) is RegistrationResult.INITIALIZATION_FAILED
    assert config.is_registered is False
    assert mock_gpio.get_read_count(PIN) == 0


@pytest.mark.unit
def test_output_pin_is_driven_off_before_polling(mock_gpio, generators):
    config = PinEventConfiguration(PIN, PinMode.OUTPUT, PinEventFilter.NONE)
    generator = generators.add(EventGenerator(mock_gpio, config, poll_interval=POLL))

    assert generator.wait_until_started(timeout=1.0).succeeded
    assert mock_gpio.get_pin_level(PIN) is PinState.OFF.digital_value


@pytest.mark.unit
def test_output_pin_comes_up_off(mock_gpio, monkeypatch):
    """Output setup already carries the OFF level, before any write"""
    setups = []
    original_set_pin_mode = mock_gpio.set_pin_mode

    def recording_set_pin_mode(pin, mode, initial_level=None):
        result = original_set_pin_mode(pin, mode, initial_level=initial_level)
        setups.append((mode, initial_level, mock_gpio.get_pin_level(pin)))
        return result

    monkeypatch.setattr(mock_gpio, "set_pin_mode", recording_set_pin_mode)
    monkeypatch.setattr(EventGenerator, "_start_worker", lambda self: None)

    EventGenerator(mock_gpio, PinEventConfiguration(PIN, PinMode.OUTPUT), poll_interval=POLL)

    assert setups == [(PinMode.OUTPUT, True, True)]


@pytest.mark.unit
def test_input_pin_setup_has_no_initial_level(mock_gpio, monkeypatch):
    setups = []
    original_set_pin_mode = mock_gpio.set_pin_mode

    def recording_set_pin_mode(pin, mode, initial_level=None):
        setups.append((mode, initial_level))
        return original_set_pin_mode(pin, mode, initial_level=initial_level)

    monkeypatch.setattr(mock_gpio, "set_pin_mode", recording_set_pin_mode)
    monkeypatch.setattr(EventGenerator, "_start_worker", lambda self: None)

    EventGenerator(mock_gpio, PinEventConfiguration(PIN, PinMode.INPUT), poll_interval=POLL)

    assert setups == [(PinMode.INPUT, None)]


@pytest.mark.unit
def test_configuration_already_polled_is_rejected(mock_gpio, generators):
    config = PinEventConfiguration(PIN)
    first = generators.add(EventGenerator(mock_gpio, config, poll_interval=POLL))
    assert first.wait_until_started(timeout=1.0).succeeded

    second = EventGenerator(mock_gpio, config, poll_interval=POLL)

    assert second.wait_until_started(timeout=0.5) is RegistrationResult.DUPLICATE


# =============================================================================
# EDGE DETECTION
# =============================================================================

@pytest.mark.unit
def test_both_filter_scripted_sequence(mock_gpio, generators):
    """
    Reads [T, T, F, F, T] from the OFF sentinel.

    T maps to OFF (same as baseline), F maps to ON, so events fire on the
    3rd read (OFF -> ON) and the 5th read (ON -> OFF).
    """
    _, received = run_script(
        mock_gpio, generators, [True, True, False, False, True], PinEventFilter.BOTH,
    )

    assert [read for read, _ in received] == [3, 5]

    first, second = (event for _, event in received)
    assert first.pin == PIN
    assert first.current_state is PinState.ON
    assert first.current_value is False
    assert first.previous_state is PinState.OFF
    assert first.previous_value is True
    assert first.matched_filter is PinEventFilter.BOTH
    assert first.pin_mode is PinMode.INPUT

    assert second.current_state is PinState.OFF
    assert second.current_value is True
    assert second.previous_state is PinState.ON
    assert second.previous_value is False


@pytest.mark.unit
def test_first_real_sample_can_be_a_transition(mock_gpio, generators):
    """The baseline is a sentinel, so an initially-ON pin fires at once"""
    _, received = run_script(mock_gpio, generators, [False], PinEventFilter.ACTIVATED)

    assert [read for read, _ in received] == [1]


@pytest.mark.unit
def test_activated_filter_only_reports_on_edges(mock_gpio, generators):
    _, received = run_script(
        mock_gpio, generators, [False, True, True, False, True], PinEventFilter.ACTIVATED,
    )

    assert [read for read, _ in received] == [1, 4]
    assert all(event.current_state is PinState.ON for _, event in received)


@pytest.mark.unit
def test_deactivated_filter_only_reports_off_edges(mock_gpio, generators):
    _, received = run_script(
        mock_gpio, generators, [False, True, False, False, True], PinEventFilter.DEACTIVATED,
    )

    assert [read for read, _ in received] == [2, 5]
    assert all(event.current_state is PinState.OFF for _, event in received)


@pytest.mark.unit
def test_none_filter_never_reports(mock_gpio, generators):
    generator, received = run_script(
        mock_gpio, generators, [False, True, False, True, False], PinEventFilter.NONE,
    )

    assert received == []
    assert generator.get_status()["samples"] >= 5


@pytest.mark.unit
def test_output_pin_events_use_output_mode(mock_gpio, generators):
    _, received = run_script(
        mock_gpio, generators, [True, False], PinEventFilter.BOTH, mode=PinMode.OUTPUT,
    )

    assert [read for read, _ in received] == [2]
    assert received[0][1].pin_mode is PinMode.OUTPUT


@pytest.mark.unit
def test_events_carry_pin_metadata(mock_gpio, generators):
    _, received = run_script(mock_gpio, generators, [False], PinEventFilter.BOTH)

    pin_info = received[0][1].pin_info
    assert pin_info.bcm_pin == PIN
    assert pin_info.physical_pin == 11


@pytest.mark.integration
def test_external_level_change_is_detected(mock_gpio, generators, callback_tracker):
    config = PinEventConfiguration(PIN, PinMode.INPUT, PinEventFilter.BOTH, callback_tracker.track)
    generator = generators.add(EventGenerator(mock_gpio, config, poll_interval=POLL))
    assert generator.wait_until_started(timeout=1.0).succeeded

    mock_gpio.simulate_pulse(PIN, duration=0.05)

    assert callback_tracker.wait_for_calls(2)
    states = [event.current_state for event in callback_tracker.get_events()]
    assert states == [PinState.ON, PinState.OFF]


# =============================================================================
# STOPPING
# =============================================================================

@pytest.mark.unit
def test_stop_is_prompt_and_final(mock_gpio, generators, callback_tracker):
    config = PinEventConfiguration(PIN, PinMode.INPUT, PinEventFilter.BOTH, callback_tracker.track)
    generator = generators.add(EventGenerator(mock_gpio, config, poll_interval=POLL))
    assert generator.wait_until_started(timeout=1.0).succeeded

    generator.request_stop()

    assert generator.wait_until_stopped(timeout=0.5)
    assert config.is_registered is False

    reads_after_stop = mock_gpio.get_read_count(PIN)
    mock_gpio.set_level(PIN, False)
    assert not callback_tracker.wait_for_calls(1, timeout=0.1)
    assert mock_gpio.get_read_count(PIN) == reads_after_stop


@pytest.mark.unit
def test_request_stop_is_idempotent(mock_gpio, generators):
    generator = generators.add(
        EventGenerator(mock_gpio, PinEventConfiguration(PIN), poll_interval=POLL),
    )
    assert generator.wait_until_started(timeout=1.0).succeeded

    generator.request_stop()
    generator.request_stop()

    assert generator.stop_requested
    assert generator.wait_until_stopped(timeout=0.5)


@pytest.mark.unit
def test_request_stop_on_inert_generator_is_harmless(mock_gpio):
    generator = EventGenerator(mock_gpio, PinEventConfiguration(0), poll_interval=POLL)

    generator.request_stop()

    assert generator.wait_until_stopped(timeout=0)
    assert generator.is_registered is False


@pytest.mark.unit
def test_second_loop_on_same_instance_is_refused(mock_gpio, generators):
    """The per-instance guard is held for the whole running loop"""
    generator = generators.add(
        EventGenerator(mock_gpio, PinEventConfiguration(PIN), poll_interval=POLL),
    )
    assert generator.wait_until_started(timeout=1.0).succeeded

    generator._poll_loop()  # Returns immediately instead of polling

    assert generator.is_registered is True


@pytest.mark.unit
def test_refused_loop_resolves_startup(mock_gpio, monkeypatch):
    """A loop that can't take the guard reports DUPLICATE instead of hanging"""
    monkeypatch.setattr(EventGenerator, "_start_worker", lambda self: None)
    config = PinEventConfiguration(PIN)
    generator = EventGenerator(mock_gpio, config, poll_interval=POLL)

    generator._sync.acquire()
    try:
        generator._poll_loop()
    finally:
        generator._sync.release()

    assert generator.wait_until_started(timeout=0) is RegistrationResult.DUPLICATE
    assert config.is_registered is False
    assert mock_gpio.get_read_count(PIN) == 0


# =============================================================================
# FAILURE HANDLING
# =============================================================================

@pytest.mark.unit
def test_read_failures_do_not_stop_polling(mock_gpio, generators, callback_tracker):
    mock_gpio.fail_reads(PIN, 3)
    mock_gpio.script_reads(PIN, [False])
    config = PinEventConfiguration(PIN, PinMode.INPUT, PinEventFilter.BOTH, callback_tracker.track)

    generator = generators.add(EventGenerator(mock_gpio, config, poll_interval=POLL))

    assert generator.wait_until_started(timeout=1.0).succeeded
    assert callback_tracker.wait_for_calls(1)
    assert generator.is_registered is True

    status = generator.get_status()
    assert status["read_errors"] == 3
    assert status["events"] == 1


@pytest.mark.unit
def test_failed_read_keeps_previous_sample(mock_gpio, generators):
    """A failed read between two ON reads must not look like a transition"""
    received = []
    mock_gpio.script_reads(PIN, [False])
    config = PinEventConfiguration(
        PIN, PinMode.INPUT, PinEventFilter.BOTH,
        record_with_read_count(mock_gpio, PIN, received),
    )
    generator = generators.add(EventGenerator(mock_gpio, config, poll_interval=POLL))
    assert generator.wait_until_started(timeout=1.0).succeeded
    assert mock_gpio.wait_for_reads(PIN, 3)

    mock_gpio.fail_reads(PIN, 2)
    assert mock_gpio.wait_for_reads(PIN, mock_gpio.get_read_count(PIN) + 5)

    assert [read for read, _ in received] == [1]


@pytest.mark.unit
def test_callback_errors_do_not_stop_polling(mock_gpio, generators):
    calls = []

    def failing_callback(event):
        calls.append(event)
        raise RuntimeError("callback blew up")

    mock_gpio.script_reads(PIN, [False, True, False])
    config = PinEventConfiguration(PIN, PinMode.INPUT, PinEventFilter.BOTH, failing_callback)
    generator = generators.add(EventGenerator(mock_gpio, config, poll_interval=POLL))

    assert generator.wait_until_started(timeout=1.0).succeeded
    assert mock_gpio.wait_for_reads(PIN, 10)

    assert len(calls) == 3
    assert generator.is_registered is True


@pytest.mark.unit
def test_get_status_reports_configuration(mock_gpio, generators):
    config = PinEventConfiguration(PIN, PinMode.INPUT, PinEventFilter.ACTIVATED)
    generator = generators.add(EventGenerator(mock_gpio, config, poll_interval=POLL))
    assert generator.wait_until_started(timeout=1.0).succeeded

    status = generator.get_status()

    assert status["pin"] == PIN
    assert status["mode"] == "input"
    assert status["event_filter"] == "activated"
    assert status["registered"] is True
    assert status["startup"] == "registered"
    assert status["worker_alive"] is True
