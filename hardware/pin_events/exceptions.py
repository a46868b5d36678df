"""
Pin Event Exceptions

Only the failures that must interrupt the caller are exceptions. Everything
a registration can recoverably run into (invalid pin, duplicate, unsupported
mode, timeout) is reported as a RegistrationResult instead.
"""


class PinEventError(Exception):
    """Base class for pin event subsystem errors"""


class DriverUnavailableError(PinEventError):
    """
    The GPIO driver is missing or not initialized.

    Fatal for the generator (or manager) being constructed: build a new
    instance once a working driver exists, don't retry the same one.
    """


class PinConfigurationError(PinEventError, ValueError):
    """A pin event configuration value is malformed (unknown mode, bad pin type)"""
