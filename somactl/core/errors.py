"""Domain-specific errors for somactl."""

EXIT_NOTHING_TO_DO = 3
EXIT_NO_DEVICES = 4


class SomactlError(Exception):
    """Base error for somactl."""

    exit_code = 1


class ConfigurationError(SomactlError):
    """Raised when startup configuration names no output sink."""

    exit_code = EXIT_NOTHING_TO_DO


class ConfigLoadError(SomactlError):
    """Raised when the config file cannot be read."""


class ConfigValidationError(SomactlError):
    """Raised when config file contents or option values are invalid."""


class DiscoveryStarvationError(SomactlError):
    """Raised when a timed scan ends without registering any device."""

    exit_code = EXIT_NO_DEVICES


class AdapterError(SomactlError):
    """Raised when the Bluetooth adapter cannot be opened."""
