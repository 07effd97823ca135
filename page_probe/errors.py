"""Exception taxonomy for scenario execution.

The runner maps exceptions raised by scenario bodies to result statuses:

- ``AssertionError`` (including :class:`ExpectationFailed`) -> ``failed``
- ``TimeoutError`` -> ``timed_out``
- anything else, :class:`DriverError` included -> ``errored``
"""


class ExpectationFailed(AssertionError):
    """Raised when an explicit expectation inside a scenario body is false."""


class DriverError(Exception):
    """Raised when the browser driver fails to perform an operation."""


class NavigationError(DriverError):
    """Raised when a page could not be navigated to."""


class SessionLostError(DriverError):
    """Raised when the page or browser behind a handle is gone."""


class ConfigError(ValueError):
    """Raised when a run configuration cannot be loaded."""


class TargetUnreachableError(Exception):
    """Raised when the application under test does not answer."""


def expect(condition: bool, message: str) -> None:
    """Raise :class:`ExpectationFailed` with ``message`` unless ``condition``."""
    if not condition:
        raise ExpectationFailed(message)


class DriverNotFoundError(ConfigError):
    """Raised when no driver is registered under the requested key."""


class InvalidDriverError(ConfigError):
    """Raised when a registered driver does not resolve to a manifest."""
