"""
Throttle Errors

Exception types raised by the rate-limited transport.

Errors from the wrapped byte stream are NOT wrapped - they propagate
to the HTTP layer exactly as the stream raised them.
"""


class ThrottleError(Exception):
    """Base class for all throttle errors"""


class ConfigurationError(ThrottleError, ValueError):
    """
    Invalid throttle configuration.

    Examples:
    - Time window not in "HH:MM-HH:MM" form
    - Negative rate limit
    - Unreadable config file values

    Raised at startup, before any bytes are transferred.
    """


class CancellationError(ThrottleError):
    """
    A throttle wait was interrupted.

    Raised when the cancel event is set while waiting for tokens, or when
    the wait would run past its deadline. Bytes read before the wait stay
    counted in the monitor.
    """


class WaitTimeoutError(CancellationError):
    """
    A throttle wait would outlast its deadline.

    Raised when a wait_timeout is configured and the rate limit would
    hold a single read for longer. Uploaders report it as a network error.
    """
