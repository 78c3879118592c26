"""
Throttle Module

Rate-limited, observable HTTP transport for large streaming uploads.

Public API:
    - LimitingTransport: httplib2-compatible transport that throttles the payload
    - RateLimitedReader: Throttled, observable byte stream
    - TokenBucketLimiter: Blocking token bucket (bytes/s)
    - StatusMonitor: Thread-safe transfer statistics
    - ProgressReporter: Periodic / on-demand progress lines
    - TimeWindow: Daily window when the rate limit applies
    - TransferStatus: Snapshot of transfer progress
    - ThrottleConfig: Defaults + YAML + overrides

Usage:
    from throttle import LimitingTransport, ProgressReporter, TimeWindow

    transport = LimitingTransport(
        httplib2.Http(),
        file_size=os.path.getsize("video.mp4"),
        rate_limit_kbps=8000,
        window=TimeWindow.parse("09:00-17:00"),
    )
    with ProgressReporter(transport.get_monitor_status):
        ...
"""

from throttle.config import ThrottleConfig
from throttle.controllers.rate_limited_reader import RateLimitedReader
from throttle.controllers.status_monitor import StatusMonitor
from throttle.controllers.token_bucket import TokenBucketLimiter
from throttle.errors import (
    CancellationError,
    ConfigurationError,
    ThrottleError,
    WaitTimeoutError,
)
from throttle.models.time_window import TimeWindow
from throttle.models.transfer_status import TransferStatus
from throttle.reporting.progress_reporter import ProgressReporter
from throttle.transport.limiting_transport import LimitingTransport, is_payload_request

# Public API
__all__ = [
    "CancellationError",
    "ConfigurationError",
    "LimitingTransport",
    "ProgressReporter",
    "RateLimitedReader",
    "StatusMonitor",
    "ThrottleConfig",
    "ThrottleError",
    "TimeWindow",
    "TokenBucketLimiter",
    "TransferStatus",
    "WaitTimeoutError",
    "is_payload_request",
]
