"""
Controllers Package

Stateful pieces of the throttled read path.
"""

from throttle.controllers.rate_limited_reader import RateLimitedReader
from throttle.controllers.status_monitor import StatusMonitor
from throttle.controllers.token_bucket import TokenBucketLimiter

__all__ = [
    "RateLimitedReader",
    "StatusMonitor",
    "TokenBucketLimiter",
]
