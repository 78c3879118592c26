"""
Token Bucket Limiter

Byte-rate limiter for the upload stream.

The bucket starts full and refills continuously at the configured rate.
It can never hold more than `burst` tokens, so the largest instantaneous
transfer is one burst. Each token is permission to send one byte.
"""

import logging
import threading
import time
from typing import Optional

from throttle.constants import KBPS_TO_BYTES_PER_SECOND
from throttle.errors import CancellationError, WaitTimeoutError


class TokenBucketLimiter:
    """
    Thread-safe token bucket.

    Usage:
        limiter = TokenBucketLimiter.from_kbps(8000, burst=8192)
        limiter.wait_n(len(chunk))   # blocks until the bytes may be sent

    Cancellation:
        stop = threading.Event()
        limiter.wait_n(8192, cancel_event=stop)  # raises if stop gets set
    """

    def __init__(self, rate_bps: float, burst: int):
        """
        Initialize the bucket.

        Args:
            rate_bps: Refill rate in bytes per second (> 0)
            burst: Bucket capacity in bytes (> 0)
        """
        if rate_bps <= 0:
            raise ValueError(f"rate_bps must be positive, got {rate_bps}")
        if burst <= 0:
            raise ValueError(f"burst must be positive, got {burst}")

        self.logger = logging.getLogger(__name__)
        self.rate_bps = float(rate_bps)
        self.burst = int(burst)

        self._tokens = float(self.burst)
        self._last_refill = time.monotonic()
        self._lock = threading.Lock()

        self.logger.debug(
            f"Token bucket created: {self.rate_bps:.0f} B/s, burst {self.burst} bytes",
        )

    @classmethod
    def from_kbps(cls, rate_kbps: int, burst: int) -> "TokenBucketLimiter":
        """Create a limiter from a kilobits-per-second rate"""
        return cls(rate_kbps * KBPS_TO_BYTES_PER_SECOND, burst)

    def _refill(self, now: float) -> None:
        """Add tokens earned since the last refill (caller holds the lock)"""
        elapsed = now - self._last_refill
        self._tokens = min(self.burst, self._tokens + elapsed * self.rate_bps)
        self._last_refill = now

    def wait_n(
        self,
        n: int,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Block until `n` tokens are available, then consume them.

        Args:
            n: Number of bytes to pay for
            cancel_event: Interrupts the wait when set
            timeout: Give up if the tokens can't be had within this many seconds

        Raises:
            ValueError: If n exceeds the burst size (could never be satisfied)
            CancellationError: If cancelled
            WaitTimeoutError: If the deadline would be missed
        """
        if n > self.burst:
            raise ValueError(f"Requested {n} tokens exceeds burst of {self.burst}")
        if n <= 0:
            return

        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise CancellationError("Throttle wait cancelled")

            with self._lock:
                now = time.monotonic()
                self._refill(now)
                if self._tokens >= n:
                    self._tokens -= n
                    return
                delay = (n - self._tokens) / self.rate_bps

            if deadline is not None and now + delay > deadline:
                raise WaitTimeoutError(
                    f"Throttle wait of {delay:.3f}s would exceed deadline",
                )

            if cancel_event is not None:
                if cancel_event.wait(delay):
                    raise CancellationError("Throttle wait cancelled")
            else:
                time.sleep(delay)

    @property
    def available(self) -> float:
        """Tokens currently in the bucket"""
        with self._lock:
            self._refill(time.monotonic())
            return self._tokens
