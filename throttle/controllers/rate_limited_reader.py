"""
Rate Limited Reader

File-like wrapper around the upload body. Every read:
1. Decides whether throttling applies right now (rate limit + time window)
2. Reads real bytes from the wrapped stream
3. Pays the token bucket for exactly the bytes it got
4. Updates the shared StatusMonitor

Tokens are charged AFTER the read, so a short read at end of stream is
billed for what it actually returned, not for what was asked.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Optional

from throttle.constants import DEFAULT_BLOCK_SIZE, ReadMode
from throttle.controllers.status_monitor import StatusMonitor
from throttle.controllers.token_bucket import TokenBucketLimiter
from throttle.models.time_window import TimeWindow


class RateLimitedReader:
    """
    Throttled, observable byte stream.

    The reader owns the wrapped stream and closes it. The token bucket is
    created on the first throttled read, with a burst equal to the size of
    that read - i.e. the HTTP client's send block size.

    Usage:
        with open("video.mp4", "rb") as f:
            reader = RateLimitedReader(f, rate_limit_kbps=8000)
            while reader.read(8192):
                pass
            print(reader.monitor.snapshot().average_rate_bps)
    """

    def __init__(
        self,
        stream: Any,
        rate_limit_kbps: int = 0,
        window: Optional[TimeWindow] = None,
        monitor: Optional[StatusMonitor] = None,
        cancel_event: Optional[threading.Event] = None,
        wait_timeout: Optional[float] = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize reader.

        Args:
            stream: Object with read(size) -> bytes
            rate_limit_kbps: Bandwidth cap in kbps (0 = unlimited)
            window: Daily window when the cap applies (None/zero = always)
            monitor: Shared progress record (created if not given)
            cancel_event: Set to interrupt a throttle wait
            wait_timeout: Longest single throttle wait in seconds (None = unbounded)
            now: Wall-clock source for window checks (injectable for tests)
        """
        self.logger = logging.getLogger(__name__)

        self._stream = stream
        self.rate_limit_kbps = rate_limit_kbps
        self.window = window or TimeWindow()
        self.monitor = monitor or StatusMonitor()
        self.cancel_event = cancel_event
        self.wait_timeout = wait_timeout
        self._now = now

        self._limiter: Optional[TokenBucketLimiter] = None
        self._lock = threading.Lock()
        self._closed = False

    @property
    def limiter(self) -> Optional[TokenBucketLimiter]:
        """Token bucket, or None until the first throttled read"""
        return self._limiter

    @property
    def stream(self) -> Any:
        """Currently wrapped stream"""
        return self._stream

    @property
    def closed(self) -> bool:
        return self._closed

    def readable(self) -> bool:
        return True

    def read_mode(self) -> ReadMode:
        """Decide whether the next read is throttled"""
        if self.rate_limit_kbps <= 0:
            return ReadMode.UNTHROTTLED
        if self.window.is_zero or self.window.contains(self._now()):
            return ReadMode.THROTTLED
        return ReadMode.UNTHROTTLED

    def read(self, size: Optional[int] = -1) -> bytes:
        """
        Read up to `size` bytes, throttling if required.

        When throttled, a request larger than the burst is clamped and a
        short read is returned.

        Args:
            size: Maximum bytes to return (negative/None = as much as allowed)

        Returns:
            Bytes read; b"" at end of stream

        Raises:
            CancellationError: If the throttle wait was cancelled
            WaitTimeoutError: If the throttle wait would outlast wait_timeout
            Exception: Whatever the wrapped stream raised, unchanged
        """
        if size is None:
            size = -1

        with self._lock:
            self.monitor.mark_started()

            mode = self.read_mode()

            if mode is ReadMode.THROTTLED:
                if self._limiter is None:
                    burst = size if size > 0 else DEFAULT_BLOCK_SIZE
                    self._limiter = TokenBucketLimiter.from_kbps(
                        self.rate_limit_kbps,
                        burst,
                    )
                    self.logger.debug(
                        f"Rate limiting at {self.rate_limit_kbps} kbps "
                        f"(burst {burst} bytes, window {self.window})",
                    )
                burst = self._limiter.burst
                if size < 0 or size > burst:
                    size = burst

            data = self._stream.read(size)
            if not data:
                return b""

            read = len(data)
            try:
                if mode is ReadMode.THROTTLED:
                    self._limiter.wait_n(
                        read,
                        cancel_event=self.cancel_event,
                        timeout=self.wait_timeout,
                    )
            finally:
                self.monitor.record_read(read)

            return data

    def reattach(self, stream: Any) -> None:
        """
        Point the reader at a new body, keeping monitor and limiter.

        Used when the HTTP layer sends another request for the same upload
        (next resumable chunk, retry, redirect). The previous stream is
        closed unless it is the very same object being sent again.

        Args:
            stream: New body to read from
        """
        with self._lock:
            previous = self._stream
            if previous is not None and previous is not stream:
                self._close_stream(previous)
            self._stream = stream
            self._closed = False

    def close(self) -> None:
        """Close the wrapped stream. Monitor and limiter hold no resources."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._stream is not None:
                self._close_stream(self._stream)

    @staticmethod
    def _close_stream(stream: Any) -> None:
        close = getattr(stream, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "RateLimitedReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
