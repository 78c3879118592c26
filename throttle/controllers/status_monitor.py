"""
Status Monitor

Lock-protected transfer statistics shared between the upload thread
(writer) and the progress reporter (reader).

One lock guards every field: a snapshot never mixes bytes from one update
with a rate from another.
"""

import logging
import threading
import time
from typing import Callable, Optional

from throttle.models.transfer_status import TransferStatus


class StatusMonitor:
    """
    Mutable progress record for one upload.

    This class:
    - Counts bytes read from the payload stream
    - Clamps the count to the expected size (multipart framing adds bytes)
    - Derives average rate, percentage and ETA on every update
    - Hands out consistent snapshots to other threads

    Usage:
        monitor = StatusMonitor(total_bytes=10_000_000)
        monitor.mark_started()
        monitor.record_read(8192)
        status = monitor.snapshot()
        print(status.progress)  # "0.1%"
    """

    def __init__(
        self,
        total_bytes: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize monitor.

        Args:
            total_bytes: Expected payload size (0 = unknown)
            clock: Monotonic time source in seconds (injectable for tests)
        """
        self.logger = logging.getLogger(__name__)
        self._clock = clock
        self._lock = threading.Lock()

        self._total_bytes = max(0, int(total_bytes))
        self._bytes_transferred = 0
        self._start_time: Optional[float] = None
        self._average_rate_bps = 0
        self._percent_complete: Optional[float] = (
            0.0 if self._total_bytes > 0 else None
        )
        self._estimated_time_remaining: Optional[float] = None

    @property
    def total_bytes(self) -> int:
        """Expected payload size"""
        return self._total_bytes

    def mark_started(self) -> None:
        """Record the start time (only the first call has any effect)"""
        with self._lock:
            if self._start_time is None:
                self._start_time = self._clock()
                self.logger.debug("Transfer started")

    def record_read(self, n: int) -> None:
        """
        Account for `n` bytes read from the payload stream.

        Args:
            n: Bytes returned by the underlying read
        """
        if n <= 0:
            return

        with self._lock:
            now = self._clock()
            if self._start_time is None:
                self._start_time = now

            self._bytes_transferred += n

            if self._total_bytes > 0:
                # Multipart bodies carry headers on top of the file bytes
                if self._bytes_transferred > self._total_bytes:
                    self._bytes_transferred = self._total_bytes
                self._percent_complete = (
                    self._bytes_transferred / self._total_bytes * 100
                )

            elapsed = now - self._start_time
            if elapsed > 0:
                self._average_rate_bps = int(self._bytes_transferred / elapsed)

            if self._total_bytes > 0 and self._average_rate_bps > 0:
                remaining = self._total_bytes - self._bytes_transferred
                self._estimated_time_remaining = remaining / self._average_rate_bps
            else:
                self._estimated_time_remaining = None

    def snapshot(self) -> TransferStatus:
        """
        Get a consistent copy of the current statistics.

        Never blocks on I/O - safe to call from the reporting thread.

        Returns:
            Immutable TransferStatus
        """
        with self._lock:
            elapsed = 0.0
            if self._start_time is not None:
                elapsed = self._clock() - self._start_time

            return TransferStatus(
                bytes_transferred=self._bytes_transferred,
                total_bytes=self._total_bytes,
                average_rate_bps=self._average_rate_bps,
                percent_complete=self._percent_complete,
                estimated_time_remaining=self._estimated_time_remaining,
                elapsed_time=elapsed,
                start_time=self._start_time,
            )
