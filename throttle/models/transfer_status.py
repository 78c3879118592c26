"""
Transfer Status Model

Immutable snapshot of upload progress handed out by StatusMonitor.
"""

from dataclasses import dataclass
from typing import Optional

from throttle.constants import PROGRESS_UNKNOWN


@dataclass(frozen=True)
class TransferStatus:
    """
    Point-in-time view of a transfer.

    All fields come from the same locked read, so they are always
    consistent with each other.

    Attributes:
        bytes_transferred: Payload bytes read so far (never above total_bytes)
        total_bytes: Expected payload size (0 = unknown)
        average_rate_bps: Average rate since the first read, bytes/second
        percent_complete: 0-100, or None if total is unknown
        estimated_time_remaining: Seconds left, or None if not computable
        elapsed_time: Seconds since the first read
        start_time: Monitor clock value at the first read (None = not started)
    """

    bytes_transferred: int = 0
    total_bytes: int = 0
    average_rate_bps: int = 0
    percent_complete: Optional[float] = None
    estimated_time_remaining: Optional[float] = None
    elapsed_time: float = 0.0
    start_time: Optional[float] = None

    @property
    def started(self) -> bool:
        """True once the first payload byte has been requested"""
        return self.start_time is not None

    @property
    def progress(self) -> str:
        """Percentage as display string, e.g. "42.0%" or "n/a" """
        if self.percent_complete is None:
            return PROGRESS_UNKNOWN
        return f"{self.percent_complete:.1f}%"

    @property
    def is_complete(self) -> bool:
        """True if the whole known payload has been read"""
        return self.total_bytes > 0 and self.bytes_transferred >= self.total_bytes

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/JSON output"""
        return {
            "bytes_transferred": self.bytes_transferred,
            "total_bytes": self.total_bytes,
            "average_rate_bps": self.average_rate_bps,
            "percent_complete": self.percent_complete,
            "progress": self.progress,
            "estimated_time_remaining": self.estimated_time_remaining,
            "elapsed_time": self.elapsed_time,
        }
