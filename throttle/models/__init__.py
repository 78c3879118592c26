"""
Models Package

Data structures for the rate-limited transport.
"""

from throttle.models.time_window import TimeWindow
from throttle.models.transfer_status import TransferStatus

__all__ = [
    "TimeWindow",
    "TransferStatus",
]
