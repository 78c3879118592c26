"""
Utils Package

Shared helpers for the throttle module.
"""

from throttle.utils.format_utils import format_duration, format_rate, format_size

__all__ = [
    "format_duration",
    "format_rate",
    "format_size",
]
