"""
Format Utilities

Helpers for turning transfer statistics into human-readable text.
"""

from typing import Optional

from throttle.constants import KBPS_TO_BYTES_PER_SECOND, MBPS_IN_BYTES_PER_SECOND


def format_size(num_bytes: float) -> str:
    """
    Format byte size as human-readable string.

    Args:
        num_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 GB")

    Example:
        print(format_size(1_500_000_000))  # "1.40 GB"
    """
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if num_bytes < 1024.0:
            return f"{num_bytes:.2f} {unit}"
        num_bytes /= 1024.0
    return f"{num_bytes:.2f} PB"


def format_duration(seconds: Optional[float]) -> str:
    """
    Format duration as human-readable string.

    Args:
        seconds: Duration in seconds (None = unknown)

    Returns:
        Formatted string (e.g., "10:30", "1:02:03", or "--:--")

    Example:
        print(format_duration(630))  # "10:30"
    """
    if seconds is None:
        return "--:--"

    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_rate(bytes_per_second: float) -> str:
    """
    Format a byte rate in bits per second.

    Uses Mbps from 1 Mbps upwards, Kbps below.

    Args:
        bytes_per_second: Rate in bytes/s

    Returns:
        Formatted string (e.g., "    8.00 Mbps")

    Example:
        print(format_rate(1_000_000))  # "    8.00 Mbps"
    """
    if bytes_per_second >= MBPS_IN_BYTES_PER_SECOND:
        return f"{bytes_per_second / MBPS_IN_BYTES_PER_SECOND:8.2f} Mbps"
    return f"{bytes_per_second / KBPS_TO_BYTES_PER_SECOND:8.2f} Kbps"
