"""
Throttle Constants

Centralized values for the rate-limited transport.
Following the same pattern as upload/constants.py for consistency.
"""

from datetime import timedelta
from enum import Enum

# =============================================================================
# UNIT CONVENTIONS
# =============================================================================

# Rate limits are configured in kilobits per second.
# 1 kbps = 1000 bits/s = 125 bytes/s
KBPS_TO_BYTES_PER_SECOND = 125

# Rates at or above this many bytes/s are rendered as Mbps
MBPS_IN_BYTES_PER_SECOND = 125_000

# =============================================================================
# TIME WINDOW CONFIGURATION
# =============================================================================

# strptime format for the "HH:MM-HH:MM" window literal
DEFAULT_CLOCK_FORMAT = "%H:%M"

# Separator between window start and end
TIME_WINDOW_SEPARATOR = "-"

# Windows recur daily
WINDOW_PERIOD = timedelta(days=1)

# =============================================================================
# READER CONFIGURATION
# =============================================================================

# Burst size used when the first throttled read doesn't say how much it wants
# (read() / read(-1)). Matches http.client's send block size.
DEFAULT_BLOCK_SIZE = 8192

# =============================================================================
# PAYLOAD DETECTION
# =============================================================================

# Content-Type prefixes of requests carrying the media payload
PAYLOAD_CONTENT_TYPE_PREFIXES = (
    "multipart/related",
    "video",
    "application/octet-stream",
)

# Header set on resumable session requests, compared case-insensitively
UPLOAD_CONTENT_TYPE_HEADER = "x-upload-content-type"
UPLOAD_CONTENT_TYPE_PAYLOAD = "application/octet-stream"

# Byte-string chunks of a resumable upload carry only Content-Range.
# "bytes */N" asks for upload status and carries no payload.
CONTENT_RANGE_HEADER = "content-range"
CONTENT_RANGE_PREFIX = "bytes "
CONTENT_RANGE_QUERY_PREFIX = "bytes */"

# =============================================================================
# PROGRESS REPORTING
# =============================================================================

# Seconds between progress lines
DEFAULT_PROGRESS_INTERVAL = 1.0

# Shown instead of a percentage when the total size is unknown
PROGRESS_UNKNOWN = "n/a"

# Accepted spellings of the quiet flag in YAML files and the environment
TRUE_STRINGS = ("1", "true", "yes", "on")
FALSE_STRINGS = ("0", "false", "no", "off", "")

# =============================================================================
# READ MODES
# =============================================================================


class ReadMode(Enum):
    """Per-read throttling decision"""

    UNTHROTTLED = "unthrottled"  # No limit, or outside the time window
    THROTTLED = "throttled"  # Token bucket gates the read
