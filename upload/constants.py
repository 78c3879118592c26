"""
Upload Constants

Centralized configuration for YouTube upload module.
Following the same pattern as throttle/constants.py for consistency.
"""

from enum import Enum

# =============================================================================
# YOUTUBE API CONFIGURATION
# =============================================================================

# OAuth 2.0 scopes required for YouTube operations
# https://developers.google.com/youtube/v3/guides/authentication
YOUTUBE_SCOPES = [
    "https://www.googleapis.com/auth/youtube.upload",
    "https://www.googleapis.com/auth/youtube",
    "https://www.googleapis.com/auth/youtubepartner",
]

# YouTube API service details
YOUTUBE_API_SERVICE_NAME = "youtube"
YOUTUBE_API_VERSION = "v3"

# Parts sent with videos.insert
VIDEO_INSERT_PARTS = "snippet,status,recordingDetails"

# =============================================================================
# UPLOAD CONFIGURATION
# =============================================================================

# Header carrying the original file name
SLUG_HEADER = "Slug"

# Fallback MIME type when the file extension says nothing
# (accepted by YouTube for any video container)
DEFAULT_VIDEO_MIMETYPE = "video/*"

# Fallback MIME type for thumbnails and captions
DEFAULT_ATTACHMENT_MIMETYPE = "application/octet-stream"

# Bytes per request when the source can't seek (stdin, URLs) and the
# configured chunk size asks for the whole file at once.
# Must be a multiple of 256 KB.
DEFAULT_STREAM_CHUNK_SIZE = 10 * 1024 * 1024

# =============================================================================
# SOURCE CONFIGURATION
# =============================================================================

# File name meaning "read the video from standard input"
STDIN_SOURCE = "-"

# Name used for titles and logs when reading from standard input
STDIN_NAME = "stdin"

# URL schemes fetched over HTTP instead of opened from disk
REMOTE_SCHEMES = ("http", "https")

# Ask servers for the raw bytes so Content-Length matches what we read
REMOTE_REQUEST_HEADERS = {"Accept-Encoding": "identity"}

# =============================================================================
# VIDEO METADATA CONFIGURATION
# =============================================================================

# Options: "public", "private", "unlisted"
PRIVACY_STATUSES = ("public", "private", "unlisted")

# publishAt is only accepted for private videos
SCHEDULED_PRIVACY_STATUS = "private"

# Timestamp format expected by the YouTube API (ISO 8601, UTC)
YOUTUBE_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S.000Z"

# Accepted date formats in metadata JSON files
INPUT_DATE_FORMAT = "%Y-%m-%d"
INPUT_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# =============================================================================
# UPLOAD STATUS
# =============================================================================


class UploadStatus(Enum):
    """Upload operation status codes"""

    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"
    AUTH_ERROR = "auth_error"
    NETWORK_ERROR = "network_error"
    INVALID_FILE = "invalid_file"
    CONFIG_ERROR = "config_error"
    QUOTA_EXCEEDED = "quota_exceeded"
