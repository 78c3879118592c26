"""
Central Configuration File

ALL configuration values live here. This is the single source of truth.

Guidelines:
- Secrets (credentials) should be in .env, NOT here
- Import these settings in modules: from config.settings import RATE_LIMIT_KBPS
- Every value can be overridden from the environment (or .env)
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# =============================================================================
# RATE LIMIT CONFIGURATION
# =============================================================================

# Upload bandwidth cap in kilobits per second (0 = unlimited)
RATE_LIMIT_KBPS = int(os.getenv("RATE_LIMIT_KBPS", "0"))

# Only rate limit between these local times, e.g. "10:00-14:00"
# Empty = rate limit all day
LIMIT_BETWEEN = os.getenv("LIMIT_BETWEEN", "")

# strptime format of each clock time in LIMIT_BETWEEN
LIMIT_CLOCK_FORMAT = os.getenv("LIMIT_CLOCK_FORMAT", "%H:%M")

# Optional YAML file overriding the values above
THROTTLE_CONFIG_PATH = os.getenv("THROTTLE_CONFIG_PATH", "config/throttle.yaml")

# Fail an upload when the rate limit would hold one read longer than this
# many seconds, 0 = wait as long as the limit needs
THROTTLE_WAIT_TIMEOUT = float(os.getenv("THROTTLE_WAIT_TIMEOUT", "0"))

# =============================================================================
# PROGRESS CONFIGURATION
# =============================================================================

PROGRESS_INTERVAL = float(os.getenv("PROGRESS_INTERVAL", "1.0"))  # seconds
PROGRESS_QUIET = os.getenv("PROGRESS_QUIET", "false").lower() in ("1", "true", "yes")

# =============================================================================
# UPLOAD CONFIGURATION
# =============================================================================

# Resumable upload chunk size in bytes (YouTube requires multiples of 256 KB)
# -1 sends the whole file in a single request
UPLOAD_CHUNK_SIZE = int(os.getenv("UPLOAD_CHUNK_SIZE", str(10 * 1024 * 1024)))

HTTP_TIMEOUT = int(os.getenv("HTTP_TIMEOUT", "30"))  # seconds

# Video defaults
DEFAULT_DESCRIPTION = os.getenv("DEFAULT_DESCRIPTION", "uploaded by throttled-uploader")
DEFAULT_PRIVACY_STATUS = os.getenv("DEFAULT_PRIVACY_STATUS", "private")
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "en")

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# =============================================================================
# SECRETS (loaded from .env)
# =============================================================================
# IMPORTANT: These should NEVER be committed to version control!

# Authorized-user token file produced by an external OAuth setup step
YOUTUBE_TOKEN_PATH = os.getenv("YOUTUBE_TOKEN_PATH", "credentials/token.json")
YOUTUBE_PLAYLIST_ID = os.getenv("YOUTUBE_PLAYLIST_ID", "")  # Optional playlist ID
