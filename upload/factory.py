"""
Upload Factory

Factory pattern for creating uploader implementations.

Automatically configures from environment variables.
"""

import logging
import os
from typing import Literal, Optional, TextIO

from google.oauth2.credentials import Credentials

from config.settings import UPLOAD_CHUNK_SIZE, YOUTUBE_TOKEN_PATH
from throttle.config import ThrottleConfig
from upload.constants import YOUTUBE_SCOPES
from upload.implementations.mock_uploader import MockUploader
from upload.implementations.youtube_uploader import YouTubeUploader
from upload.interfaces.uploader_interface import UploaderInterface

# Type alias
UploaderMode = Literal["auto", "youtube", "mock"]


class UploaderFactory:
    """
    Factory for creating uploader implementations.

    Reads configuration from environment variables:
    - YOUTUBE_TOKEN_PATH: Path to an authorized-user token.json

    Usage:
        # Auto-detect from environment
        uploader = UploaderFactory.create_uploader()

        # Force mock for testing
        uploader = UploaderFactory.create_uploader(mode="mock")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_uploader(
        cls,
        mode: UploaderMode = "auto",
        throttle_config: Optional[ThrottleConfig] = None,
        chunk_size: int = UPLOAD_CHUNK_SIZE,
        send_filename: bool = True,
        progress_output: Optional[TextIO] = None,
        token_path: Optional[str] = None,
    ) -> UploaderInterface:
        """
        Create an uploader instance.

        Args:
            mode: "auto" (from env), "youtube" (force real), "mock" (force sim)
            throttle_config: Rate limit / window / progress settings
            chunk_size: Bytes per resumable request (<= 0 = single request)
            send_filename: Send the file name with the upload (YouTube only)
            progress_output: Stream for progress lines
            token_path: Override YOUTUBE_TOKEN_PATH

        Returns:
            UploaderInterface implementation

        Raises:
            RuntimeError: If mode="youtube" but credentials not available

        Example:
            # Normal usage
            uploader = UploaderFactory.create_uploader()

            # Testing
            uploader = UploaderFactory.create_uploader(mode="mock")
        """
        throttle_config = throttle_config or ThrottleConfig()

        if mode == "mock":
            cls._logger.info("Creating Mock Uploader (forced)")
            return MockUploader(
                throttle_config=throttle_config,
                chunk_size=chunk_size,
                progress_output=progress_output,
            )

        try:
            credentials = cls._load_credentials(token_path)
        except Exception as e:
            if mode == "youtube":
                raise RuntimeError(
                    f"YouTube uploader requested but not available: {e}",
                ) from e

            # mode == "auto" - fall back to mock
            cls._logger.warning(
                f"YouTube uploader not available ({e}), using Mock Uploader",
            )
            return MockUploader(
                throttle_config=throttle_config,
                chunk_size=chunk_size,
                progress_output=progress_output,
            )

        cls._logger.info(f"Creating YouTube Uploader ({mode})")
        return YouTubeUploader(
            credentials,
            throttle_config=throttle_config,
            chunk_size=chunk_size,
            send_filename=send_filename,
            progress_output=progress_output,
        )

    @classmethod
    def _load_credentials(cls, token_path: Optional[str] = None) -> Credentials:
        """
        Load authorized-user credentials from token.json.

        The token file is produced by a separate OAuth setup step; expired
        access tokens are refreshed by the HTTP layer on first use.

        Raises:
            ValueError: If no token path is configured
            FileNotFoundError: If the token file doesn't exist
        """
        token_path = token_path or YOUTUBE_TOKEN_PATH

        if not token_path:
            raise ValueError(
                "YOUTUBE_TOKEN_PATH not set in environment. "
                "Add to .env file: YOUTUBE_TOKEN_PATH=/path/to/token.json",
            )

        if not os.path.exists(token_path):
            raise FileNotFoundError(f"Token file not found: {token_path}")

        credentials = Credentials.from_authorized_user_file(token_path, YOUTUBE_SCOPES)
        cls._logger.debug(f"Credentials loaded from {token_path}")
        return credentials

    @classmethod
    def is_youtube_available(cls, token_path: Optional[str] = None) -> bool:
        """
        Check if YouTube uploader can be created.

        Returns:
            True if credentials can be loaded
        """
        try:
            cls._load_credentials(token_path)
            return True
        except Exception:
            return False


# Convenience function for quick creation
def create_uploader(
    force_mock: bool = False,
    throttle_config: Optional[ThrottleConfig] = None,
) -> UploaderInterface:
    """
    Quick uploader creation with simple mock override.

    Args:
        force_mock: If True, always use mock
        throttle_config: Rate limit / window / progress settings

    Returns:
        UploaderInterface

    Example:
        # Normal usage
        uploader = create_uploader()

        # Testing
        uploader = create_uploader(force_mock=True)
    """
    mode = "mock" if force_mock else "auto"
    return UploaderFactory.create_uploader(mode=mode, throttle_config=throttle_config)
