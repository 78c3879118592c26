"""
Upload Controller

High-level coordinator for video uploads.
Simplifies upload operations for the command line and other callers.

- Clean, simple API
- Resolves metadata (JSON file, flags, defaults)
- Proper error handling and logging
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional

from config.settings import (
    DEFAULT_DESCRIPTION,
    DEFAULT_PRIVACY_STATUS,
    YOUTUBE_PLAYLIST_ID,
)
from throttle.models.transfer_status import TransferStatus
from throttle.utils.format_utils import format_rate, format_size
from upload.factory import create_uploader
from upload.interfaces.uploader_interface import UploaderInterface, UploadResult
from upload.models.video_metadata import VideoMetadata
from upload.utils.source_utils import source_name


class UploadController:
    """
    High-level video upload controller.

    This class:
    - Provides simple upload API
    - Merges metadata from JSON file and flags, fills defaults
    - Handles uploader initialization
    - Exposes progress and cancellation of the running upload

    Usage:
        controller = UploadController()

        result = controller.upload_video(
            video_path="/path/to/video.mp4",
            metadata=VideoMetadata(title="Holiday"),
        )

        if result.success:
            print(f"Uploaded: {result.video_id}")
    """

    def __init__(
        self,
        uploader: Optional[UploaderInterface] = None,
        playlist_id: Optional[str] = None,
    ):
        """
        Initialize upload controller.

        Args:
            uploader: UploaderInterface implementation, or None to auto-create
            playlist_id: Default playlist when the metadata names none

        Example:
            # Normal usage - auto-creates from .env
            controller = UploadController()

            # Custom uploader (testing)
            mock = MockUploader()
            controller = UploadController(uploader=mock)
        """
        self.logger = logging.getLogger(__name__)

        # Create or use provided uploader
        self.uploader = uploader or create_uploader()
        self.default_playlist_id = playlist_id or YOUTUBE_PLAYLIST_ID or None

        # Verify uploader is ready
        if not self.uploader.is_available():
            self.logger.warning(
                "Uploader initialized but not available. "
                "Check authentication and network connection.",
            )

        self.logger.info("Upload Controller initialized")

    def upload_video(
        self,
        video_path: str,
        metadata: Optional[VideoMetadata] = None,
        metadata_json_path: Optional[str] = None,
        thumbnail_path: Optional[str] = None,
        caption_path: Optional[str] = None,
        metadata_out_path: Optional[str] = None,
    ) -> UploadResult:
        """
        Upload video with metadata resolution.

        Args:
            video_path: Path to video file, http(s) URL, or "-" for stdin
            metadata: Values given by the caller (flags)
            metadata_json_path: JSON file whose values win over `metadata`
            thumbnail_path: Thumbnail image (optional)
            caption_path: Caption file (optional)
            metadata_out_path: Write created resource JSON here (optional)

        Returns:
            UploadResult with success status and details

        Example:
            result = controller.upload_video(
                video_path="/videos/holiday.mp4",
                metadata_json_path="/videos/holiday.json",
            )
        """
        resolved = self.resolve_metadata(video_path, metadata, metadata_json_path)

        self.logger.info(f"Uploading video: {video_path}")
        self.logger.debug(
            f"Title: {resolved.title}, Privacy: {resolved.privacy_status}, "
            f"Playlists: {resolved.playlist_ids}",
        )

        result = self.uploader.upload_video(
            video_path=video_path,
            metadata=resolved,
            thumbnail_path=thumbnail_path,
            caption_path=caption_path,
            metadata_out_path=metadata_out_path,
        )

        if result.success:
            self.logger.info(
                f"✅ Upload successful: {result.video_id} "
                f"({result.upload_duration:.1f}s, "
                f"{format_size(result.bytes_transferred)}, "
                f"avg {format_rate(result.average_rate_bps).strip()})",
            )
        else:
            self.logger.error(
                f"❌ Upload failed: {result.error_message} "
                f"(status: {result.status.value}, "
                f"{result.bytes_transferred}/{result.file_size} bytes sent)",
            )

        return result

    def resolve_metadata(
        self,
        video_path: str,
        metadata: Optional[VideoMetadata] = None,
        metadata_json_path: Optional[str] = None,
    ) -> VideoMetadata:
        """
        Combine JSON file, caller values and defaults.

        A JSON file that can't be read or parsed is reported and ignored.

        Returns:
            Metadata ready to send
        """
        resolved = metadata or VideoMetadata()

        if metadata_json_path:
            try:
                from_file = VideoMetadata.from_json_file(Path(metadata_json_path))
                resolved = from_file.merge(resolved)
            except (OSError, ValueError) as e:
                self.logger.warning(
                    f"Error reading metadata file {metadata_json_path!r}: {e}. "
                    f"Will use command line flags instead",
                )

        return resolved.merge(self._defaults_for(video_path))

    def _defaults_for(self, video_path: str) -> VideoMetadata:
        """Defaults for fields nobody set"""
        defaults = VideoMetadata(
            title=Path(source_name(video_path)).stem,
            description=DEFAULT_DESCRIPTION,
            privacy_status=DEFAULT_PRIVACY_STATUS,
        )
        if self.default_playlist_id:
            defaults = replace(defaults, playlist_ids=[self.default_playlist_id])
        return defaults

    def get_progress(self) -> Optional[TransferStatus]:
        """
        Progress of the running upload.

        Returns:
            TransferStatus, or None when idle
        """
        return self.uploader.get_progress()

    def cancel(self) -> None:
        """Cancel the running upload"""
        self.logger.info("Cancelling upload")
        self.uploader.cancel()

    def test_connection(self) -> bool:
        """
        Test connection to YouTube API.

        Use this before uploading to verify system is ready.

        Returns:
            True if connection successful
        """
        self.logger.info("Testing YouTube connection...")

        try:
            result = self.uploader.test_connection()

            if result:
                self.logger.info("✅ Connection test passed")
            else:
                self.logger.warning("❌ Connection test failed")

            return result

        except Exception as e:
            self.logger.error(f"Connection test error: {e}")
            return False

    def is_ready(self) -> bool:
        """
        Check if uploader is ready to upload.

        Returns:
            True if authenticated and ready
        """
        return self.uploader.is_available()

    def get_status(self) -> Dict[str, Any]:
        """
        Get current controller status.

        Returns:
            Dictionary with status information

        Example:
            status = controller.get_status()
            print(f"Ready: {status['ready']}")
            print(f"Progress: {status['progress']}")
        """
        progress = self.get_progress()
        return {
            "ready": self.is_ready(),
            "playlist_id": self.default_playlist_id,
            "uploader_type": type(self.uploader).__name__,
            "progress": progress.to_dict() if progress else None,
        }

    def set_default_playlist(self, playlist_id: str) -> None:
        """
        Change default playlist for future uploads.

        Args:
            playlist_id: YouTube playlist ID
        """
        self.default_playlist_id = playlist_id
        self.logger.info(f"Default playlist set to: {playlist_id}")
