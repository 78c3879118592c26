"""
Uploader Interface

Abstract interface for video upload implementations.
Follows Dependency Inversion Principle - high-level code depends on this abstraction,
not on concrete YouTube API implementation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from throttle.models.transfer_status import TransferStatus
from upload.constants import UploadStatus
from upload.models.video_metadata import VideoMetadata


@dataclass
class UploadResult:
    """
    Result of an upload operation.

    Attributes:
        success: True if upload completed successfully
        video_id: YouTube video ID (if successful)
        status: Upload status code
        error_message: Error description (if failed)
        upload_duration: Time taken to upload in seconds
        file_size: Size of uploaded file in bytes (0 = unknown, stdin or URL)
        bytes_transferred: Payload bytes actually sent (also set on failure)
        average_rate_bps: Average payload rate in bytes/s
        resource: Video resource returned by the API (if successful)
    """

    success: bool
    video_id: Optional[str] = None
    status: UploadStatus = UploadStatus.SUCCESS
    error_message: Optional[str] = None
    upload_duration: float = 0.0
    file_size: int = 0
    bytes_transferred: int = 0
    average_rate_bps: int = 0
    resource: Optional[Dict[str, Any]] = None


class UploaderInterface(ABC):
    """
    Abstract base class for video uploaders.

    Every implementation sends its payload through a LimitingTransport, so
    rate limiting and progress work the same whatever the backend.
    """

    @abstractmethod
    def upload_video(
        self,
        video_path: str,
        metadata: VideoMetadata,
        thumbnail_path: Optional[str] = None,
        caption_path: Optional[str] = None,
        metadata_out_path: Optional[str] = None,
    ) -> UploadResult:
        """
        Upload a video file.

        This is the main upload method. It should handle:
        - File validation
        - Throttled payload transfer
        - Progress reporting
        - Error handling

        Args:
            video_path: Path to video file, http(s) URL, or "-" for stdin
            metadata: Title, description, privacy, playlists, ...
            thumbnail_path: Image to set as thumbnail (optional)
            caption_path: Caption track to attach (optional)
            metadata_out_path: Write the created resource here as JSON (optional)

        Returns:
            UploadResult with success status and details

        Example:
            result = uploader.upload_video(
                video_path="/path/to/video.mp4",
                metadata=VideoMetadata(title="Holiday", privacy_status="unlisted"),
            )
        """

    @abstractmethod
    def get_progress(self) -> Optional[TransferStatus]:
        """
        Get progress of the upload in flight.

        Safe to call from any thread.

        Returns:
            TransferStatus, or None when no upload is running
        """

    @abstractmethod
    def cancel(self) -> None:
        """
        Cancel the upload in flight.

        A pending throttle wait is interrupted and upload_video() returns
        a CANCELLED result. No-op when nothing is uploading.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if uploader is ready to upload.

        Returns:
            True if authentication is valid and service is accessible

        Example:
            if uploader.is_available():
                result = uploader.upload_video(...)
        """

    @abstractmethod
    def test_connection(self) -> bool:
        """
        Test connection to upload service.

        Verifies authentication and network connectivity without uploading.

        Returns:
            True if connection successful

        Example:
            if not uploader.test_connection():
                print("Cannot connect to YouTube")
        """


class UploaderError(Exception):
    """
    Exception raised for upload-related errors.

    Examples:
    - Authentication failed
    - Network error
    - Invalid video file
    - API quota exceeded
    """

    def __init__(self, message: str, status: UploadStatus = UploadStatus.FAILED):
        super().__init__(message)
        self.status = status
