"""
Upload Module

Video upload system for YouTube with bandwidth limiting.

Public API:
    - UploadController: High-level upload coordinator
    - UploadResult: Upload operation result
    - UploadStatus: Status codes
    - VideoMetadata: Title, description, privacy, playlists, ...
    - create_uploader: Factory function

Usage:
    from upload import UploadController, VideoMetadata

    controller = UploadController()
    result = controller.upload_video(
        video_path="/path/to/video.mp4",
        metadata=VideoMetadata(title="Holiday"),
    )
"""

__version__ = "1.0.0"

from upload.constants import UploadStatus
from upload.controllers.upload_controller import UploadController
from upload.factory import UploaderFactory, create_uploader
from upload.interfaces.uploader_interface import UploaderError, UploadResult
from upload.models.video_metadata import VideoMetadata

# Public API
__all__ = [
    "UploadController",
    "UploadResult",
    "UploadStatus",
    "UploaderError",
    "UploaderFactory",
    "VideoMetadata",
    "create_uploader",
]
