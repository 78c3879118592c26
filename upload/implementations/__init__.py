"""
Implementations Package

Concrete uploader implementations.
"""

from upload.implementations.mock_uploader import FakeUploadSink, MockUploader
from upload.implementations.youtube_uploader import YouTubeUploader

__all__ = [
    "FakeUploadSink",
    "MockUploader",
    "YouTubeUploader",
]
