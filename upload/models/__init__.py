"""
Models Package

Data structures for the upload module.
"""

from upload.models.video_metadata import VideoMetadata

__all__ = [
    "VideoMetadata",
]
