"""
Utils Package

Shared helpers for the upload module.
"""

from upload.utils.source_utils import (
    MediaSource,
    open_source,
    read_chunk,
    source_name,
    video_mimetype,
)

__all__ = [
    "MediaSource",
    "open_source",
    "read_chunk",
    "source_name",
    "video_mimetype",
]
