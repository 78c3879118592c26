"""
Interfaces Package

Uploader contract shared by the YouTube and mock implementations:
result object, error type and abstract base class.
"""

from upload.interfaces.uploader_interface import (
    UploaderError,
    UploaderInterface,
    UploadResult,
)

__all__ = [
    "UploaderError",
    "UploaderInterface",
    "UploadResult",
]
