"""
Controllers Package

UploadController resolves video metadata and drives an uploader,
exposing progress and cancellation of the running upload.
"""

from upload.controllers.upload_controller import UploadController

__all__ = ["UploadController"]
