"""
Source Utilities

Open whatever is being uploaded. A location is one of:
- A local file path
- An http(s) URL, streamed with requests
- "-" for standard input

Local files can seek and know their size. URLs and pipes are read once,
front to back; their size comes from Content-Length when the server
sends one, otherwise it is 0 (unknown) and progress shows "n/a".
"""

import logging
import mimetypes
import os
import sys
from dataclasses import dataclass
from typing import Any, BinaryIO, Optional
from urllib.parse import unquote, urlparse

import requests

from config.settings import HTTP_TIMEOUT
from upload.constants import (
    DEFAULT_VIDEO_MIMETYPE,
    REMOTE_REQUEST_HEADERS,
    REMOTE_SCHEMES,
    STDIN_NAME,
    STDIN_SOURCE,
    UploadStatus,
)
from upload.interfaces.uploader_interface import UploaderError

logger = logging.getLogger(__name__)


@dataclass
class MediaSource:
    """
    An opened upload source.

    Attributes:
        location: What the caller asked for (path, URL or "-")
        stream: Binary stream positioned at the first byte
        size: Total bytes (0 = unknown)
        mimetype: Best guess from the name or the server ("" = no idea)
        seekable: True only for local files
        response: HTTP response backing the stream, for remote sources
    """

    location: str
    stream: BinaryIO
    size: int = 0
    mimetype: str = ""
    seekable: bool = False
    response: Optional[Any] = None

    @property
    def name(self) -> str:
        """File name part of the location"""
        return source_name(self.location)

    @property
    def is_stdin(self) -> bool:
        return self.location == STDIN_SOURCE

    def close(self) -> None:
        """Close the stream and any HTTP response behind it"""
        self.stream.close()
        if self.response is not None:
            self.response.close()


def is_remote(location: str) -> bool:
    """True if the location is an http(s) URL"""
    return urlparse(location).scheme in REMOTE_SCHEMES


def source_name(location: str) -> str:
    """
    File name of a location.

    Example:
        source_name("https://host/media/holiday%20clip.mp4?sig=1")  # "holiday clip.mp4"
        source_name("-")                                           # "stdin"
    """
    if location == STDIN_SOURCE:
        return STDIN_NAME
    if is_remote(location):
        parsed = urlparse(location)
        return unquote(os.path.basename(parsed.path)) or parsed.netloc
    return os.path.basename(location)


def open_source(location: str, timeout: float = HTTP_TIMEOUT) -> MediaSource:
    """
    Open a local file, URL or standard input for reading.

    Args:
        location: File path, http(s) URL, or "-" for standard input
        timeout: Seconds to wait on a remote server

    Returns:
        MediaSource; the caller closes it

    Raises:
        UploaderError: INVALID_FILE for a missing local file,
            NETWORK_ERROR if the URL can't be fetched
    """
    if location == STDIN_SOURCE:
        logger.debug("Reading upload from standard input")
        return MediaSource(location=location, stream=sys.stdin.buffer)

    if is_remote(location):
        return _open_remote(location, timeout)

    if not os.path.isfile(location):
        raise UploaderError(
            f"Video file not found: {location}",
            status=UploadStatus.INVALID_FILE,
        )

    return MediaSource(
        location=location,
        stream=open(location, "rb"),
        size=os.path.getsize(location),
        mimetype=mimetypes.guess_type(location)[0] or "",
        seekable=True,
    )


def _open_remote(url: str, timeout: float) -> MediaSource:
    """Start streaming a URL"""
    response = None
    try:
        response = requests.get(
            url,
            stream=True,
            timeout=timeout,
            headers=REMOTE_REQUEST_HEADERS,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        if response is not None:
            response.close()
        raise UploaderError(
            f"Failed to open {url}: {e}",
            status=UploadStatus.NETWORK_ERROR,
        ) from e

    size = int(response.headers.get("Content-Length", 0))
    content_type = response.headers.get("Content-Type", "").split(";")[0].strip()
    mimetype = mimetypes.guess_type(urlparse(url).path)[0] or content_type

    logger.debug(
        f"Streaming {url} (size: {size or 'unknown'}, type: {mimetype or 'unknown'})",
    )

    return MediaSource(
        location=url,
        stream=response.raw,
        size=size,
        mimetype=mimetype,
        response=response,
    )


def video_mimetype(source: MediaSource) -> str:
    """
    MIME type announced for the video payload.

    Anything that isn't video/* (e.g. application/octet-stream from a
    generic web server) falls back to DEFAULT_VIDEO_MIMETYPE.
    """
    if source.mimetype.startswith("video/"):
        return source.mimetype
    return DEFAULT_VIDEO_MIMETYPE


def read_chunk(stream: BinaryIO, size: int) -> bytes:
    """
    Read `size` bytes, fewer only at end of stream.

    Pipes and sockets may return short reads mid-stream.
    """
    data = bytearray()
    while len(data) < size:
        block = stream.read(size - len(data))
        if not block:
            break
        data.extend(block)
    return bytes(data)
