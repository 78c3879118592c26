"""
Limiting Transport

httplib2-compatible HTTP object that throttles the one request carrying the
video payload and passes everything else (discovery, metadata, auth refresh)
straight through.

It sits underneath the authorized HTTP object used by googleapiclient:

    transport = LimitingTransport(httplib2.Http(), file_size, rate_limit_kbps)
    http = AuthorizedHttp(credentials, http=transport)
    youtube = build("youtube", "v3", http=http)

Every payload request of the upload (each resumable chunk, every resend)
is routed through the same RateLimitedReader, so the token bucket and the
progress statistics span the whole upload.
"""

import io
import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from throttle.constants import (
    CONTENT_RANGE_HEADER,
    CONTENT_RANGE_PREFIX,
    CONTENT_RANGE_QUERY_PREFIX,
    PAYLOAD_CONTENT_TYPE_PREFIXES,
    UPLOAD_CONTENT_TYPE_HEADER,
    UPLOAD_CONTENT_TYPE_PAYLOAD,
)
from throttle.controllers.rate_limited_reader import RateLimitedReader
from throttle.controllers.status_monitor import StatusMonitor
from throttle.errors import ConfigurationError
from throttle.models.time_window import TimeWindow
from throttle.models.transfer_status import TransferStatus

# (headers, body) -> True if the request carries the payload
PayloadDetector = Callable[[Dict[str, str], Any], bool]


def is_payload_request(headers: Dict[str, str], body: Any) -> bool:
    """
    Decide whether a request carries the media payload.

    A streaming body is the payload: googleapiclient only streams media,
    while control requests (metadata, token refresh) send strings.
    Byte-string bodies fall back to header checks: a Content-Range marks a
    resumable chunk read from a stream that can't seek, and the content
    type covers non-resumable multipart uploads.

    Args:
        headers: Request headers (any key case)
        body: Request body

    Returns:
        True if the body should be throttled and monitored
    """
    if body is None:
        return False

    if hasattr(body, "read"):
        return True

    lowered = {key.lower(): value for key, value in headers.items()}

    content_range = lowered.get(CONTENT_RANGE_HEADER, "")
    if content_range.startswith(CONTENT_RANGE_PREFIX):
        return not content_range.startswith(CONTENT_RANGE_QUERY_PREFIX)

    content_type = lowered.get("content-type", "")

    if content_type.startswith(PAYLOAD_CONTENT_TYPE_PREFIXES):
        return True

    return lowered.get(UPLOAD_CONTENT_TYPE_HEADER) == UPLOAD_CONTENT_TYPE_PAYLOAD


class LimitingTransport:
    """
    Throttling decorator around an httplib2.Http-like object.

    This class:
    - Detects the payload request of a single upload
    - Installs one RateLimitedReader for the upload, re-pointing it at the
      new body on every further payload request
    - Exposes progress for a reporting thread

    One transport = one upload. Run concurrent uploads on separate
    transports.

    Usage:
        transport = LimitingTransport(
            httplib2.Http(),
            file_size=os.path.getsize("video.mp4"),
            rate_limit_kbps=8000,
            window=TimeWindow.parse("09:00-17:00"),
        )
        ...
        status = transport.get_monitor_status()
        print(f"{status.progress} at {status.average_rate_bps} B/s")
    """

    def __init__(
        self,
        http: Any,
        file_size: int,
        rate_limit_kbps: int = 0,
        window: Optional[TimeWindow] = None,
        detector: Optional[PayloadDetector] = None,
        wait_timeout: Optional[float] = None,
    ):
        """
        Initialize transport.

        Args:
            http: Downstream object with request(uri, method, body, headers, ...)
            file_size: Expected payload size in bytes (0 = unknown)
            rate_limit_kbps: Bandwidth cap in kbps (0 = unlimited)
            window: Daily window when the cap applies (None = always)
            detector: Override payload detection
            wait_timeout: Longest single throttle wait in seconds (None/0 = unbounded)

        Raises:
            ConfigurationError: If http is None or the rate limit is negative
        """
        if http is None:
            raise ConfigurationError("Downstream http object can't be None")
        if rate_limit_kbps < 0:
            raise ConfigurationError(
                f"Rate limit can't be negative: {rate_limit_kbps}",
            )

        self.logger = logging.getLogger(__name__)

        self.http = http
        self.file_size = file_size
        self.rate_limit_kbps = rate_limit_kbps
        self.window = window or TimeWindow()
        self.detector = detector or is_payload_request
        self.wait_timeout = wait_timeout or None

        self.monitor = StatusMonitor(total_bytes=file_size)
        self.cancel_event = threading.Event()

        self._reader: Optional[RateLimitedReader] = None
        self._lock = threading.Lock()

        self.logger.debug(
            f"Limiting transport ready (size: {file_size} bytes, "
            f"limit: {rate_limit_kbps} kbps, window: {self.window})",
        )

    @property
    def reader(self) -> Optional[RateLimitedReader]:
        """Reader of the current upload, or None before the payload request"""
        return self._reader

    def request(
        self,
        uri: str,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        *args,
        **kwargs,
    ) -> Tuple[Any, bytes]:
        """
        Send a request through the wrapped http object.

        Same signature and return value as httplib2.Http.request. The body
        of a payload request is replaced with the shared RateLimitedReader.

        Returns:
            (response, content) from the wrapped http object, unchanged
        """
        headers = headers if headers is not None else {}

        if self.detector(headers, body):
            body = self._install_reader(body)

        content_type = _header(headers, "content-type")
        if content_type:
            self.logger.debug(f"Content-Type header value {content_type!r}")
        self.logger.debug(f"Requesting URL {uri!r}")

        response, content = self.http.request(
            uri,
            method,
            body,
            headers,
            *args,
            **kwargs,
        )

        self.logger.debug(
            f"Response status code: {getattr(response, 'status', '?')} "
            f"({len(content or b'')} bytes)",
        )

        return response, content

    def _install_reader(self, body: Any) -> RateLimitedReader:
        """Wrap (or re-point) the reader around a payload body"""
        stream = body if hasattr(body, "read") else io.BytesIO(_as_bytes(body))

        with self._lock:
            if self._reader is None:
                self._reader = RateLimitedReader(
                    stream,
                    rate_limit_kbps=self.rate_limit_kbps,
                    window=self.window,
                    monitor=self.monitor,
                    cancel_event=self.cancel_event,
                    wait_timeout=self.wait_timeout,
                )
                self.logger.debug("Payload request detected, reader installed")
            else:
                self._reader.reattach(stream)
                self.logger.debug("Payload request detected, reader re-attached")

            return self._reader

    def get_monitor_status(self) -> TransferStatus:
        """
        Get a snapshot of upload progress.

        Returns:
            TransferStatus (all zeros until the payload starts flowing)
        """
        with self._lock:
            return self.monitor.snapshot()

    def cancel(self) -> None:
        """Interrupt any pending throttle wait; later waits fail immediately"""
        self.logger.info("Upload cancellation requested")
        self.cancel_event.set()

    def close(self) -> None:
        """Close the current payload stream and the wrapped http object"""
        with self._lock:
            if self._reader is not None:
                self._reader.close()

        close = getattr(self.http, "close", None)
        if close is not None:
            close()

    def __getattr__(self, name: str) -> Any:
        # Only called for attributes not found on the transport itself,
        # e.g. timeout / connections / follow_redirects of httplib2.Http
        if name == "http":
            raise AttributeError(name)
        return getattr(self.http, name)


def _header(headers: Dict[str, str], name: str) -> str:
    """Case-insensitive header lookup"""
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return ""


def _as_bytes(body: Any) -> bytes:
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)
