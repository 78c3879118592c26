"""
Mock Uploader Implementation

Simulated uploader for testing without YouTube API.

Unlike a pure stub, the payload really flows: the source (file, URL or
stdin) is sent through a LimitingTransport into an in-process sink that
reads the body the way http.client does. Rate limiting, time windows and
progress behave exactly as in a real upload, just without the network.
"""

import io
import json
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional, TextIO
from uuid import uuid4

import httplib2

from config.settings import UPLOAD_CHUNK_SIZE
from throttle.config import ThrottleConfig
from throttle.constants import DEFAULT_BLOCK_SIZE
from throttle.errors import CancellationError, WaitTimeoutError
from throttle.models.transfer_status import TransferStatus
from throttle.transport.limiting_transport import LimitingTransport
from upload.constants import UploadStatus
from upload.interfaces.uploader_interface import (
    UploaderError,
    UploaderInterface,
    UploadResult,
)
from upload.models.video_metadata import VideoMetadata
from upload.utils.source_utils import MediaSource, open_source, read_chunk, video_mimetype

MOCK_UPLOAD_URL = "https://upload.example.invalid/upload/youtube/v3/videos"


class FakeUploadSink:
    """
    In-process stand-in for httplib2.Http.

    Drains request bodies in DEFAULT_BLOCK_SIZE reads and answers 200.
    Every request is recorded for inspection.
    """

    def __init__(self, block_size: int = DEFAULT_BLOCK_SIZE):
        self.block_size = block_size
        self.requests: List[Dict[str, Any]] = []
        self.closed = False

    def request(
        self,
        uri: str,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
        *args,
        **kwargs,
    ):
        received = self._drain(body)
        self.requests.append(
            {
                "uri": uri,
                "method": method,
                "headers": dict(headers or {}),
                "bytes": received,
            },
        )
        return httplib2.Response({"status": "200"}), b"{}"

    def _drain(self, body: Any) -> int:
        if body is None:
            return 0
        if not hasattr(body, "read"):
            return len(body)

        total = 0
        while True:
            block = body.read(self.block_size)
            if not block:
                return total
            total += len(block)

    def close(self) -> None:
        self.closed = True


class MockUploader(UploaderInterface):
    """
    Mock video uploader for testing.

    This simulates the YouTube request sequence without actually uploading.
    Useful for:
    - Unit tests
    - Development without YouTube credentials
    - Trying out rate limits and windows locally
    """

    def __init__(
        self,
        throttle_config: Optional[ThrottleConfig] = None,
        chunk_size: int = UPLOAD_CHUNK_SIZE,
        progress_output: Optional[TextIO] = None,
        sink_factory: Optional[Callable[[], Any]] = None,
    ):
        """
        Initialize mock uploader.

        Args:
            throttle_config: Rate limit / window / progress settings
            chunk_size: Bytes per simulated request (<= 0 = whole file at once)
            progress_output: Stream for progress lines (default: stdout)
            sink_factory: Creates the fake downstream HTTP object

        Example:
            # Fast mock for unit tests
            uploader = MockUploader(progress_output=io.StringIO())

            # Throttled mock
            config = ThrottleConfig(overrides={"rate_limit_kbps": 800})
            uploader = MockUploader(throttle_config=config)
        """
        self.logger = logging.getLogger(__name__)
        self.throttle_config = throttle_config or ThrottleConfig()
        self.chunk_size = chunk_size
        self.progress_output = progress_output
        self.sink_factory = sink_factory or FakeUploadSink

        self._transport: Optional[LimitingTransport] = None
        self._lock = threading.Lock()

        # Track upload history for testing
        self.upload_history: List[Dict[str, Any]] = []

        self.logger.info(
            f"Mock Uploader initialized "
            f"(limit: {self.throttle_config.rate_limit_kbps} kbps, "
            f"chunk: {chunk_size})",
        )

    def upload_video(
        self,
        video_path: str,
        metadata: VideoMetadata,
        thumbnail_path: Optional[str] = None,
        caption_path: Optional[str] = None,
        metadata_out_path: Optional[str] = None,
    ) -> UploadResult:
        """
        Simulate video upload.

        Opens the source and pushes it through the throttled transport.
        """
        start_time = time.time()
        file_size = 0
        source: Optional[MediaSource] = None
        transport: Optional[LimitingTransport] = None

        try:
            source = open_source(video_path)
            file_size = source.size

            self.logger.info(
                f"[MOCK] Starting upload: {video_path} "
                f"({file_size or 'unknown'} bytes)",
            )

            transport = self.throttle_config.create_transport(
                self.sink_factory(),
                file_size,
            )
            with self._lock:
                self._transport = transport

            body = metadata.to_resource_body()
            with self.throttle_config.create_reporter(
                transport.get_monitor_status,
                output=self.progress_output,
            ):
                self._send(transport, source, body)

            video_id = f"mock_{uuid4().hex[:11]}"
            resource = {"kind": "youtube#video", "id": video_id, **body}

            if metadata_out_path:
                with open(metadata_out_path, "w") as f:
                    json.dump(resource, f, indent=2)

            status = transport.get_monitor_status()

            self.upload_history.append(
                {
                    "video_id": video_id,
                    "video_path": video_path,
                    "title": metadata.title,
                    "description": metadata.description,
                    "tags": metadata.tags,
                    "playlist_ids": list(metadata.playlist_ids),
                    "thumbnail_path": thumbnail_path,
                    "caption_path": caption_path,
                    "file_size": file_size,
                    "bytes_transferred": status.bytes_transferred,
                    "timestamp": time.time(),
                },
            )

            upload_duration = time.time() - start_time

            self.logger.info(
                f"[MOCK] ✅ Upload successful: {video_id} ({upload_duration:.1f}s)",
            )

            return UploadResult(
                success=True,
                video_id=video_id,
                status=UploadStatus.SUCCESS,
                upload_duration=upload_duration,
                file_size=file_size,
                bytes_transferred=status.bytes_transferred,
                average_rate_bps=status.average_rate_bps,
                resource=resource,
            )

        except UploaderError as e:
            self.logger.error(f"[MOCK] Upload failed: {e}")
            return self._failed_result(e.status, str(e), start_time, file_size, transport)

        except WaitTimeoutError as e:
            self.logger.error(f"[MOCK] Upload timed out: {e}")
            return self._failed_result(
                UploadStatus.NETWORK_ERROR,
                f"Upload timed out: {e}",
                start_time,
                file_size,
                transport,
            )

        except CancellationError as e:
            self.logger.warning(f"[MOCK] Upload cancelled: {e}")
            return self._failed_result(
                UploadStatus.CANCELLED,
                f"Upload cancelled: {e}",
                start_time,
                file_size,
                transport,
            )

        except Exception as e:
            error_msg = f"Mock upload error: {e}"
            self.logger.error(error_msg)
            return self._failed_result(
                UploadStatus.FAILED,
                error_msg,
                start_time,
                file_size,
                transport,
            )

        finally:
            with self._lock:
                self._transport = None
            if transport is not None:
                transport.close()
            if source is not None:
                source.close()

    def _send(
        self,
        transport: LimitingTransport,
        source: MediaSource,
        body: Dict[str, Any],
    ) -> None:
        """
        Replay the resumable upload request sequence.

        Sources of unknown size send "*" as the total until a short chunk
        shows where the stream ends.
        """
        # Session start: metadata only, never throttled
        transport.request(
            f"{MOCK_UPLOAD_URL}?uploadType=resumable",
            "POST",
            body=json.dumps(body),
            headers={
                "content-type": "application/json",
                "x-upload-content-type": video_mimetype(source),
            },
        )

        if self.chunk_size <= 0:
            headers = {}
            if source.size > 0:
                headers["content-length"] = str(source.size)
            transport.request(MOCK_UPLOAD_URL, "PUT", body=source.stream, headers=headers)
            return

        total = str(source.size) if source.size > 0 else "*"
        offset = 0
        while True:
            chunk = read_chunk(source.stream, self.chunk_size)
            if len(chunk) < self.chunk_size:
                total = str(offset + len(chunk))

            if not chunk:
                if offset and source.size <= 0:
                    # Stream ended on a chunk boundary: announce the total
                    transport.request(
                        MOCK_UPLOAD_URL,
                        "PUT",
                        headers={"content-range": f"bytes */{total}"},
                    )
                return

            end = offset + len(chunk) - 1
            transport.request(
                MOCK_UPLOAD_URL,
                "PUT",
                body=io.BytesIO(chunk),
                headers={
                    "content-length": str(len(chunk)),
                    "content-range": f"bytes {offset}-{end}/{total}",
                },
            )
            offset += len(chunk)

            if len(chunk) < self.chunk_size:
                return

    def _failed_result(
        self,
        status: UploadStatus,
        error_message: str,
        start_time: float,
        file_size: int,
        transport: Optional[LimitingTransport],
    ) -> UploadResult:
        progress = transport.get_monitor_status() if transport else TransferStatus()
        return UploadResult(
            success=False,
            status=status,
            error_message=error_message,
            upload_duration=time.time() - start_time,
            file_size=file_size,
            bytes_transferred=progress.bytes_transferred,
            average_rate_bps=progress.average_rate_bps,
        )

    def get_progress(self) -> Optional[TransferStatus]:
        with self._lock:
            transport = self._transport
        return transport.get_monitor_status() if transport else None

    def cancel(self) -> None:
        with self._lock:
            transport = self._transport
        if transport is not None:
            transport.cancel()

    def is_available(self) -> bool:
        """Mock uploader is always available"""
        return True

    def test_connection(self) -> bool:
        """Simulate connection test (always succeeds)"""
        self.logger.info("[MOCK] ✅ Connection test successful")
        return True

    # =========================================================================
    # TESTING HELPER METHODS
    # =========================================================================

    def get_upload_history(self) -> List[Dict[str, Any]]:
        """
        Get list of all uploads performed.

        Returns:
            List of upload records
        """
        return self.upload_history.copy()

    def clear_history(self) -> None:
        """Clear upload history"""
        self.upload_history.clear()
        self.logger.debug("[MOCK] Upload history cleared")

    def get_last_upload(self) -> Optional[Dict[str, Any]]:
        """
        Get most recent upload.

        Returns:
            Last upload record, or None
        """
        return self.upload_history[-1] if self.upload_history else None

    def was_uploaded(self, video_path: str) -> bool:
        """
        Check if video was uploaded.

        Args:
            video_path: Path to check

        Returns:
            True if video in history
        """
        return any(record["video_path"] == video_path for record in self.upload_history)
