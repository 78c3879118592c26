"""
YouTube Uploader Implementation

Concrete implementation of UploaderInterface for YouTube API v3.
Handles video uploads with resumable upload protocol.

Each upload gets its own HTTP stack:

    httplib2.Http  <-  LimitingTransport  <-  AuthorizedHttp  <-  youtube service

so the video payload is throttled and measured, while the OAuth token
refresh and API calls pass straight through.
"""

import io
import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, TextIO

import httplib2
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload, MediaUpload

from config.settings import DEFAULT_LANGUAGE, HTTP_TIMEOUT, UPLOAD_CHUNK_SIZE
from throttle.config import ThrottleConfig
from throttle.errors import CancellationError, WaitTimeoutError
from throttle.models.transfer_status import TransferStatus
from throttle.transport.limiting_transport import LimitingTransport
from throttle.utils.format_utils import format_rate, format_size
from upload.constants import (
    DEFAULT_ATTACHMENT_MIMETYPE,
    DEFAULT_STREAM_CHUNK_SIZE,
    SLUG_HEADER,
    VIDEO_INSERT_PARTS,
    YOUTUBE_API_SERVICE_NAME,
    YOUTUBE_API_VERSION,
    UploadStatus,
)
from upload.interfaces.uploader_interface import (
    UploaderError,
    UploaderInterface,
    UploadResult,
)
from upload.models.video_metadata import VideoMetadata
from upload.utils.source_utils import MediaSource, open_source, read_chunk, video_mimetype


def create_http() -> httplib2.Http:
    """Default downstream HTTP object"""
    return httplib2.Http(timeout=HTTP_TIMEOUT)


class StreamUpload(MediaUpload):
    """
    Resumable media over a stream that only reads forward.

    MediaIoBaseUpload seeks to the end to learn the size, which stdin and
    HTTP response bodies can't do. This reads one chunk at a time and keeps
    it until the next request, so a 308 that accepted only part of a chunk
    can still be resent.

    googleapiclient ends the upload on the first short chunk; with no
    known size the total is sent as "*" until then.
    """

    def __init__(self, fd: Any, mimetype: str, chunksize: int, size: int = 0):
        """
        Args:
            fd: Object with read(size) -> bytes
            mimetype: MIME type of the payload
            chunksize: Bytes per request (> 0)
            size: Total bytes if known (0 = unknown)
        """
        super().__init__()
        if chunksize <= 0:
            raise ValueError(f"chunksize must be positive, got {chunksize}")

        self._fd = fd
        self._mimetype = mimetype
        self._chunksize = chunksize
        self._size = size or None

        self._offset = 0  # Stream position of the first buffered byte
        self._buffer = bytearray()

    def chunksize(self) -> int:
        return self._chunksize

    def mimetype(self) -> str:
        return self._mimetype

    def size(self) -> Optional[int]:
        return self._size

    def resumable(self) -> bool:
        return True

    def has_stream(self) -> bool:
        return False

    def getbytes(self, begin: int, length: int) -> bytes:
        """
        Bytes [begin, begin + length), short only at end of stream.

        Raises:
            ValueError: If `begin` lies outside the buffered chunk
        """
        skip = begin - self._offset
        if skip < 0 or skip > len(self._buffer):
            raise ValueError(
                f"Can't read from byte {begin}: buffered "
                f"{self._offset}-{self._offset + len(self._buffer)}",
            )

        del self._buffer[:skip]
        self._offset = begin

        missing = length - len(self._buffer)
        if missing > 0:
            self._buffer.extend(read_chunk(self._fd, missing))

        return bytes(self._buffer[:length])


class YouTubeUploader(UploaderInterface):
    """
    YouTube video uploader using YouTube Data API v3.

    Features:
    - Resumable uploads, whole file or in chunks
    - Bandwidth cap, optionally only inside a daily time window
    - Live progress (periodic, or on SIGUSR1 in quiet mode)
    - Thumbnail, caption and playlist handling after the upload
    """

    def __init__(
        self,
        credentials: Credentials,
        throttle_config: Optional[ThrottleConfig] = None,
        chunk_size: int = UPLOAD_CHUNK_SIZE,
        send_filename: bool = True,
        http_factory: Optional[Callable[[], Any]] = None,
        progress_output: Optional[TextIO] = None,
    ):
        """
        Initialize YouTube uploader.

        Args:
            credentials: Authorized user credentials
            throttle_config: Rate limit / window / progress settings
            chunk_size: Bytes per resumable request (<= 0 = whole file at once)
            send_filename: Send the file name in the Slug header
            http_factory: Creates the downstream HTTP object (default: httplib2)
            progress_output: Stream for progress lines (default: stdout)

        Example:
            credentials = Credentials.from_authorized_user_file("token.json")
            uploader = YouTubeUploader(
                credentials,
                throttle_config=ThrottleConfig(overrides={"rate_limit_kbps": 8000}),
            )
        """
        self.logger = logging.getLogger(__name__)

        self.credentials = credentials
        self.throttle_config = throttle_config or ThrottleConfig()
        self.chunk_size = chunk_size if chunk_size > 0 else -1
        self.send_filename = send_filename
        self.http_factory = http_factory or create_http
        self.progress_output = progress_output

        self._transport: Optional[LimitingTransport] = None
        self._lock = threading.Lock()
        self._control_service = None

        self.logger.info(
            f"YouTube Uploader initialized "
            f"(limit: {self.throttle_config.rate_limit_kbps} kbps, "
            f"window: {self.throttle_config.build_time_window()}, "
            f"chunk: {self.chunk_size})",
        )

    def _build_service(self, http: Any):
        """
        Build a YouTube API service on top of `http`.

        Raises:
            UploaderError: If service initialization fails
        """
        try:
            return build(
                YOUTUBE_API_SERVICE_NAME,
                YOUTUBE_API_VERSION,
                http=AuthorizedHttp(self.credentials, http=http),
                cache_discovery=False,
            )
        except Exception as e:
            raise UploaderError(
                f"Failed to initialize YouTube service: {e}",
                status=UploadStatus.FAILED,
            ) from e

    def _get_control_service(self):
        """Unthrottled service for everything except the video payload"""
        if self._control_service is None:
            self._control_service = self._build_service(self.http_factory())
        return self._control_service

    def upload_video(
        self,
        video_path: str,
        metadata: VideoMetadata,
        thumbnail_path: Optional[str] = None,
        caption_path: Optional[str] = None,
        metadata_out_path: Optional[str] = None,
    ) -> UploadResult:
        """
        Upload video to YouTube.

        Args:
            video_path: Path to video file, http(s) URL, or "-" for stdin
            metadata: Video metadata (already merged with defaults)
            thumbnail_path: Thumbnail image path or URL (optional)
            caption_path: Caption file path or URL (optional)
            metadata_out_path: Where to write the created resource (optional)

        Returns:
            UploadResult with upload details
        """
        start_time = time.time()
        file_size = 0
        source: Optional[MediaSource] = None
        transport: Optional[LimitingTransport] = None

        try:
            source = open_source(video_path)
            file_size = source.size

            self.logger.info(
                f"Starting upload: {video_path} "
                f"({format_size(file_size) if file_size else 'unknown size'})",
            )

            transport = self.throttle_config.create_transport(
                self.http_factory(),
                file_size,
            )
            with self._lock:
                self._transport = transport

            service = self._build_service(transport)
            request = self._create_insert_request(service, source, metadata)

            reporter = self.throttle_config.create_reporter(
                transport.get_monitor_status,
                output=self.progress_output,
            )
            with reporter:
                reporter.install_signal_handler()
                resource = self._execute_upload(request)

            video_id = resource["id"]
            status = transport.get_monitor_status()
            upload_duration = time.time() - start_time

            self.logger.info(
                f"✅ Upload successful: {video_id} "
                f"({upload_duration:.1f}s, {format_size(status.bytes_transferred)}, "
                f"avg {format_rate(status.average_rate_bps).strip()})",
            )

            if metadata_out_path:
                self._write_metadata(resource, metadata_out_path)
            if thumbnail_path:
                self._set_thumbnail(video_id, thumbnail_path)
            if caption_path:
                self._insert_caption(
                    video_id,
                    caption_path,
                    metadata.language or DEFAULT_LANGUAGE,
                )
            for playlist_id in metadata.playlist_ids:
                self._add_to_playlist(video_id, playlist_id)

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
            self.logger.error(f"Upload failed: {e}")
            return self._failed_result(e.status, str(e), start_time, file_size, transport)

        except WaitTimeoutError as e:
            error_msg = f"Upload timed out: {e}"
            self.logger.error(error_msg)
            return self._failed_result(
                UploadStatus.NETWORK_ERROR,
                error_msg,
                start_time,
                file_size,
                transport,
            )

        except CancellationError as e:
            self.logger.warning(f"Upload cancelled: {e}")
            return self._failed_result(
                UploadStatus.CANCELLED,
                f"Upload cancelled: {e}",
                start_time,
                file_size,
                transport,
            )

        except HttpError as e:
            # YouTube API errors
            error_msg = f"YouTube API error: {e.reason}"
            self.logger.error(error_msg)
            return self._failed_result(
                self._parse_http_error(e),
                error_msg,
                start_time,
                file_size,
                transport,
            )

        except RefreshError as e:
            error_msg = f"Failed to refresh credentials: {e}"
            self.logger.error(error_msg)
            return self._failed_result(
                UploadStatus.AUTH_ERROR,
                error_msg,
                start_time,
                file_size,
                transport,
            )

        except (httplib2.HttpLib2Error, OSError) as e:
            error_msg = f"Network error during upload: {e}"
            self.logger.error(error_msg)
            return self._failed_result(
                UploadStatus.NETWORK_ERROR,
                error_msg,
                start_time,
                file_size,
                transport,
            )

        except Exception as e:
            # Unexpected errors
            error_msg = f"Unexpected upload error: {e}"
            self.logger.error(error_msg, exc_info=True)
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

    def _create_insert_request(
        self,
        service,
        source: MediaSource,
        metadata: VideoMetadata,
    ):
        """Prepare the resumable videos.insert request"""
        mimetype = video_mimetype(source)

        if source.seekable:
            media = MediaIoBaseUpload(
                source.stream,
                mimetype=mimetype,
                chunksize=self.chunk_size,
                resumable=True,
            )
        else:
            media = StreamUpload(
                source.stream,
                mimetype=mimetype,
                chunksize=self.chunk_size if self.chunk_size > 0 else DEFAULT_STREAM_CHUNK_SIZE,
                size=source.size,
            )

        request = service.videos().insert(
            part=VIDEO_INSERT_PARTS,
            body=metadata.to_resource_body(),
            media_body=media,
            notifySubscribers=metadata.notify_subscribers,
        )

        if self.send_filename and not source.is_stdin:
            self.logger.debug(f"Adding file name to request: {source.name!r}")
            request.headers[SLUG_HEADER] = source.name

        return request

    def _execute_upload(self, request) -> Dict[str, Any]:
        """
        Execute resumable upload.

        Args:
            request: YouTube API insert request

        Returns:
            Video resource returned by the API

        Raises:
            UploaderError: If upload fails
            CancellationError: If the upload was cancelled while throttled
        """
        response = None

        while response is None:
            try:
                status, response = request.next_chunk()
            except HttpError as e:
                raise UploaderError(
                    f"Upload failed: {e.reason}",
                    status=self._parse_http_error(e),
                ) from e

            if status:
                self.logger.debug(f"Chunk accepted ({int(status.progress() * 100)}%)")

        if response and "id" in response:
            return response
        raise UploaderError(
            "Upload completed but no video ID returned",
            status=UploadStatus.FAILED,
        )

    # =========================================================================
    # POST-UPLOAD STEPS
    # Failures here are logged; the video itself is already uploaded.
    # =========================================================================

    def _write_metadata(self, resource: Dict[str, Any], path: str) -> None:
        """Write the created video resource to a JSON file"""
        try:
            with open(path, "w") as f:
                json.dump(resource, f, indent=2)
            self.logger.info(f"Wrote video metadata to file {path!r}")
        except OSError as e:
            self.logger.error(f"Failed to write video metadata to {path!r}: {e}")

    def _set_thumbnail(self, video_id: str, thumbnail_path: str) -> None:
        """Upload a thumbnail image for the video"""
        try:
            self._get_control_service().thumbnails().set(
                videoId=video_id,
                media_body=self._attachment_media(thumbnail_path),
            ).execute()
            self.logger.info(f"Thumbnail {thumbnail_path!r} uploaded")
        except (HttpError, OSError, UploaderError) as e:
            self.logger.warning(f"Failed to upload thumbnail: {e}")

    def _insert_caption(self, video_id: str, caption_path: str, language: str) -> None:
        """Attach a caption track to the video"""
        try:
            self._get_control_service().captions().insert(
                part="snippet",
                body={
                    "snippet": {
                        "videoId": video_id,
                        "language": language,
                        "name": language,
                    },
                },
                media_body=self._attachment_media(caption_path),
            ).execute()
            self.logger.info(f"Caption {caption_path!r} uploaded ({language})")
        except (HttpError, OSError, UploaderError) as e:
            self.logger.warning(f"Failed to upload caption: {e}")

    def _add_to_playlist(self, video_id: str, playlist_id: str) -> None:
        """
        Add video to playlist.

        Args:
            video_id: YouTube video ID
            playlist_id: YouTube playlist ID

        Note: Logs warning if fails but doesn't raise - non-critical
        """
        try:
            self._get_control_service().playlistItems().insert(
                part="snippet",
                body={
                    "snippet": {
                        "playlistId": playlist_id,
                        "resourceId": {
                            "kind": "youtube#video",
                            "videoId": video_id,
                        },
                    },
                },
            ).execute()

            self.logger.info(f"Added video {video_id} to playlist {playlist_id}")

        except HttpError as e:
            # Don't fail upload if playlist add fails
            self.logger.warning(
                f"Failed to add video to playlist: {e.reason}",
            )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _attachment_media(self, location: str) -> MediaIoBaseUpload:
        """
        Load a thumbnail or caption (path or URL) into memory.

        Raises:
            UploaderError: If the location can't be opened
            OSError: If reading it fails
        """
        source = open_source(location)
        try:
            data = source.stream.read()
        finally:
            source.close()

        return MediaIoBaseUpload(
            io.BytesIO(data),
            mimetype=source.mimetype or DEFAULT_ATTACHMENT_MIMETYPE,
        )

    def _failed_result(
        self,
        status: UploadStatus,
        error_message: str,
        start_time: float,
        file_size: int,
        transport: Optional[LimitingTransport],
    ) -> UploadResult:
        """Build a failure result, keeping whatever progress was made"""
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

    def _parse_http_error(self, error: HttpError) -> UploadStatus:
        """
        Parse HTTP error to determine appropriate status code.

        Args:
            error: HTTP error from YouTube API

        Returns:
            Appropriate UploadStatus enum
        """
        if error.resp.status in [401, 403]:
            return UploadStatus.AUTH_ERROR
        if error.resp.status == 429:
            return UploadStatus.QUOTA_EXCEEDED
        if error.resp.status >= 500:
            return UploadStatus.NETWORK_ERROR
        return UploadStatus.FAILED

    def get_progress(self) -> Optional[TransferStatus]:
        """Progress of the upload in flight, or None"""
        with self._lock:
            transport = self._transport
        return transport.get_monitor_status() if transport else None

    def cancel(self) -> None:
        """Interrupt the upload in flight"""
        with self._lock:
            transport = self._transport
        if transport is None:
            self.logger.debug("Cancel requested but no upload running")
            return
        transport.cancel()

    def is_available(self) -> bool:
        """
        Check if uploader is ready.

        Returns:
            True if credentials are valid or can be refreshed
        """
        return self.credentials is not None and (
            self.credentials.valid or bool(self.credentials.refresh_token)
        )

    def test_connection(self) -> bool:
        """
        Test connection to YouTube API.

        Makes a simple API call to verify connectivity and auth.

        Returns:
            True if connection successful
        """
        try:
            # Simple API call - list channels
            request = self._get_control_service().channels().list(
                part="snippet",
                mine=True,
            )
            request.execute()

            self.logger.info("✅ YouTube API connection test successful")
            return True

        except Exception as e:
            self.logger.error(f"❌ YouTube API connection test failed: {e}")
            return False
