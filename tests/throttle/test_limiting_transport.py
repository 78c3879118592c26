"""
Limiting Transport Tests

Tests for LimitingTransport showing:
- Payload request detection
- Pass-through of control requests
- One reader per upload, carried over across re-sent bodies
- Rate enforcement end to end
- Cancellation and cleanup

To run these tests:
    pytest tests/throttle/test_limiting_transport.py -v
"""

import io
import threading
import time

import pytest

from throttle.controllers.rate_limited_reader import RateLimitedReader
from throttle.errors import CancellationError, ConfigurationError, WaitTimeoutError
from throttle.transport.limiting_transport import LimitingTransport, is_payload_request

UPLOAD_URL = "https://www.googleapis.com/upload/youtube/v3/videos"


# =============================================================================
# DETECTION TESTS
# =============================================================================


class TestPayloadDetection:
    """Test is_payload_request heuristics"""

    @pytest.mark.unit
    def test_no_body_is_never_payload(self):
        assert is_payload_request({"content-type": "video/mp4"}, None) is False

    @pytest.mark.unit
    def test_streaming_body_is_payload(self):
        assert is_payload_request({}, io.BytesIO(b"data")) is True

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "content_type",
        [
            "video/mp4",
            "multipart/related; boundary='===1234=='",
            "application/octet-stream",
        ],
    )
    def test_payload_content_types(self, content_type):
        assert is_payload_request({"Content-Type": content_type}, b"bytes") is True

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "content_type",
        [
            "application/json",
            "application/x-www-form-urlencoded",
            "image/jpeg",
        ],
    )
    def test_control_content_types(self, content_type):
        assert is_payload_request({"content-type": content_type}, "{}") is False

    @pytest.mark.unit
    def test_upload_content_type_header(self):
        headers = {
            "content-type": "application/json",
            "X-Upload-Content-Type": "application/octet-stream",
        }

        assert is_payload_request(headers, "{}") is True

    @pytest.mark.unit
    def test_other_upload_content_type_is_not_payload(self):
        headers = {
            "content-type": "application/json",
            "x-upload-content-type": "video/mp4",
        }

        assert is_payload_request(headers, "{}") is False

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "content_range",
        ["bytes 0-262143/*", "bytes 262144-300000/300001", "bytes 0-9/10"],
    )
    def test_byte_chunk_with_content_range_is_payload(self, content_range):
        headers = {"Content-Length": "10", "Content-Range": content_range}

        assert is_payload_request(headers, b"x" * 10) is True

    @pytest.mark.unit
    def test_status_query_is_not_payload(self):
        headers = {"Content-Range": "bytes */1000", "content-length": "0"}

        assert is_payload_request(headers, b"") is False


@pytest.mark.unit
def test_byte_chunks_share_one_reader(recording_http):
    transport = LimitingTransport(recording_http, file_size=0)

    transport.request(
        UPLOAD_URL,
        "PUT",
        body=b"a" * 4000,
        headers={"Content-Range": "bytes 0-3999/*"},
    )
    transport.request(
        UPLOAD_URL,
        "PUT",
        body=b"b" * 1000,
        headers={"Content-Range": "bytes 4000-4999/5000"},
    )

    status = transport.get_monitor_status()
    assert isinstance(recording_http.requests[1]["body"], RateLimitedReader)
    assert status.bytes_transferred == 5000
    assert status.total_bytes == 0
    assert status.progress == "n/a"


# =============================================================================
# CONSTRUCTION TESTS
# =============================================================================


@pytest.mark.unit
def test_requires_downstream_http():
    with pytest.raises(ConfigurationError):
        LimitingTransport(None, file_size=10)


@pytest.mark.unit
def test_rejects_negative_rate(recording_http):
    with pytest.raises(ConfigurationError):
        LimitingTransport(recording_http, file_size=10, rate_limit_kbps=-1)


@pytest.mark.unit
def test_status_before_upload(recording_http):
    transport = LimitingTransport(recording_http, file_size=1000)

    status = transport.get_monitor_status()

    assert status.bytes_transferred == 0
    assert status.total_bytes == 1000
    assert status.started is False
    assert transport.reader is None


# =============================================================================
# ROUTING TESTS
# =============================================================================


@pytest.mark.unit
def test_control_requests_pass_through_untouched(recording_http):
    transport = LimitingTransport(recording_http, file_size=1000, rate_limit_kbps=8)
    body = '{"snippet": {}}'
    headers = {"content-type": "application/json"}

    response, content = transport.request(UPLOAD_URL, "POST", body=body, headers=headers)

    sent = recording_http.requests[0]
    assert sent["body"] is body
    assert sent["headers"] == headers
    assert response.status == 200
    assert content == b"ok"
    assert transport.reader is None


@pytest.mark.unit
def test_payload_body_is_wrapped(recording_http):
    transport = LimitingTransport(recording_http, file_size=50_000)

    transport.request(UPLOAD_URL, "PUT", body=io.BytesIO(b"x" * 50_000), headers={})

    sent = recording_http.requests[0]
    assert isinstance(sent["body"], RateLimitedReader)
    assert sent["bytes_read"] == 50_000
    assert transport.get_monitor_status().bytes_transferred == 50_000
    assert transport.get_monitor_status().progress == "100.0%"


@pytest.mark.unit
def test_bytes_payload_is_streamed(recording_http):
    transport = LimitingTransport(recording_http, file_size=3)

    transport.request(
        UPLOAD_URL,
        "POST",
        body=b"abc",
        headers={"content-type": "video/mp4"},
    )

    assert recording_http.requests[0]["bytes_read"] == 3
    assert transport.get_monitor_status().bytes_transferred == 3


@pytest.mark.unit
def test_extra_arguments_are_forwarded(recording_http):
    transport = LimitingTransport(recording_http, file_size=0)

    transport.request(UPLOAD_URL, "GET", redirections=3, connection_type=None)

    assert recording_http.requests[0]["kwargs"] == {
        "redirections": 3,
        "connection_type": None,
    }


@pytest.mark.unit
def test_custom_detector(recording_http):
    transport = LimitingTransport(
        recording_http,
        file_size=100,
        detector=lambda headers, body: headers.get("x-payload") == "yes",
    )

    transport.request(UPLOAD_URL, "PUT", body=b"x" * 100, headers={"x-payload": "yes"})
    transport.request(UPLOAD_URL, "PUT", body=io.BytesIO(b"y"), headers={})

    assert transport.get_monitor_status().bytes_transferred == 100
    assert not isinstance(recording_http.requests[1]["body"], RateLimitedReader)


@pytest.mark.unit
def test_reader_carried_over_between_requests(recording_http):
    """
    Chunked uploads and retries share one reader and one monitor.
    """
    transport = LimitingTransport(recording_http, file_size=30_000, rate_limit_kbps=100_000)

    transport.request(UPLOAD_URL, "PUT", body=io.BytesIO(b"a" * 10_000), headers={})
    reader = transport.reader
    start_time = transport.get_monitor_status().start_time

    transport.request(UPLOAD_URL, "PUT", body=io.BytesIO(b"b" * 20_000), headers={})

    status = transport.get_monitor_status()
    assert transport.reader is reader
    assert status.bytes_transferred == 30_000
    assert status.start_time == start_time
    assert status.is_complete is True


@pytest.mark.unit
def test_getattr_delegates_to_http(recording_http):
    transport = LimitingTransport(recording_http, file_size=0)

    assert transport.timeout == 30

    with pytest.raises(AttributeError):
        transport.no_such_attribute


# =============================================================================
# RATE TESTS
# =============================================================================


@pytest.mark.slow
def test_rate_limit_end_to_end(recording_http):
    """
    10,000,000 bytes at 40000 kbps (5,000,000 B/s) take about 2 seconds.
    """
    size = 10_000_000
    transport = LimitingTransport(recording_http, file_size=size, rate_limit_kbps=40_000)

    start = time.monotonic()
    transport.request(UPLOAD_URL, "PUT", body=io.BytesIO(b"\0" * size), headers={})
    elapsed = time.monotonic() - start

    assert 1.9 <= elapsed < 2.6

    status = transport.get_monitor_status()
    assert status.bytes_transferred == size
    assert status.percent_complete == pytest.approx(100.0)
    assert status.average_rate_bps == pytest.approx(5_000_000, rel=0.15)


# =============================================================================
# CANCEL / CLOSE TESTS
# =============================================================================


@pytest.mark.unit
def test_cancel_interrupts_payload_request(recording_http):
    transport = LimitingTransport(recording_http, file_size=100_000, rate_limit_kbps=8)
    timer = threading.Timer(0.1, transport.cancel)
    timer.start()

    start = time.monotonic()
    try:
        with pytest.raises(CancellationError):
            transport.request(UPLOAD_URL, "PUT", body=io.BytesIO(b"x" * 100_000), headers={})
    finally:
        timer.cancel()

    assert time.monotonic() - start < 2.0
    assert transport.get_monitor_status().bytes_transferred == 2 * 8192


@pytest.mark.unit
def test_close_releases_reader_and_http(recording_http):
    transport = LimitingTransport(recording_http, file_size=10)
    body = io.BytesIO(b"x" * 10)
    transport.request(UPLOAD_URL, "PUT", body=body, headers={})

    transport.close()

    assert body.closed is True
    assert recording_http.closed is True


# =============================================================================
# WAIT TIMEOUT TESTS
# =============================================================================


@pytest.mark.unit
def test_wait_timeout_fails_stalled_payload(recording_http):
    transport = LimitingTransport(
        recording_http,
        file_size=100_000,
        rate_limit_kbps=8,
        wait_timeout=0.05,
    )

    start = time.monotonic()
    with pytest.raises(WaitTimeoutError):
        transport.request(UPLOAD_URL, "PUT", body=io.BytesIO(b"x" * 100_000), headers={})

    assert time.monotonic() - start < 1.0
    assert transport.wait_timeout == 0.05
    assert transport.reader.wait_timeout == 0.05
    assert transport.get_monitor_status().bytes_transferred == 2 * 8192


@pytest.mark.unit
@pytest.mark.parametrize("wait_timeout", [None, 0])
def test_waits_unbounded_by_default(recording_http, wait_timeout):
    # recording_http has a 30 s socket timeout; throttle waits ignore it
    transport = LimitingTransport(recording_http, file_size=0, wait_timeout=wait_timeout)

    assert transport.wait_timeout is None
