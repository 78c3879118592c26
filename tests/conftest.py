"""
Test Configuration and Fixtures

Fixtures shared by the throttle and upload tests.

To use pytest:
    pip install -e ".[test]"
    pytest tests/
"""

import io
import os
import tempfile
from typing import Any, Dict, List, Optional

import httplib2
import pytest

from throttle.config import ThrottleConfig


def pytest_configure(config):
    """
    Configure pytest with custom markers.
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "unit_integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests (real throttling delays)")


# =============================================================================
# FAKE TIME
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    """
    Provide a clock that only moves when told to.

    Usage:
        def test_rate(fake_clock):
            monitor = StatusMonitor(100, clock=fake_clock)
            fake_clock.advance(2.0)
    """
    return FakeClock()


# =============================================================================
# FAKE HTTP
# =============================================================================


class RecordingHttp:
    """
    httplib2.Http stand-in that reads bodies like http.client does.

    Records (uri, method, body, headers, bytes_read) per request.
    """

    def __init__(self, block_size: int = 8192, responses: Optional[List[Any]] = None):
        self.block_size = block_size
        self.responses = list(responses or [])
        self.requests: List[Dict[str, Any]] = []
        self.timeout = 30
        self.closed = False

    def request(self, uri, method="GET", body=None, headers=None, *args, **kwargs):
        bytes_read = 0
        if hasattr(body, "read"):
            while True:
                block = body.read(self.block_size)
                if not block:
                    break
                bytes_read += len(block)

        self.requests.append(
            {
                "uri": uri,
                "method": method,
                "body": body,
                "headers": dict(headers or {}),
                "bytes_read": bytes_read,
                "kwargs": kwargs,
            },
        )

        if self.responses:
            return self.responses.pop(0)
        return httplib2.Response({"status": "200"}), b"ok"

    def close(self):
        self.closed = True


@pytest.fixture
def recording_http():
    """
    Provide a fake downstream HTTP object.

    Usage:
        def test_transport(recording_http):
            transport = LimitingTransport(recording_http, file_size=100)
    """
    return RecordingHttp()


class FailingStream(io.RawIOBase):
    """Stream whose reads fail after `good_bytes` bytes"""

    def __init__(self, good_bytes: int = 0):
        self.remaining = good_bytes

    def readable(self):
        return True

    def read(self, size=-1):
        if self.remaining <= 0:
            raise OSError("disk went away")
        n = self.remaining if size < 0 else min(size, self.remaining)
        self.remaining -= n
        return b"x" * n


@pytest.fixture
def failing_stream():
    """Provide a stream that returns 100 bytes, then raises OSError"""
    return FailingStream(good_bytes=100)


# =============================================================================
# CONFIGURATION
# =============================================================================


@pytest.fixture
def missing_config_path(tmp_path):
    """Path of a config file that doesn't exist (keeps tests off config/)"""
    return tmp_path / "throttle.yaml"


@pytest.fixture
def unthrottled_config(missing_config_path):
    """
    Provide a ThrottleConfig with no rate limit and quiet progress.

    Usage:
        def test_upload(unthrottled_config):
            uploader = MockUploader(throttle_config=unthrottled_config)
    """
    return ThrottleConfig(
        config_path=missing_config_path,
        overrides={
            "rate_limit_kbps": 0,
            "limit_between": "",
            "quiet": True,
        },
    )


# =============================================================================
# FILES
# =============================================================================


@pytest.fixture
def temp_video_file():
    """Create a temporary video file for testing"""
    with tempfile.NamedTemporaryFile(
        suffix=".mp4",
        delete=False,
        mode="wb",
    ) as f:
        f.write(b"0" * (2 * 1024 * 1024))  # 2 MB
        temp_path = f.name

    yield temp_path

    # Cleanup
    if os.path.exists(temp_path):
        os.unlink(temp_path)
