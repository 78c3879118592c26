"""
Format Utilities Tests

To run these tests:
    pytest tests/throttle/test_format_utils.py -v
"""

import pytest

from throttle.utils.format_utils import format_duration, format_rate, format_size


@pytest.mark.unit
@pytest.mark.parametrize(
    "bytes_per_second, expected",
    [
        (0, "    0.00 Kbps"),
        (1000, "    8.00 Kbps"),
        (124_999, "  999.99 Kbps"),
        (125_000, "    1.00 Mbps"),
        (1_000_000, "    8.00 Mbps"),
    ],
)
def test_format_rate(bytes_per_second, expected):
    assert format_rate(bytes_per_second) == expected


@pytest.mark.unit
@pytest.mark.parametrize(
    "seconds, expected",
    [
        (None, "--:--"),
        (0, "0:00"),
        (5.9, "0:05"),
        (630, "10:30"),
        (3723, "1:02:03"),
    ],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


@pytest.mark.unit
def test_format_size():
    assert format_size(512) == "512.00 B"
    assert format_size(2 * 1024 * 1024) == "2.00 MB"
    assert format_size(1_500_000_000) == "1.40 GB"
