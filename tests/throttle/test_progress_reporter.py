"""
Progress Reporter Tests

Tests for ProgressReporter showing:
- Line rendering
- In-place vs. newline output
- Quiet mode with on-demand reports
- SIGUSR1 handling

To run these tests:
    pytest tests/throttle/test_progress_reporter.py -v
"""

import io
import os
import signal
import threading
import time

import pytest

from throttle.models.transfer_status import TransferStatus
from throttle.reporting.progress_reporter import ProgressReporter

HALFWAY = TransferStatus(
    bytes_transferred=5_000_000,
    total_bytes=10_000_000,
    average_rate_bps=1_000_000,
    percent_complete=50.0,
    estimated_time_remaining=5.0,
    elapsed_time=5.0,
    start_time=100.0,
)

HALFWAY_LINE = "Progress:     8.00 Mbps, 5000000 / 10000000 (50.0%) ETA 0:05"


def wait_for(predicate, timeout: float = 2.0) -> bool:
    """Poll until predicate() is true or timeout expires"""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


# =============================================================================
# RENDER TESTS
# =============================================================================


@pytest.mark.unit
def test_render_known_total():
    assert ProgressReporter.render(HALFWAY) == HALFWAY_LINE


@pytest.mark.unit
def test_render_unknown_total():
    status = TransferStatus(bytes_transferred=4000, average_rate_bps=1000)

    line = ProgressReporter.render(status)

    assert line == "Progress:     8.00 Kbps, 4000 / 0 (n/a) ETA --:--"


# =============================================================================
# EMIT TESTS
# =============================================================================


@pytest.mark.unit
def test_emit_overwrites_in_place():
    output = io.StringIO()
    reporter = ProgressReporter(lambda: HALFWAY, output=output)

    reporter.emit()
    reporter.emit()

    blank = " " * len(HALFWAY_LINE)
    assert output.getvalue() == f"\r\r{HALFWAY_LINE}\r{blank}\r{HALFWAY_LINE}"


@pytest.mark.unit
def test_emit_quiet_prints_full_lines():
    output = io.StringIO()
    reporter = ProgressReporter(lambda: HALFWAY, quiet=True, output=output)

    returned = reporter.emit()

    assert returned == HALFWAY_LINE
    assert output.getvalue() == f"{HALFWAY_LINE}\n"


@pytest.mark.unit
def test_newline_emit_finishes_in_place_line():
    output = io.StringIO()
    reporter = ProgressReporter(lambda: HALFWAY, output=output)

    reporter.emit()
    reporter.emit(newline=True)

    assert output.getvalue().endswith(f"{HALFWAY_LINE}\n{HALFWAY_LINE}\n")


# =============================================================================
# THREAD TESTS
# =============================================================================


@pytest.mark.unit
def test_periodic_reports_and_final_newline():
    output = io.StringIO()
    reporter = ProgressReporter(lambda: HALFWAY, interval=0.05, output=output)

    with reporter:
        assert wait_for(lambda: output.getvalue().count(HALFWAY_LINE) >= 2)

    assert output.getvalue().endswith("\n")


@pytest.mark.unit
def test_quiet_mode_only_reports_on_demand():
    output = io.StringIO()
    reporter = ProgressReporter(lambda: HALFWAY, interval=0.01, quiet=True, output=output)

    with reporter:
        time.sleep(0.1)
        assert output.getvalue() == ""

        reporter.report_now()
        assert wait_for(lambda: output.getvalue() == f"{HALFWAY_LINE}\n")


@pytest.mark.unit
def test_stop_without_start():
    output = io.StringIO()
    reporter = ProgressReporter(lambda: HALFWAY, output=output)

    reporter.stop()

    assert output.getvalue() == ""


# =============================================================================
# SIGNAL TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.skipif(not hasattr(signal, "SIGUSR1"), reason="SIGUSR1 not available")
def test_sigusr1_prints_progress_and_is_restored():
    output = io.StringIO()
    previous = signal.getsignal(signal.SIGUSR1)
    reporter = ProgressReporter(lambda: HALFWAY, quiet=True, output=output)

    with reporter:
        assert reporter.install_signal_handler() is True
        os.kill(os.getpid(), signal.SIGUSR1)
        assert wait_for(lambda: HALFWAY_LINE in output.getvalue())

    assert signal.getsignal(signal.SIGUSR1) == previous


@pytest.mark.unit
def test_signal_handler_outside_main_thread():
    reporter = ProgressReporter(lambda: HALFWAY, output=io.StringIO())
    results = []

    thread = threading.Thread(target=lambda: results.append(reporter.install_signal_handler()))
    thread.start()
    thread.join(timeout=5.0)

    assert results == [False]
