"""
Progress Reporter

Background thread that samples transfer status and prints a progress line.

Two output modes:
- Normal: one line per interval, overwritten in place ("\r")
- Quiet: nothing on the timer; a full line only when asked (report_now()
  or SIGUSR1), so quiet mode still answers "how far along is it?"
"""

import logging
import signal
import sys
import threading
from typing import Callable, Optional, TextIO

from throttle.constants import DEFAULT_PROGRESS_INTERVAL
from throttle.models.transfer_status import TransferStatus
from throttle.utils.format_utils import format_duration, format_rate


class ProgressReporter:
    """
    Periodic / on-demand progress renderer.

    Usage:
        reporter = ProgressReporter(transport.get_monitor_status)
        reporter.install_signal_handler()   # kill -USR1 <pid> prints a line
        with reporter:
            request.execute()
    """

    def __init__(
        self,
        status_source: Callable[[], TransferStatus],
        interval: float = DEFAULT_PROGRESS_INTERVAL,
        quiet: bool = False,
        output: Optional[TextIO] = None,
    ):
        """
        Initialize reporter.

        Args:
            status_source: Returns the current TransferStatus
            interval: Seconds between lines in normal mode
            quiet: Only print when report_now() is called
            output: Stream to write to (default: sys.stdout)
        """
        self.logger = logging.getLogger(__name__)
        self.status_source = status_source
        self.interval = interval
        self.quiet = quiet
        self.output = output or sys.stdout

        self._erase = 0
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._worker_thread: Optional[threading.Thread] = None
        self._previous_handler = None
        self._signum: Optional[int] = None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self) -> None:
        """Start the reporting thread"""
        if self._worker_thread is not None and self._worker_thread.is_alive():
            self.logger.warning("Progress reporter already running")
            return

        self._stop.clear()
        self._worker_thread = threading.Thread(
            target=self._worker_loop,
            daemon=True,  # Never keeps the process alive
            name="ProgressReporter",
        )
        self._worker_thread.start()
        self.logger.debug("Progress reporter started")

    def stop(self) -> None:
        """Stop the thread and finish the in-place line with a newline"""
        self._stop.set()
        self._wake.set()

        if self._worker_thread is not None:
            self._worker_thread.join(timeout=5.0)
            self._worker_thread = None

        self.restore_signal_handler()

        if self._erase:
            self.output.write("\n")
            self.output.flush()
            self._erase = 0

        self.logger.debug("Progress reporter stopped")

    def __enter__(self) -> "ProgressReporter":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # =========================================================================
    # ON-DEMAND REPORTS
    # =========================================================================

    def report_now(self) -> None:
        """Ask the thread to print a line right away (signal-safe)"""
        self._wake.set()

    def install_signal_handler(self, signum: Optional[int] = None) -> bool:
        """
        Print a progress line whenever `signum` is received.

        Args:
            signum: Signal number (default: SIGUSR1)

        Returns:
            True if installed; False where the signal doesn't exist
            (Windows) or when not called from the main thread
        """
        if signum is None:
            signum = getattr(signal, "SIGUSR1", None)
        if signum is None:
            self.logger.debug("SIGUSR1 not available on this platform")
            return False

        try:
            self._previous_handler = signal.signal(signum, self._signal_handler)
        except ValueError as e:
            # signal.signal only works in the main thread
            self.logger.warning(f"Could not install progress signal handler: {e}")
            return False

        self._signum = signum
        self.logger.debug(f"Progress on signal {signal.Signals(signum).name}")
        return True

    def restore_signal_handler(self) -> None:
        """Put back whatever handler was there before install"""
        if self._signum is None:
            return
        try:
            signal.signal(self._signum, self._previous_handler or signal.SIG_DFL)
        except ValueError as e:
            self.logger.warning(f"Could not restore signal handler: {e}")
        self._signum = None
        self._previous_handler = None

    def _signal_handler(self, _signum, _frame) -> None:
        self.report_now()

    # =========================================================================
    # WORKER
    # =========================================================================

    def _worker_loop(self) -> None:
        """
        Wait for the next tick or an explicit wake-up, then print.

        In quiet mode there is no tick - the thread sleeps until woken.
        """
        timeout = None if self.quiet else self.interval

        while not self._stop.is_set():
            woken = self._wake.wait(timeout)
            if self._stop.is_set():
                break

            if woken:
                self._wake.clear()
                self.emit(newline=True)
            else:
                self.emit()

    def emit(self, newline: bool = False) -> str:
        """
        Render the current status to the output stream.

        Args:
            newline: Print a standalone line instead of overwriting

        Returns:
            The rendered line (without control characters)
        """
        line = self.render(self.status_source())

        if self.quiet or newline:
            if self._erase:
                self.output.write("\n")
                self._erase = 0
            self.output.write(f"{line}\n")
        else:
            # Blank out the previous line, then draw the new one
            self.output.write(f"\r{' ' * self._erase}\r{line}")
            self._erase = len(line)

        self.output.flush()
        return line

    @staticmethod
    def render(status: TransferStatus) -> str:
        """
        Format a status as a single progress line.

        Example:
            "Progress:     8.00 Mbps, 5000000 / 10000000 (50.0%) ETA 0:05"
        """
        return (
            f"Progress: {format_rate(status.average_rate_bps)}, "
            f"{status.bytes_transferred} / {status.total_bytes} "
            f"({status.progress}) ETA {format_duration(status.estimated_time_remaining)}"
        )
