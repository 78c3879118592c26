"""
Time Window Model

Daily recurring clock-time interval during which rate limiting applies.

Example:
    window = TimeWindow.parse("22:00-02:00")
    if window.contains(datetime.now()):
        print("Inside the throttled window")
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from throttle.constants import (
    DEFAULT_CLOCK_FORMAT,
    TIME_WINDOW_SEPARATOR,
    WINDOW_PERIOD,
)
from throttle.errors import ConfigurationError


@dataclass
class TimeWindow:
    """
    Local-time interval anchored to a calendar day.

    A window whose end falls before its start spans midnight, so the end is
    pushed to the following day. The window rolls itself forward by whole
    days as time passes, so one parsed window stays valid for the whole
    lifetime of an upload.

    A zero window (no start, no end) means "no time restriction".
    """

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def parse(
        cls,
        spec: str,
        clock_format: str = DEFAULT_CLOCK_FORMAT,
        now: Optional[datetime] = None,
    ) -> "TimeWindow":
        """
        Parse a "HH:MM-HH:MM" window literal.

        Args:
            spec: Window literal, e.g. "10:00-14:00" or "22:00-02:00"
            clock_format: strptime format for each clock time
            now: Reference moment (default: current local time)

        Returns:
            TimeWindow anchored to the reference date

        Raises:
            ConfigurationError: If the literal is malformed

        Example:
            window = TimeWindow.parse("22:00-02:00")
            # window.end is one day after window.start
        """
        parts = spec.split(TIME_WINDOW_SEPARATOR)
        if len(parts) != 2:
            raise ConfigurationError(
                f"Time window {spec!r} should have 2 parts separated by "
                f"{TIME_WINDOW_SEPARATOR!r}",
            )

        now = now or datetime.now()
        start = cls._anchor(parts[0], clock_format, now, "start")
        end = cls._anchor(parts[1], clock_format, now, "end")

        # Range spans midnight
        if end <= start:
            end += WINDOW_PERIOD

        return cls(start=start, end=end)

    @staticmethod
    def _anchor(
        token: str,
        clock_format: str,
        now: datetime,
        label: str,
    ) -> datetime:
        """Parse one clock time and pin it to the date of `now`"""
        try:
            clock = datetime.strptime(token.strip(), clock_format)
        except ValueError as e:
            raise ConfigurationError(
                f"Time window {label} time {token!r} was invalid: {e}",
            ) from e

        return now.replace(
            hour=clock.hour,
            minute=clock.minute,
            second=0,
            microsecond=0,
        )

    @property
    def is_zero(self) -> bool:
        """True if no time restriction was configured"""
        return self.start is None or self.end is None

    def contains(self, now: datetime) -> bool:
        """
        Check whether `now` falls inside the window.

        Rolls the window forward by whole days first if it has gone stale
        (start is 24h or more in the past). Mutates the window in place.

        Args:
            now: Moment to test

        Returns:
            True if start <= now < end
        """
        if self.is_zero:
            return False

        while now - self.start >= WINDOW_PERIOD:
            self.start += WINDOW_PERIOD
            self.end += WINDOW_PERIOD

        return self.start <= now < self.end

    @property
    def duration(self) -> timedelta:
        """Length of the window (zero for a zero window)"""
        if self.is_zero:
            return timedelta(0)
        return self.end - self.start

    def __str__(self) -> str:
        if self.is_zero:
            return "always"
        return f"{self.start:%H:%M}-{self.end:%H:%M}"
