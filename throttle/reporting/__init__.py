"""
Reporting Package
"""

from throttle.reporting.progress_reporter import ProgressReporter

__all__ = [
    "ProgressReporter",
]
