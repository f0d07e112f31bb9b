"""Testing support for code built on retrycheck.

- RecordingReporter: Reporter double recording log/fail_now calls
- FakeClock: Deterministic time source for Timer

The pytest plugin (``retry`` fixture) lives in ``fixture`` and is loaded by
pytest through the ``pytest11`` entry point.
"""

from .mock import FakeClock, RecordingReporter

__all__ = ["FakeClock", "RecordingReporter"]
