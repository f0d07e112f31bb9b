"""retrycheck - Retry-until-success harness for test assertions.

Runs a check function repeatedly until it stops recording failures, or a
retry policy gives up. On give-up, every distinct diagnostic line recorded
across all attempts is reported once and the test is failed.

Quick Start:
    >>> from retrycheck import run
    >>>
    >>> def test_queue_drains():
    ...     def check(r):
    ...         depth = queue.depth()
    ...         if depth:
    ...             r.fatalf("queue depth %d", depth)
    ...     run(None, check)  # retries every 25ms for 2s, then raises RetryExhausted

Custom Policies:
    >>> from retrycheck import Counter, Timer, run_with
    >>> run_with(None, Timer(timeout=10.0, wait=0.5), check)
    >>> run_with(None, Counter(count=5, wait=0.1), check)

Plain asserts work too:
    >>> def check(r):
    ...     assert cache.get("k") == "v"  # aborts the attempt, retried

pytest Integration:
    >>> def test_ready(retry):  # fixture from the bundled pytest plugin
    ...     retry(lambda r: r.check(probe()))
"""

from __future__ import annotations

__version__ = "0.1.0"

# Errors
from .foundation.errors import AttemptAborted, FailureKind, RetryExhausted, RetryReport

# Settings
from .foundation.config import RetrycheckSettings, get_settings

# Retry
from .runtime.retry import (
    CheckFn,
    Counter,
    Outcome,
    PytestReporter,
    R,
    RaisingReporter,
    Reporter,
    ReportSink,
    Retryer,
    RetryState,
    Timer,
    dedup,
    run,
    run_with,
)

# Logging
from .runtime.observability import configure_logging, get_logger, log_context

__all__ = [
    "__version__",
    # Errors
    "AttemptAborted", "FailureKind", "RetryExhausted", "RetryReport",
    # Settings
    "RetrycheckSettings", "get_settings",
    # Retry
    "R", "Retryer", "Timer", "Counter",
    "Reporter", "ReportSink", "RaisingReporter", "PytestReporter",
    "CheckFn", "Outcome", "RetryState", "dedup", "run", "run_with",
    # Logging
    "configure_logging", "get_logger", "log_context",
]
