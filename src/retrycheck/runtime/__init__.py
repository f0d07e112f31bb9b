"""Runtime - Retry execution and observability.

Contains: retry (policies, attempt context, loop, reporters), observability.
"""

from __future__ import annotations

from .observability import configure_logging, get_logger, log_context
from .retry import (
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

__all__ = [
    # Retry
    "R", "Retryer", "Timer", "Counter",
    "Reporter", "ReportSink", "RaisingReporter", "PytestReporter",
    "CheckFn", "Outcome", "RetryState", "dedup", "run", "run_with",
    # Observability
    "configure_logging", "get_logger", "log_context",
]
