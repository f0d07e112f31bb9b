"""Retry-until-success harness for test assertions.

Runs a check function until it stops recording failures or a retry policy
gives up, then reports the collected diagnostics once.

Example:
    >>> from retrycheck.runtime.retry import R, Timer, run_with
    >>>
    >>> def check(r: R) -> None:
    ...     r.check(ping(host))
    >>>
    >>> run_with(None, Timer(timeout=5.0, wait=0.1), check)
"""

from .context import R
from .policy import Counter, Retryer, Timer
from .reporter import PytestReporter, RaisingReporter, Reporter, ReportSink
from .runner import CheckFn, Outcome, RetryState, dedup, run, run_with

__all__ = [
    # Context
    "R",
    # Policies
    "Retryer",
    "Timer",
    "Counter",
    # Reporters
    "Reporter",
    "ReportSink",
    "RaisingReporter",
    "PytestReporter",
    # Loop
    "CheckFn",
    "Outcome",
    "RetryState",
    "dedup",
    "run",
    "run_with",
]
