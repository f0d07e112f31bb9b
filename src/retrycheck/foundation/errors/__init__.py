"""Failure signals and reports.

- FailureKind: How a failure was recorded
- AttemptAborted: Abrupt-fail signal contained at the attempt boundary
- RetryReport/RetryExhausted: Terminal report and the exception carrying it
"""

from .errors import AttemptAborted, FailureKind, RetryExhausted, RetryReport

__all__ = ["AttemptAborted", "FailureKind", "RetryExhausted", "RetryReport"]
