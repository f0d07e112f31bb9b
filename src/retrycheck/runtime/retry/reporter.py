"""Host reporters receiving the outcome of an exhausted retry run.

A reporter is the only channel through which a retry run signals failure:
``log`` receives the deduplicated diagnostics, ``fail_now`` abandons the
calling test. Any test framework can be adapted by implementing both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from retrycheck.foundation.errors import RetryExhausted, RetryReport


@runtime_checkable
class Reporter(Protocol):
    """Minimal test-object capability, compatible with a subset of a test case API."""

    def log(self, text: str) -> None:
        """Record final diagnostic output."""
        ...

    def fail_now(self) -> None:
        """Abandon the operation; typically marks the test failed and stops it."""
        ...


@runtime_checkable
class ReportSink(Protocol):
    """Optional reporter extension receiving the structured report before ``fail_now``."""

    def record_report(self, report: RetryReport) -> None: ...


@dataclass(slots=True)
class RaisingReporter:
    """Default reporter: raises RetryExhausted (an AssertionError) on give-up.

    Works with any runner that treats AssertionError as a test failure.
    """

    lines: list[str] = field(default_factory=list)
    report: RetryReport | None = None

    def log(self, text: str) -> None:
        self.lines.append(text)

    def record_report(self, report: RetryReport) -> None:
        self.report = report

    def fail_now(self) -> None:
        raise RetryExhausted(self.report or RetryReport.create("".join(self.lines)))


@dataclass(slots=True)
class PytestReporter:
    """Reporter failing the current pytest test via ``pytest.fail``."""

    lines: list[str] = field(default_factory=list)
    report: RetryReport | None = None

    def log(self, text: str) -> None:
        self.lines.append(text)

    def record_report(self, report: RetryReport) -> None:
        self.report = report

    def fail_now(self) -> None:
        import pytest
        message = self.report.render() if self.report else "".join(self.lines) or "retry gave up"
        pytest.fail(message, pytrace=False)
