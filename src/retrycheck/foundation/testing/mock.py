"""Test doubles for exercising retry runs.

Provides:
- RecordingReporter: Reporter that records calls instead of failing a test
- FakeClock: Deterministic clock/sleep pair for Timer
"""

from __future__ import annotations

from dataclasses import dataclass, field

from retrycheck.foundation.errors import RetryReport


@dataclass
class RecordingReporter:
    """Reporter recording ``log``/``fail_now`` calls for verification.

    ``fail_now`` returns normally, so the retry run returns an Outcome.

    Example:
        >>> reporter = RecordingReporter()
        >>> run_with(reporter, Counter(count=2, wait=0), lambda r: r.fatal("no"))
        >>> reporter.failed
        True
    """

    logs: list[str] = field(default_factory=list)
    fail_calls: int = 0
    reports: list[RetryReport] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.fail_calls > 0

    @property
    def last_report(self) -> RetryReport | None:
        return self.reports[-1] if self.reports else None

    def log(self, text: str) -> None:
        self.logs.append(text)

    def record_report(self, report: RetryReport) -> None:
        self.reports.append(report)

    def fail_now(self) -> None:
        self.fail_calls += 1

    def assert_failed_once(self) -> None:
        if self.fail_calls != 1:
            raise AssertionError(f"Expected fail_now once, got {self.fail_calls} calls")

    def assert_not_failed(self) -> None:
        if self.fail_calls:
            raise AssertionError(f"Expected no failure, got {self.fail_calls} fail_now calls; logs={self.logs}")


@dataclass
class FakeClock:
    """Manual clock where ``sleep`` advances time instantly.

    Example:
        >>> clock = FakeClock()
        >>> timer = Timer(timeout=1.0, wait=0.25, clock=clock.now, sleep=clock.sleep)
    """

    current: float = 0.0
    sleeps: list[float] = field(default_factory=list)

    def now(self) -> float:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds

    def advance(self, seconds: float) -> None:
        self.current += seconds
