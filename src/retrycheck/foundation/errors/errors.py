"""Failure signals and reports for retried checks.

``AttemptAborted`` is the abrupt-fail signal raised inside an attempt and
contained at the attempt boundary. ``RetryExhausted`` is what the default
reporter raises once the retry policy gives up.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field


class FailureKind(StrEnum):
    """How a failure was recorded.

    Used for log events and to tag the terminal report.
    """
    SOFT = "SOFT"  # error(): attempt continues
    ABRUPT = "ABRUPT"  # fatal(), fail_now(), failed assert
    WRAPPED = "WRAPPED"  # check(err) with an error
    EXHAUSTED = "EXHAUSTED"  # retry policy gave up


class AttemptAborted(BaseException):
    """Unwinds the current attempt.

    Derives from BaseException so ``except Exception`` blocks inside a check
    function do not swallow it. Never escapes the retry loop.
    """

    __slots__ = ("kind",)

    def __init__(self, kind: FailureKind = FailureKind.ABRUPT) -> None:
        self.kind = kind
        super().__init__(kind.value)


class RetryReport(BaseModel):
    """Summary of a retry run that gave up.

    Attributes:
        output: Deduplicated diagnostic lines, newline-terminated
        attempts: Number of attempts executed
        elapsed: Seconds from the first decision to give-up
    """

    model_config = ConfigDict(
        frozen=True,
        validate_default=True,
        json_schema_extra={
            "title": "Retry Report",
            "description": "Diagnostics from an exhausted retry run",
            "examples": [{
                "output": "test_api.py:12: status 503\n",
                "attempts": 81,
                "elapsed": 2.01,
            }],
        },
    )

    output: str = ""
    attempts: Annotated[int, Field(ge=0)] = 0
    elapsed: Annotated[float, Field(ge=0.0)] = 0.0
    kind: FailureKind = FailureKind.EXHAUSTED

    @computed_field
    @property
    def lines(self) -> list[str]:
        """Output split into individual diagnostic lines."""
        return self.output.splitlines()

    @classmethod
    def create(cls, output: str, attempts: int = 0, elapsed: float = 0.0) -> Self:
        """Factory method for construction."""
        return cls(output=output, attempts=attempts, elapsed=elapsed)

    def render(self) -> str:
        """Format the report for a test failure message."""
        head = f"retry gave up after {self.attempts} attempt{'s' if self.attempts != 1 else ''}"
        if self.elapsed:
            head += f" ({self.elapsed:.2f}s)"
        return f"{head}\n{self.output}" if self.output else head

    __str__ = render


class RetryExhausted(AssertionError):
    """Raised by the default reporter when retrying is abandoned.

    Subclasses AssertionError so test runners report it as a test failure
    rather than an error.
    """

    __slots__ = ("report",)

    def __init__(self, report: RetryReport) -> None:
        self.report = report
        super().__init__(report.render())

    @classmethod
    def create(cls, output: str, attempts: int = 0, elapsed: float = 0.0) -> Self:
        """Create from raw report fields."""
        return cls(RetryReport.create(output, attempts, elapsed))
