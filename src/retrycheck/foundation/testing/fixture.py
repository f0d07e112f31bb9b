"""pytest plugin providing a ``retry`` fixture.

Registered through the ``pytest11`` entry point, so installing retrycheck
makes the fixture available in every test session:

    >>> def test_worker_started(retry):
    ...     retry(lambda r: r.check(worker.ping()))
    ...
    >>> def test_slow_start(retry):
    ...     retry(check, timeout=10.0, wait=0.2)

Failures are reported through ``pytest.fail`` with the deduplicated
diagnostics as the failure message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pytest

from retrycheck.runtime.retry import PytestReporter, Retryer, Timer, run_with

if TYPE_CHECKING:
    from retrycheck.runtime.retry import CheckFn, Outcome


@dataclass(slots=True)
class RetryFixture:
    """Callable bound to a test; each call is an independent retry run."""

    runs: list[Outcome] = field(default_factory=list)

    def __call__(
        self,
        check: CheckFn,
        *,
        timeout: float | None = None,
        wait: float | None = None,
        retryer: Retryer | None = None,
    ) -> Outcome:
        outcome = run_with(PytestReporter(), retryer or self._policy(timeout, wait), check)
        self.runs.append(outcome)
        return outcome

    def _policy(self, timeout: float | None, wait: float | None) -> Retryer:
        base = Timer.from_settings()
        return Timer(
            timeout=base.timeout if timeout is None else timeout,
            wait=base.wait if wait is None else wait,
        )


@pytest.fixture
def retry() -> RetryFixture:
    """Retry a check function until it passes, failing the test on timeout."""
    return RetryFixture()
