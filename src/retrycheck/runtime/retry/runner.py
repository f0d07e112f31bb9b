"""Retry loop: run a check until it passes or the policy gives up.

Each attempt runs on its own short-lived thread so that ``R.fatal`` (and a
failed ``assert``) can unwind the attempt without unwinding the caller. The
controller joins the thread before reading the failure flag, so attempts
never overlap.

Example:
    >>> from retrycheck import run, run_with, Timer
    >>>
    >>> def test_service_ready():
    ...     def check(r):
    ...         if not service.ready():
    ...             r.fatal("service not ready:", service.status())
    ...     run(None, check)  # raises RetryExhausted after 2s
    >>>
    >>> run_with(reporter, Timer(timeout=10, wait=0.5), check)
"""

from __future__ import annotations

import contextvars
import threading
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Callable

from retrycheck.foundation.errors import AttemptAborted, RetryReport
from retrycheck.runtime.observability import get_logger

from .context import R
from .policy import Retryer, Timer
from .reporter import RaisingReporter, Reporter, ReportSink

if TYPE_CHECKING:
    from collections.abc import Iterable

log = get_logger("retrycheck.run")

CheckFn = Callable[[R], None]


class RetryState(StrEnum):
    """States of a retry run. SUCCEEDED and GAVE_UP are terminal."""
    AWAITING_DECISION = "awaiting_decision"
    RUNNING_ATTEMPT = "running_attempt"
    SUCCEEDED = "succeeded"
    GAVE_UP = "gave_up"


@dataclass(slots=True, frozen=True)
class Outcome:
    """Result of a retry run whose reporter did not stop the caller.

    Attributes:
        state: Terminal state (SUCCEEDED or GAVE_UP)
        attempts: Number of attempts executed
        output: Deduplicated diagnostics reported on give-up ("" on success)
    """

    state: RetryState
    attempts: int
    output: str = ""

    @property
    def succeeded(self) -> bool:
        return self.state is RetryState.SUCCEEDED


def dedup(lines: Iterable[str]) -> str:
    """Each distinct line once, in first-seen order, newline-terminated."""
    return "".join(f"{line}\n" for line in dict.fromkeys(lines))


def run(reporter: Reporter | None, check: CheckFn) -> Outcome:
    """Retry ``check`` with the default timer (2s timeout, 25ms wait unless configured)."""
    return run_with(reporter, Timer.from_settings(), check)


def run_with(reporter: Reporter | None, retryer: Retryer, check: CheckFn) -> Outcome:
    """Retry ``check`` until it records no failure or ``retryer`` gives up.

    On give-up the deduplicated output goes to ``reporter.log`` (when
    non-empty), followed by ``reporter.fail_now()``. If ``fail_now`` returns
    instead of raising, the run returns an Outcome in the GAVE_UP state.

    Args:
        reporter: Host reporter; None selects RaisingReporter
        retryer: Policy consulted before every attempt
        check: Check function receiving the run's R

    Returns:
        Outcome of the run

    Raises:
        Whatever ``reporter.fail_now`` raises, and any exception other than
        AssertionError escaping ``check`` (re-raised on the calling thread).
    """
    reporter = RaisingReporter() if reporter is None else reporter
    r = R()
    attempts = 0
    state = RetryState.AWAITING_DECISION
    output = ""
    started = time.monotonic()

    def give_up() -> None:
        nonlocal state, output
        state = RetryState.GAVE_UP
        output = dedup(r._output)
        report = RetryReport.create(output, attempts, time.monotonic() - started)
        log.info("retry gave up", attempts=attempts, elapsed=round(report.elapsed, 3), lines=len(report.lines))
        if output:
            reporter.log(output)
        if isinstance(reporter, ReportSink):
            reporter.record_report(report)
        reporter.fail_now()

    while retryer.decide(give_up):
        attempts += 1
        state = RetryState.RUNNING_ATTEMPT
        _run_attempt(r, check, attempts)
        if r.failed:
            log.debug("attempt failed", attempt=attempts)
            r._reset()
            state = RetryState.AWAITING_DECISION
            continue
        log.debug("attempt passed", attempt=attempts)
        state = RetryState.SUCCEEDED
        break

    if state is RetryState.AWAITING_DECISION:
        # Policy stopped without calling give_up
        state = RetryState.GAVE_UP
    return Outcome(state, attempts, output)


def _run_attempt(r: R, check: CheckFn, attempt: int) -> None:
    """Run one attempt on its own thread and wait for it."""
    escaped: list[BaseException] = []

    def target() -> None:
        try:
            check(r)
        except AttemptAborted:
            pass
        except AssertionError as exc:
            r._record_assertion(exc)
        except BaseException as exc:  # re-raised on the controller below
            escaped.append(exc)

    ctx = contextvars.copy_context()
    with r._lock:
        worker = threading.Thread(target=ctx.run, args=(target,), name=f"retrycheck-attempt-{attempt}", daemon=True)
        worker.start()
        worker.join()

    if escaped:
        raise escaped[0]
