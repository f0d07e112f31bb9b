"""Tests for retry policies (Timer, Counter)."""

from __future__ import annotations

import pytest

from retrycheck.foundation.config import clear_settings_cache
from retrycheck.foundation.testing import FakeClock
from retrycheck.runtime.retry import Counter, Retryer, Timer


class GiveUp:
    """Counts give-up callback invocations."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1


def drain(policy: Retryer, on_give_up: GiveUp, clock: FakeClock | None = None, cost: float = 0.001,
          limit: int = 1000) -> int:
    """Call decide until it returns False; return the number of True answers.

    Each granted attempt advances ``clock`` by ``cost``, as a real attempt takes some time.
    """
    granted = 0
    while policy.decide(on_give_up):
        granted += 1
        if clock is not None:
            clock.advance(cost)
        assert granted < limit, "policy never gave up"
    return granted


@pytest.fixture(autouse=True)
def fresh_settings() -> object:
    clear_settings_cache()
    yield
    clear_settings_cache()


# ═════════════════════════════════════════════════════════════════════════════
# Timer
# ═════════════════════════════════════════════════════════════════════════════


def test_timer_first_decision_sets_deadline_without_waiting() -> None:
    clock = FakeClock(current=10.0)
    timer = Timer(timeout=1.0, wait=0.25, clock=clock.now, sleep=clock.sleep)

    assert timer.deadline is None
    assert timer.decide(GiveUp())
    assert timer.deadline == 11.0
    assert clock.sleeps == []


def test_timer_grants_timeout_over_wait_plus_one() -> None:
    """floor(T/W) + 1 attempts: the first one is free."""
    clock = FakeClock()
    timer = Timer(timeout=1.0, wait=0.25, clock=clock.now, sleep=clock.sleep)
    give_up = GiveUp()

    assert drain(timer, give_up, clock) == 5
    assert give_up.calls == 1
    assert clock.sleeps == [0.25] * 4


def test_timer_continues_at_exact_deadline() -> None:
    """Only strictly past the deadline counts as expired."""
    clock = FakeClock()
    timer = Timer(timeout=0.5, wait=0.5, clock=clock.now, sleep=clock.sleep)
    give_up = GiveUp()

    assert timer.decide(give_up)
    assert timer.decide(give_up)  # now == 0.0 <= deadline
    assert timer.decide(give_up)  # now == 0.5 == deadline
    assert not timer.decide(give_up)  # now == 1.0
    assert give_up.calls == 1


def test_timer_counts_attempt_time_against_deadline() -> None:
    clock = FakeClock()
    timer = Timer(timeout=1.0, wait=0.1, clock=clock.now, sleep=clock.sleep)
    give_up = GiveUp()

    assert timer.decide(give_up)
    clock.advance(2.0)  # a slow attempt
    assert not timer.decide(give_up)
    assert give_up.calls == 1
    assert clock.sleeps == []


def test_timer_zero_timeout_runs_once() -> None:
    clock = FakeClock()
    timer = Timer(timeout=0.0, wait=0.0, clock=clock.now, sleep=clock.sleep)
    clock_give_up = GiveUp()

    assert timer.decide(clock_give_up)
    clock.advance(0.001)
    assert not timer.decide(clock_give_up)


def test_timer_reset_starts_new_deadline() -> None:
    clock = FakeClock()
    timer = Timer(timeout=1.0, wait=0.5, clock=clock.now, sleep=clock.sleep)
    drain(timer, GiveUp(), clock)

    timer.reset()
    assert timer.deadline is None
    assert timer.decide(GiveUp())
    assert timer.deadline == clock.current + 1.0


def test_fresh_timer_does_not_share_state() -> None:
    clock = FakeClock()
    first = Timer(timeout=1.0, wait=0.5, clock=clock.now, sleep=clock.sleep)
    drain(first, GiveUp(), clock)

    second = Timer(timeout=1.0, wait=0.5, clock=clock.now, sleep=clock.sleep)
    assert second.deadline is None
    assert drain(second, GiveUp(), clock) == 3


@pytest.mark.parametrize(("timeout", "wait"), [(-1.0, 0.1), (1.0, -0.1)])
def test_timer_rejects_negative_values(timeout: float, wait: float) -> None:
    with pytest.raises(ValueError, match="non-negative"):
        Timer(timeout=timeout, wait=wait)


def test_timer_defaults() -> None:
    timer = Timer()
    assert (timer.timeout, timer.wait) == (2.0, 0.025)


def test_timer_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RETRYCHECK_RETRY_TIMEOUT", "5")
    monkeypatch.setenv("RETRYCHECK_RETRY_WAIT", "0.5")
    clear_settings_cache()

    timer = Timer.from_settings()
    assert (timer.timeout, timer.wait) == (5.0, 0.5)


def test_timer_is_retryer() -> None:
    assert isinstance(Timer(), Retryer)


# ═════════════════════════════════════════════════════════════════════════════
# Counter
# ═════════════════════════════════════════════════════════════════════════════


def test_counter_grants_count_attempts() -> None:
    clock = FakeClock()
    counter = Counter(count=3, wait=0.2, sleep=clock.sleep)
    give_up = GiveUp()

    assert drain(counter, give_up) == 3
    assert give_up.calls == 1
    assert clock.sleeps == [0.2, 0.2]


def test_counter_single_attempt_never_sleeps() -> None:
    clock = FakeClock()
    counter = Counter(count=1, wait=1.0, sleep=clock.sleep)

    assert drain(counter, GiveUp()) == 1
    assert clock.sleeps == []


def test_counter_reset() -> None:
    counter = Counter(count=2, wait=0.0)
    drain(counter, GiveUp())

    counter.reset()
    assert counter.attempts == 0
    assert drain(counter, GiveUp()) == 2


def test_counter_rejects_invalid_values() -> None:
    with pytest.raises(ValueError, match="at least 1"):
        Counter(count=0)
    with pytest.raises(ValueError, match="non-negative"):
        Counter(count=1, wait=-1.0)


def test_counter_is_retryer() -> None:
    assert isinstance(Counter(), Retryer)
