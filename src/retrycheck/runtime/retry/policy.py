"""Retry policies deciding whether another attempt should run.

A policy is consulted before every attempt. It answers ``True`` to run the
attempt (after any pause it imposes) or calls the give-up callback and
answers ``False``.

- Timer: Deadline-based; repeats until ``timeout`` elapses, pausing ``wait``
- Counter: Attempt-count based; runs at most ``count`` attempts, pausing ``wait``

Policies hold mutable progress state. Use one instance per run, or call
``reset()`` before reusing it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Protocol, Self, runtime_checkable

logger = logging.getLogger("retrycheck.retry")


@runtime_checkable
class Retryer(Protocol):
    """Protocol for repeating an operation until it succeeds or an exit condition is met."""

    def decide(self, on_give_up: Callable[[], None]) -> bool:
        """Return True if the operation should be attempted (again).

        Otherwise call ``on_give_up`` exactly once and return False.
        Must only be called sequentially from the controlling thread.
        """
        ...


@dataclass(slots=True)
class Timer:
    """Repeats an operation for a given amount of time, waiting between attempts.

    The deadline is set on the first call to ``decide`` so the first attempt
    always runs. With an always-failing check this yields
    ``floor(timeout / wait) + 1`` attempts, less any time spent in attempts.

    Attributes:
        timeout: Total time budget in seconds, measured from the first decision
        wait: Pause in seconds before each attempt after the first
        clock: Monotonic time source (injectable for tests)
        sleep: Blocking pause (injectable for tests)
    """

    timeout: float = 2.0
    wait: float = 0.025
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    deadline: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.timeout < 0 or self.wait < 0:
            raise ValueError(f"timeout and wait must be non-negative, got {self.timeout}, {self.wait}")

    @classmethod
    def from_settings(cls) -> Self:
        """Build a timer from RETRYCHECK_RETRY_* settings (2s / 25ms by default)."""
        from retrycheck.foundation.config import get_settings
        cfg = get_settings().retry
        return cls(timeout=cfg.timeout, wait=cfg.wait)

    def decide(self, on_give_up: Callable[[], None]) -> bool:
        if self.deadline is None:
            self.deadline = self.clock() + self.timeout
            return True
        if self.clock() > self.deadline:
            logger.debug(f"Deadline passed ({self.timeout:.3f}s), giving up")
            on_give_up()
            return False
        self.sleep(self.wait)
        return True

    def reset(self) -> None:
        """Clear the deadline so the next decision starts a new run."""
        self.deadline = None


@dataclass(slots=True)
class Counter:
    """Repeats an operation a fixed number of times, waiting between attempts.

    Attributes:
        count: Maximum number of attempts (minimum 1)
        wait: Pause in seconds before each attempt after the first
        sleep: Blocking pause (injectable for tests)
    """

    count: int = 3
    wait: float = 0.01
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    attempts: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"count must be at least 1, got {self.count}")
        if self.wait < 0:
            raise ValueError(f"wait must be non-negative, got {self.wait}")

    def decide(self, on_give_up: Callable[[], None]) -> bool:
        if self.attempts >= self.count:
            logger.debug(f"Attempt limit reached ({self.count}), giving up")
            on_give_up()
            return False
        if self.attempts:
            self.sleep(self.wait)
        self.attempts += 1
        return True

    def reset(self) -> None:
        """Forget previous attempts so the next decision starts a new run."""
        self.attempts = 0
