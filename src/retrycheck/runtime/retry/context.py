"""Attempt context handed to check functions.

``R`` mirrors the failure-reporting half of a test object: checks call
``fatal``/``error``/``check``/``log`` on it instead of asserting directly.
The recorded lines persist for the whole retry run; the failure flag is
cleared by the runner after every failed attempt.

Each recorded line is prefixed with ``file.py:LINE:`` of the code that
called the public method, captured right at that method's boundary.
"""

from __future__ import annotations

import os
import sys
import sysconfig
import threading
import traceback
from typing import NoReturn

from retrycheck.foundation.errors import AttemptAborted, FailureKind, RetryExhausted
from retrycheck.runtime.observability import get_logger

log = get_logger("retrycheck.context")

_UNKNOWN_SITE = "???:1"

_PACKAGE_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.realpath(__file__))))
# Frames under these directories never count as the assertion site
_LIBRARY_DIRS = tuple(sorted(
    {os.path.join(_PACKAGE_ROOT, "runtime"), os.path.join(_PACKAGE_ROOT, "foundation")}
    | {os.path.realpath(path) for key, path in sysconfig.get_paths().items()
       if key in ("stdlib", "platstdlib", "purelib", "platlib")}
))


class R:
    """Per-run failure context for a retried check.

    Example:
        >>> def check(r: R) -> None:
        ...     resp = client.get("/health")
        ...     if resp.status_code != 200:
        ...         r.fatalf("status %d", resp.status_code)
        ...     r.log("healthy after", resp.elapsed)
    """

    __slots__ = ("_failed", "_output", "_lock")

    def __init__(self) -> None:
        self._failed = False
        self._output: list[str] = []
        self._lock = threading.Lock()

    @property
    def failed(self) -> bool:
        """Whether the current attempt has recorded a failure."""
        return self._failed

    @property
    def output(self) -> list[str]:
        """Copy of every line recorded so far in this run."""
        return list(self._output)

    # ─────────────────────────────────────────────────────────────────────
    # Abrupt failure: record, mark failed, unwind the attempt
    # ─────────────────────────────────────────────────────────────────────

    def fail_now(self) -> NoReturn:
        """Mark the attempt failed and stop it immediately."""
        self._failed = True
        raise AttemptAborted(FailureKind.ABRUPT)

    def fatal(self, *args: object) -> NoReturn:
        self._record(FailureKind.ABRUPT, _join(args), _call_site())
        self.fail_now()

    def fatalf(self, fmt: str, *args: object) -> NoReturn:
        self._record(FailureKind.ABRUPT, fmt % args if args else fmt, _call_site())
        self.fail_now()

    def check(self, err: BaseException | None) -> None:
        """Abort the attempt with ``err``'s message if ``err`` is not None."""
        if err is None:
            return
        self._record(FailureKind.WRAPPED, str(err) or type(err).__name__, _call_site())
        self._failed = True
        raise AttemptAborted(FailureKind.WRAPPED)

    # ─────────────────────────────────────────────────────────────────────
    # Soft failure: record, mark failed, keep going
    # ─────────────────────────────────────────────────────────────────────

    def fail(self) -> None:
        """Mark the attempt failed without stopping it."""
        self._failed = True

    def error(self, *args: object) -> None:
        self._record(FailureKind.SOFT, _join(args), _call_site())
        self._failed = True

    def errorf(self, fmt: str, *args: object) -> None:
        self._record(FailureKind.SOFT, fmt % args if args else fmt, _call_site())
        self._failed = True

    # ─────────────────────────────────────────────────────────────────────
    # Diagnostics only
    # ─────────────────────────────────────────────────────────────────────

    def log(self, *args: object) -> None:
        self._record(None, _join(args), _call_site())

    def logf(self, fmt: str, *args: object) -> None:
        self._record(None, fmt % args if args else fmt, _call_site())

    # ─────────────────────────────────────────────────────────────────────
    # Runner hooks
    # ─────────────────────────────────────────────────────────────────────

    def _record(self, kind: FailureKind | None, message: str, site: str) -> None:
        self._output.append(f"{site}: {message}")
        if kind is not None:
            log.debug("failure recorded", kind=kind.value, site=site)

    def _record_assertion(self, exc: AssertionError) -> None:
        """Record a failed ``assert`` raised by the check, located at the user's code.

        A nested RetryExhausted keeps its own located lines, one entry each.
        """
        site = _assertion_site(traceback.extract_tb(exc.__traceback__))
        if isinstance(exc, RetryExhausted):
            head, *_ = exc.report.render().split("\n", 1)
            self._record(FailureKind.ABRUPT, head, site)
            self._output.extend(exc.report.lines)
        else:
            self._record(FailureKind.ABRUPT, str(exc).rstrip("\n") or "assertion failed", site)
        self._failed = True

    def _reset(self) -> None:
        self._failed = False


def _call_site(depth: int = 2) -> str:
    """Location of the code calling a public R method.

    Frame 0 is this function, frame 1 the public method, frame 2 its caller.
    """
    try:
        frame = sys._getframe(depth)
    except ValueError:
        return _UNKNOWN_SITE
    return f"{os.path.basename(frame.f_code.co_filename)}:{frame.f_lineno}"


def _join(args: tuple[object, ...]) -> str:
    return " ".join(map(str, args))


def _assertion_site(frames: traceback.StackSummary) -> str:
    """Innermost traceback frame outside retrycheck, the stdlib and site-packages.

    Falls back to the check function's own frame (frame 0 is the attempt runner).
    """
    for fs in reversed(frames):
        if not os.path.realpath(fs.filename).startswith(_LIBRARY_DIRS):
            return f"{os.path.basename(fs.filename)}:{fs.lineno}"
    if not frames:
        return _UNKNOWN_SITE
    fs = frames[1] if len(frames) > 1 else frames[0]
    return f"{os.path.basename(fs.filename)}:{fs.lineno}"
