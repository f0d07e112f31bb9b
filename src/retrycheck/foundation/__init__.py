"""Foundation - Configuration, errors and testing support."""

from __future__ import annotations

from .config import RetrycheckSettings, clear_settings_cache, get_settings
from .errors import AttemptAborted, FailureKind, RetryExhausted, RetryReport

__all__ = [
    "RetrycheckSettings", "clear_settings_cache", "get_settings",
    "AttemptAborted", "FailureKind", "RetryExhausted", "RetryReport",
]
