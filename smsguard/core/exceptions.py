# smsguard/core/exceptions.py
from __future__ import annotations

"""
Exceptions for SmsGuard.

- AttemptStoreError: Redis unreachable / command failed (retryable).
- InvalidEventError: malformed inbound fact (non-retryable rejection).
- EventPublishError: a listener failed while an event was being published.

Nothing in the engine swallows these; retry/backoff belongs to the caller.
"""

from typing import Any, Dict, Optional


class SmsGuardException(Exception):
    """Base domain exception."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        *,
        extra: Optional[Dict[str, Any]] = None,
        retryable: bool = False,
    ):
        self.message = message
        self.code = code
        self.extra = extra or {}
        self.retryable = retryable
        super().__init__(self.message)


class AttemptStoreError(SmsGuardException):
    """Shared attempt store is unavailable or rejected a command."""

    def __init__(self, message: str, code: Optional[str] = "ATTEMPT_STORE_UNAVAILABLE", **kwargs: Any):
        kwargs.setdefault("retryable", True)
        super().__init__(message, code, **kwargs)


class InvalidEventError(SmsGuardException):
    """Inbound fact is malformed or of an unsupported type."""

    def __init__(self, message: str, code: Optional[str] = "INVALID_EVENT", **kwargs: Any):
        kwargs["retryable"] = False
        super().__init__(message, code, **kwargs)


class EventPublishError(SmsGuardException):
    """A listener raised while an event was being published."""

    def __init__(self, message: str, code: Optional[str] = "EVENT_PUBLISH_FAILED", **kwargs: Any):
        super().__init__(message, code, **kwargs)
