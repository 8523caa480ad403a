"""Exception hierarchy for Interviewer Pro."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class InterviewerError(Exception):
    """Base exception for all Interviewer Pro errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(InterviewerError):
    """Configuration validation or resolution failed."""


class ValidationError(InterviewerError):
    """Required input was missing or malformed."""


class InternalError(InterviewerError):
    """An internal error (bug) or invariant violation."""


class SessionStateError(InterviewerError):
    """Operation is not allowed in the controller's current state."""


class SessionBusyError(SessionStateError):
    """A request is already in flight."""


class NoActiveSessionError(SessionStateError):
    """No live session exists (never started, or discarded by a restart)."""


class ServiceError(InterviewerError):
    """The remote model service failed.

    Providers attach transport metadata so callers can tell quota problems
    from bad credentials without substring matching. Nothing retries
    automatically; ``retryable`` only tells the user whether resubmitting
    is worth it.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        retry_after_s: float | None = None,
        provider: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.retry_after_s = retry_after_s
        self.provider = provider
        self.phase = phase


class RateLimitError(ServiceError):
    """Rate limit or quota exceeded (HTTP 429)."""


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
