"""Map google-genai and transport failures into `ServiceError`.

google-genai raises ``errors.APIError`` subclasses carrying ``code`` (HTTP
status), ``details`` (the parsed JSON error body) and ``response`` (the raw
HTTP response). Transport failures surface as httpx exceptions or
`TimeoutError`, usually chained under an SDK error.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any

import httpx

from interviewer.errors import RateLimitError, ServiceError, _walk_exception_chain

# Status codes worth resubmitting after; nothing here retries on its own.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})

_TRANSPORT_ERRORS = (httpx.TimeoutException, httpx.RequestError, TimeoutError)
_DURATION_RE = re.compile(r"^(\d+(?:\.\d+)?)s$")


def _as_status(value: Any) -> int | None:
    return value if isinstance(value, int) and 100 <= value <= 599 else None


def extract_status_code(exc: BaseException) -> int | None:
    """Return the HTTP status of the first SDK error in the chain."""
    for e in _walk_exception_chain(exc):
        status = _as_status(getattr(e, "code", None)) or _as_status(
            getattr(getattr(e, "response", None), "status_code", None)
        )
        if status is not None:
            return status
    return None


def _retry_info_delay(details: Any) -> float | None:
    """Read ``retryDelay`` from a google.rpc.RetryInfo entry, e.g. ``"8.5s"``."""
    try:
        entries = details["error"]["details"]
    except (KeyError, TypeError):
        return None
    for entry in entries if isinstance(entries, list) else ():
        if not isinstance(entry, dict) or "RetryInfo" not in str(entry.get("@type")):
            continue
        match = _DURATION_RE.match(str(entry.get("retryDelay", "")))
        if match:
            return float(match.group(1))
    return None


def _retry_after_header(response: Any) -> float | None:
    headers = getattr(response, "headers", None)
    raw = headers.get("Retry-After") if headers is not None else None
    try:
        seconds = float(raw) if isinstance(raw, str) and raw.strip() else None
    except ValueError:
        return None
    return seconds if seconds is not None and seconds >= 0 else None


def extract_retry_after_s(exc: BaseException) -> float | None:
    """Return the server-suggested delay before resubmitting, if any."""
    for e in _walk_exception_chain(exc):
        delay = _retry_info_delay(getattr(e, "details", None))
        if delay is None:
            delay = _retry_after_header(getattr(e, "response", None))
        if delay is not None:
            return delay
    return None


def _hint_for(status_code: int | None, cause: str) -> str | None:
    lowered = cause.lower()
    # Gemini answers 400 (not 401/403) for an invalid key.
    if status_code in {401, 403} or (
        status_code == 400 and ("api key" in lowered or "api_key" in lowered)
    ):
        return "Check credentials (set GEMINI_API_KEY or pass Config(api_key=...))."
    if status_code == 429:
        return "Quota exhausted or rate limited; wait a moment and resubmit."
    return None


def wrap_provider_error(
    exc: BaseException,
    *,
    provider: str,
    phase: str,
    message: str | None = None,
    hint: str | None = None,
) -> ServiceError:
    """Return a `ServiceError` describing *exc*; cancellation is re-raised."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    if isinstance(exc, ServiceError):
        exc.provider = exc.provider or provider
        exc.phase = exc.phase or phase
        exc.hint = exc.hint or hint
        return exc

    status_code = extract_status_code(exc)
    retry_after_s = extract_retry_after_s(exc)
    retryable = (
        retry_after_s is not None
        or status_code in RETRYABLE_STATUS_CODES
        or any(isinstance(e, _TRANSPORT_ERRORS) for e in _walk_exception_chain(exc))
    )

    cause = str(exc)
    text = message or f"{provider} {phase} failed"
    if status_code is not None:
        text += f" (status={status_code})"
    if cause:
        text += f": {cause}"

    err_cls = RateLimitError if status_code == 429 else ServiceError
    return err_cls(
        text,
        hint=hint if hint is not None else _hint_for(status_code, cause),
        retryable=retryable,
        status_code=status_code,
        retry_after_s=retry_after_s,
        provider=provider,
        phase=phase,
    )
