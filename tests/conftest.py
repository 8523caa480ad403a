"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, test doubles and
automatic API test skipping. All fixtures here are autouse unless noted.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field
import logging
import os
from typing import TYPE_CHECKING

import pytest

from interviewer.providers.models import Fragment, SessionConfig, SessionHandle

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

GEMINI_MODEL = "gemini-2.5-flash"

RESUME = "5 yrs backend eng"
JOB_DESCRIPTION = "Senior Go engineer"
LANGUAGE = "English"

# =============================================================================
# Test Doubles
# =============================================================================


async def fragment_stream(texts: Iterable[str]) -> AsyncIterator[Fragment]:
    """Yield each text as a Fragment, suspending between fragments."""
    for text in texts:
        yield Fragment(text)


@dataclass
class FakeService:
    """Model service test double.

    Records created sessions and sent messages, and streams one queued
    reply (a list of fragment texts) per send. Falls back to ``["ok"]``.
    """

    replies: list[list[str]] = field(default_factory=list)
    sessions: list[SessionHandle] = field(default_factory=list)
    sent: list[tuple[SessionHandle, str]] = field(default_factory=list)

    @property
    def create_calls(self) -> int:
        return len(self.sessions)

    async def create_session(self, config: SessionConfig) -> SessionHandle:
        handle = SessionHandle(config=config)
        self.sessions.append(handle)
        return handle

    async def send_and_stream(
        self, session: SessionHandle, message: str
    ) -> AsyncIterator[Fragment]:
        self.sent.append((session, message))
        texts = self.replies.pop(0) if self.replies else ["ok"]
        return fragment_stream(texts)


@pytest.fixture
def fake_service() -> FakeService:
    """A fresh FakeService (not autouse)."""
    return FakeService()


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_env(request, monkeypatch):
    """Clear GEMINI_* and INTERVIEWER_* env vars to prevent test pollution.

    Opt-out: @pytest.mark.api
    """
    if "api" in request.node.keywords:
        return
    for key in list(os.environ.keys()):
        if key.startswith(("GEMINI_", "INTERVIEWER_")):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if os.getenv("ENABLE_API_TESTS"):
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)


@pytest.fixture
def gemini_api_key():
    """Return GEMINI_API_KEY or skip the test if unavailable."""
    key = os.getenv("GEMINI_API_KEY")
    if not key:
        pytest.skip("GEMINI_API_KEY not set")
    return key
