"""Real API integration tests.

These tests make real Gemini calls and are intentionally compact:
- ENABLE_API_TESTS=1 is required to run any API tests
- GEMINI_API_KEY is required by the key fixture
"""

from __future__ import annotations

import os

import pytest

from interviewer.config import Config
from interviewer.controller import SessionController, ViewState
from interviewer.transcript import Role, TurnStatus
from tests.conftest import GEMINI_MODEL

pytestmark = pytest.mark.api

_RESUME = """\
Jane Doe. Backend engineer at Acme (2019-2024).
Built the order service in Go; cut p99 latency from 800ms to 120ms.
"""
_JOB = "Senior Go engineer. Owns latency-critical services."


@pytest.mark.asyncio
async def test_script_then_follow_up_turn(gemini_api_key: str) -> None:
    config = Config(
        api_key=gemini_api_key,
        model=os.getenv("GEMINI_TEST_MODEL", GEMINI_MODEL),
        thinking_budget=1024,
        stream_timeout_s=120,
    )
    controller = SessionController.from_config(config)

    assert await controller.generate_script(_RESUME, _JOB, "English") is True
    state = controller.state
    assert state.view is ViewState.INTERVIEW
    assert state.error is None
    (script,) = state.transcript
    assert script.role is Role.ASSISTANT
    assert script.status is TurnStatus.COMPLETE
    assert script.text.strip()

    assert await controller.send_turn("Let's start with Q1.") is True
    turns = controller.state.transcript
    assert [t.role for t in turns] == [Role.ASSISTANT, Role.USER, Role.ASSISTANT]
    assert turns[-1].text.strip()
