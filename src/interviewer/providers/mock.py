"""Mock model service for offline runs and tests."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from interviewer.prompts import SCRIPT_REQUEST
from interviewer.providers.models import Fragment, SessionConfig, SessionHandle

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

_MOCK_SCRIPT = """\
## Chronological Interview Script

### 1. Most Recent Role

**Q1: The Technical Details**
"Walk me through how you built the main system on your resume."
> *Intent: To verify they wrote the code themselves.*

**Q2: The Real Impact**
"You list a result there. How did you measure it?"
> *Intent: To see if the metric is real.*

**Q3: The Hard Part**
"What was the hardest bug you fixed in that job?"
> *Intent: To test their problem-solving skills.*

## Missing Skills Check
### Topic: Production on-call
**Question:** "A release breaks checkout at 2am. What do you do first?"
"""


class MockService:
    """Deterministic service that streams canned replies without API calls.

    The script request gets a fixed interview script; every later message
    gets a short follow-up question quoting the candidate.
    """

    def __init__(self, *, fragment_size: int = 16, delay_s: float = 0.0) -> None:
        """Configure fragment size and an optional per-fragment delay."""
        if fragment_size < 1:
            raise ValueError("fragment_size must be >= 1")
        self.fragment_size = fragment_size
        self.delay_s = delay_s
        self.sessions_created = 0

    async def create_session(self, config: SessionConfig) -> SessionHandle:
        """Return a fresh handle; no remote state is kept."""
        self.sessions_created += 1
        return SessionHandle(config=config)

    async def send_and_stream(
        self,
        session: SessionHandle,  # noqa: ARG002
        message: str,
    ) -> AsyncIterator[Fragment]:
        """Stream the canned reply for *message* in fixed-size fragments."""
        return self._fragments(self.reply_for(message))

    def reply_for(self, message: str) -> str:
        """Return the full canned reply for *message*."""
        if message.startswith(SCRIPT_REQUEST):
            return _MOCK_SCRIPT
        quoted = " ".join(message.split())[:80]
        return f'You said: "{quoted}". What specifically did **you** do there?'

    async def _fragments(self, text: str) -> AsyncIterator[Fragment]:
        for start in range(0, len(text), self.fragment_size):
            if self.delay_s > 0:
                await asyncio.sleep(self.delay_s)
            yield Fragment(text[start : start + self.fragment_size])
