"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off service subclasses as coverage expands.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from interviewer.providers.models import Fragment, SessionConfig, SessionHandle
from tests.conftest import FakeService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Sequence


async def _scripted_stream(
    items: Sequence[str | BaseException],
) -> AsyncIterator[Fragment]:
    for item in items:
        if isinstance(item, BaseException):
            raise item
        yield Fragment(item)


@dataclass
class ScriptedService(FakeService):
    """FakeService that plays a scripted sequence of replies and failures.

    Each script entry is either an exception (raised by the send call, before
    the stream starts) or a sequence of fragment texts and exceptions
    (exceptions are raised mid-stream at that position).
    """

    script: list = field(default_factory=list)
    create_error: BaseException | None = None

    async def create_session(self, config: SessionConfig) -> SessionHandle:
        if self.create_error is not None:
            raise self.create_error
        return await super().create_session(config)

    async def send_and_stream(
        self, session: SessionHandle, message: str
    ) -> AsyncIterator[Fragment]:
        self.sent.append((session, message))
        item = self.script.pop(0) if self.script else ["ok"]
        if isinstance(item, BaseException):
            raise item
        return _scripted_stream(item)


@dataclass
class Gate:
    """Barrier for one gated stream."""

    started: asyncio.Event = field(default_factory=asyncio.Event)
    release: asyncio.Event = field(default_factory=asyncio.Event)
    closed: bool = False


@dataclass
class GateService(FakeService):
    """FakeService whose streams pause after the first fragment.

    Every send gets its own `Gate`: the stream yields the first fragment,
    sets ``started`` once the consumer asks for more, then waits for
    ``release`` before yielding the rest. ``closed`` records that the
    stream was finalized (exhausted or closed early).
    """

    fragments: tuple[str, ...] = ("Hel", "lo, ", "world")
    gates: list[Gate] = field(default_factory=list)

    async def send_and_stream(
        self, session: SessionHandle, message: str
    ) -> AsyncIterator[Fragment]:
        self.sent.append((session, message))
        gate = Gate()
        self.gates.append(gate)
        return self._gated(gate)

    async def _gated(self, gate: Gate) -> AsyncIterator[Fragment]:
        try:
            yield Fragment(self.fragments[0])
            gate.started.set()
            await gate.release.wait()
            for text in self.fragments[1:]:
                yield Fragment(text)
        finally:
            gate.closed = True


async def wait_until(predicate: Callable[[], object], *, timeout: float = 1.0) -> None:
    """Yield to the loop until *predicate* is truthy or *timeout* elapses."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0)
