"""Model-service protocol: the minimal interface the controller consumes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from interviewer.providers.models import Fragment, SessionConfig, SessionHandle


@runtime_checkable
class ModelService(Protocol):
    """Create chat sessions and stream replies on them."""

    async def create_session(self, config: SessionConfig) -> SessionHandle:
        """Open a new conversation configured with *config*."""
        ...

    async def send_and_stream(
        self, session: SessionHandle, message: str
    ) -> AsyncIterator[Fragment]:
        """Send *message* and return the reply as a lazy fragment stream.

        Awaiting this call performs the request; it returns once the stream
        has started. Iteration yields fragments in arrival order. Each call
        is an independent, non-restartable stream. Both the await and the
        iteration may raise `ServiceError`.
        """
        ...
