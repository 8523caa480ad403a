"""Gemini model service built on the google-genai async chats API."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from interviewer.errors import ServiceError
from interviewer.providers._errors import wrap_provider_error
from interviewer.providers.models import Fragment, SessionConfig, SessionHandle

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


class GeminiService:
    """Google Gemini chat sessions with streamed replies."""

    def __init__(self, api_key: str, *, stream_timeout_s: float | None = None) -> None:
        """Create the service with an API key and optional per-fragment timeout."""
        self.api_key = api_key
        self.stream_timeout_s = stream_timeout_s
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazy-initialize the Gemini client."""
        if self._client is None:
            try:
                from google import genai
            except ImportError as e:
                raise ServiceError(
                    "google-genai package not installed",
                    hint="pip install google-genai",
                    provider="gemini",
                ) from e

            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def create_session(self, config: SessionConfig) -> SessionHandle:
        """Open a chat configured with the persona and thinking budget."""
        try:
            client = self._get_client()
            from google.genai import types

            chat = client.aio.chats.create(
                model=config.model,
                config=types.GenerateContentConfig(
                    system_instruction=config.instructions,
                    thinking_config=types.ThinkingConfig(
                        thinking_budget=config.reasoning_effort,
                    ),
                ),
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider="gemini",
                phase="session",
                message="Gemini session creation failed",
            ) from e

        handle = SessionHandle(config=config, native=chat)
        logger.debug("Created Gemini chat session %s (model=%s)", handle.id, config.model)
        return handle

    async def send_and_stream(
        self, session: SessionHandle, message: str
    ) -> AsyncIterator[Fragment]:
        """Send a message and return its streamed reply.

        The first chunk is awaited here, so a request the service rejects
        fails before the caller starts consuming fragments.
        """
        chat = session.native
        if chat is None:
            raise ServiceError(
                "Session has no Gemini chat attached",
                provider="gemini",
                phase="send",
            )

        try:
            stream = await chat.send_message_stream(message)
            iterator = aiter(stream)
            first = await self._next_chunk(iterator)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider="gemini",
                phase="send",
                message="Gemini send failed",
            ) from e

        return self._fragments(iterator, first)

    async def _fragments(
        self, iterator: AsyncIterator[Any], first: Any
    ) -> AsyncIterator[Fragment]:
        """Yield text fragments until the SDK stream is exhausted."""
        try:
            chunk = first
            while chunk is not None:
                text = _chunk_text(chunk)
                if text:
                    yield Fragment(text)
                chunk = await self._next_chunk(iterator)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider="gemini",
                phase="stream",
                message="Gemini stream interrupted",
            ) from e
        finally:
            # Closing the SDK generator releases the HTTP stream early.
            aclose = getattr(iterator, "aclose", None)
            if callable(aclose):
                await aclose()

    async def _next_chunk(self, iterator: AsyncIterator[Any]) -> Any:
        """Return the next SDK chunk, or None when the stream is done."""
        try:
            if self.stream_timeout_s is None:
                return await anext(iterator)
            async with asyncio.timeout(self.stream_timeout_s):
                return await anext(iterator)
        except StopAsyncIteration:
            return None

    async def aclose(self) -> None:
        """Release the underlying HTTP client, if one was created."""
        if self._client is None:
            return
        aio = getattr(self._client, "aio", None)
        aclose = getattr(aio, "aclose", None)
        if callable(aclose):
            await aclose()


def _chunk_text(chunk: Any) -> str:
    """Extract the answer text of one streamed response chunk."""
    try:
        text = getattr(chunk, "text", None)
    except Exception:
        # The SDK's .text accessor raises on some non-text candidates.
        return ""
    return text if isinstance(text, str) else ""
