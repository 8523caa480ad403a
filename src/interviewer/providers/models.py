"""Domain models for the model-service transport layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
import uuid


@dataclass(frozen=True)
class SessionConfig:
    """Fixed configuration a chat session is created with."""

    instructions: str
    #: Thinking budget in tokens; larger means more reasoning before answering.
    reasoning_effort: int
    model: str


@dataclass(frozen=True, eq=False)
class SessionHandle:
    """Opaque handle to one conversation with the remote model.

    Handles compare by identity: two sessions with the same config are still
    different conversations.
    """

    config: SessionConfig
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    #: Provider-native chat object (e.g. a google-genai ``AsyncChat``).
    native: Any = field(default=None, repr=False)


@dataclass(frozen=True)
class Fragment:
    """One incremental piece of streamed model text."""

    text: str
