"""Model service implementations."""

from .base import ModelService
from .gemini import GeminiService
from .mock import MockService
from .models import Fragment, SessionConfig, SessionHandle

__all__ = [
    "Fragment",
    "GeminiService",
    "MockService",
    "ModelService",
    "SessionConfig",
    "SessionHandle",
]
