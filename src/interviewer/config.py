"""Configuration: frozen Config with env resolution and service selection."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from interviewer.errors import ConfigurationError
from interviewer.prompts import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES

if TYPE_CHECKING:
    from interviewer.providers.base import ModelService

load_dotenv()

API_KEY_ENV_VAR = "GEMINI_API_KEY"
ENV_PREFIX = "INTERVIEWER_"

DEFAULT_MODEL = "gemini-3-pro-preview"
#: High reasoning effort: the script is generated once per session.
DEFAULT_THINKING_BUDGET = 32768


@dataclass(frozen=True)
class Config:
    """Immutable configuration for an interview session.

    The API key is auto-resolved from ``GEMINI_API_KEY``.

    Example:
        config = Config()
        mock = Config(use_mock=True)
    """

    model: str = DEFAULT_MODEL
    #: Auto-resolved from ``GEMINI_API_KEY`` when *None*.
    api_key: str | None = None
    use_mock: bool = False
    thinking_budget: int = DEFAULT_THINKING_BUDGET
    #: Max wait for each streamed fragment; None waits indefinitely.
    stream_timeout_s: float | None = None
    language: str = DEFAULT_LANGUAGE

    def __post_init__(self) -> None:
        """Auto-resolve API key and validate configuration."""
        if not isinstance(self.model, str) or not self.model.strip():
            raise ConfigurationError(
                "model must be a non-empty string",
                hint=f"Pass Config(model={DEFAULT_MODEL!r}) or set INTERVIEWER_MODEL.",
            )
        if isinstance(self.thinking_budget, bool) or not isinstance(
            self.thinking_budget, int
        ):
            raise ConfigurationError(
                f"thinking_budget must be an int, got {self.thinking_budget!r}"
            )
        if self.thinking_budget < 0:
            raise ConfigurationError(
                f"thinking_budget must be ≥ 0, got {self.thinking_budget}",
                hint="This is the model's reasoning token budget.",
            )
        if self.stream_timeout_s is not None and self.stream_timeout_s <= 0:
            raise ConfigurationError(
                f"stream_timeout_s must be > 0 or None, got {self.stream_timeout_s}",
            )
        if self.language not in SUPPORTED_LANGUAGES:
            raise ConfigurationError(
                f"Unsupported language: {self.language!r}",
                hint=f"Supported languages: {', '.join(SUPPORTED_LANGUAGES)}",
            )

        if self.api_key is None and not self.use_mock:
            object.__setattr__(self, "api_key", os.environ.get(API_KEY_ENV_VAR))

        if not self.use_mock and not self.api_key:
            raise ConfigurationError(
                "API key required for Gemini",
                hint=f"Set {API_KEY_ENV_VAR} environment variable or pass api_key=...",
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> Config:
        """Build a Config from ``INTERVIEWER_*`` variables plus explicit overrides.

        Overrides whose value is None are ignored, so CLI flags can be passed
        through unconditionally.
        """
        values: dict[str, Any] = dict(load_env())
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(model={self.model!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None}, "
            f"use_mock={self.use_mock}, thinking_budget={self.thinking_budget})"
        )

    __repr__ = __str__


_ENV_FIELDS: dict[str, type] = {
    "model": str,
    "use_mock": bool,
    "thinking_budget": int,
    "stream_timeout_s": float,
    "language": str,
}


def _coerce_bool(v: str) -> bool:
    """Convert string to boolean using common conventions."""
    return v.strip().lower() in {"1", "true", "yes", "on"}


def load_env() -> dict[str, Any]:
    """Read ``INTERVIEWER_*`` variables into Config field values.

    Unknown variables are ignored. Values that fail numeric coercion raise
    `ConfigurationError` naming the variable.
    """
    config: dict[str, Any] = {}
    for field_name, target_type in _ENV_FIELDS.items():
        env_var = f"{ENV_PREFIX}{field_name.upper()}"
        raw = os.environ.get(env_var)
        if raw is None or not raw.strip():
            continue
        if target_type is bool:
            config[field_name] = _coerce_bool(raw)
            continue
        try:
            config[field_name] = target_type(raw.strip())
        except ValueError as e:
            raise ConfigurationError(
                f"{env_var} must be {target_type.__name__}, got {raw!r}"
            ) from e
    return config


def create_service(config: Config) -> ModelService:
    """Return the model service selected by *config*."""
    if config.use_mock:
        from interviewer.providers.mock import MockService

        return MockService()

    from interviewer.providers.gemini import GeminiService

    if not config.api_key:
        raise ConfigurationError(
            "api_key required for real API",
            hint=f"Set {API_KEY_ENV_VAR} or pass Config(api_key=...).",
        )
    return GeminiService(config.api_key, stream_timeout_s=config.stream_timeout_s)
