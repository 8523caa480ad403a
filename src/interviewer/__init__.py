"""Interviewer Pro: scripted mock interviews streamed from Gemini.

Public API:
    - SessionController: Owns the interview session and its transcript
    - Transcript / Turn: Ordered record of the conversation
    - Config: Configuration dataclass
    - SetupForm: Validated setup inputs
"""

from __future__ import annotations

import logging

from interviewer.config import Config, create_service
from interviewer.controller import (
    ERROR_TURN_TEXT,
    ControllerState,
    SessionController,
    ViewState,
)
from interviewer.errors import (
    ConfigurationError,
    InternalError,
    InterviewerError,
    NoActiveSessionError,
    RateLimitError,
    ServiceError,
    SessionBusyError,
    SessionStateError,
    ValidationError,
)
from interviewer.forms import SetupForm
from interviewer.transcript import Role, Transcript, Turn, TurnStatus

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("interviewer-pro")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("interviewer").addHandler(logging.NullHandler())

__all__ = [
    "ERROR_TURN_TEXT",
    "Config",
    "ConfigurationError",
    "ControllerState",
    "InternalError",
    "InterviewerError",
    "NoActiveSessionError",
    "RateLimitError",
    "Role",
    "ServiceError",
    "SessionBusyError",
    "SessionController",
    "SessionStateError",
    "SetupForm",
    "Transcript",
    "Turn",
    "TurnStatus",
    "ValidationError",
    "ViewState",
    "create_service",
]
