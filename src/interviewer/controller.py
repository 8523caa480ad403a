"""Session controller: owns the interview lifecycle and streams replies.

The controller is the single writer of interview state. It keeps the view
mode, the live session handle, the loading flag, the error slot and the
transcript, and it publishes an immutable `ControllerState` to subscribers
after every change.

Every in-flight stream is tied to the session handle and transcript
generation it started under. `restart()` swaps both out, so fragments that
arrive late for the old session are dropped instead of leaking into the new
one, and the old stream is closed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import TYPE_CHECKING, Any

from interviewer.config import DEFAULT_MODEL, DEFAULT_THINKING_BUDGET
from interviewer.errors import (
    NoActiveSessionError,
    ServiceError,
    SessionBusyError,
    ValidationError,
)
from interviewer.prompts import SYSTEM_PROMPT, build_script_prompt
from interviewer.providers.models import SessionConfig
from interviewer.transcript import Role, Transcript, Turn, TurnStatus

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from interviewer.config import Config
    from interviewer.providers.base import ModelService
    from interviewer.providers.models import Fragment, SessionHandle

    Listener = Callable[["ControllerState"], None]
    ConfirmFn = Callable[[str], bool]

logger = logging.getLogger(__name__)

SCRIPT_FAILED_MESSAGE = "Failed to generate script. API might be busy."
SCRIPT_INTERRUPTED_MESSAGE = (
    "The script stopped before it finished. Generate it again to retry."
)
ERROR_TURN_TEXT = "**Error:** Connection lost. Please try again."
RESTART_WARNING = (
    "Are you sure you want to start a new session? Current progress will be lost."
)


class ViewState(str, Enum):
    """Which surface the presentation layer should show."""

    SETUP = "setup"
    INTERVIEW = "interview"


@dataclass(frozen=True)
class ControllerState:
    """Immutable snapshot of everything the presentation layer renders."""

    view: ViewState
    is_loading: bool
    error: str | None
    transcript: tuple[Turn, ...]
    session_id: str | None = None

    @property
    def has_session(self) -> bool:
        """Whether a live session exists."""
        return self.session_id is not None


def _always_confirm(_message: str) -> bool:
    return True


def _require_text(**fields: str) -> None:
    missing = [name for name, value in fields.items() if not (value or "").strip()]
    if missing:
        raise ValidationError(
            f"Missing required input: {', '.join(missing)}",
            hint="Fill in every field before generating the script.",
        )


def _error_message(base: str, exc: Exception) -> str:
    hint = getattr(exc, "hint", None)
    return f"{base} {hint}" if hint else base


async def _aclose(stream: Any) -> None:
    aclose = getattr(stream, "aclose", None)
    if callable(aclose):
        await aclose()


class SessionController:
    """Drive one interview session against a model service.

    All operations run on a single event loop. ``is_loading`` is checked and
    set without an intervening await, so it works as an exclusive lock over
    "one active stream at a time".

    Example:
        controller = SessionController(MockService())
        controller.subscribe(lambda state: print(state.view, len(state.transcript)))
        await controller.generate_script(resume, job_description, "English")
        await controller.send_turn("Let's start with Q1")
    """

    def __init__(
        self,
        service: ModelService,
        *,
        model: str = DEFAULT_MODEL,
        thinking_budget: int = DEFAULT_THINKING_BUDGET,
        instructions: str = SYSTEM_PROMPT,
        confirm: ConfirmFn | None = None,
        transcript: Transcript | None = None,
    ) -> None:
        """Wire the controller to a service and an optional restart gate.

        Args:
            service: Model service used for sessions and streams.
            model: Model name for new sessions.
            thinking_budget: Reasoning budget passed to new sessions.
            instructions: Persona instructions for new sessions.
            confirm: Blocking yes/no gate consulted by `restart()`. Defaults
                to always proceeding, for programmatic use.
            transcript: Store to write into; a fresh one by default.
        """
        self._service = service
        self._session_config = SessionConfig(
            instructions=instructions,
            reasoning_effort=thinking_budget,
            model=model,
        )
        self._confirm = confirm or _always_confirm
        self._transcript = transcript if transcript is not None else Transcript()
        self._view = ViewState.SETUP
        self._session: SessionHandle | None = None
        self._is_loading = False
        self._error: str | None = None
        self._listeners: list[Listener] = []

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        service: ModelService | None = None,
        confirm: ConfirmFn | None = None,
    ) -> SessionController:
        """Build a controller from a `Config`, creating its service if needed."""
        if service is None:
            from interviewer.config import create_service

            service = create_service(config)
        return cls(
            service,
            model=config.model,
            thinking_budget=config.thinking_budget,
            confirm=confirm,
        )

    # --- Read-only state ---

    @property
    def state(self) -> ControllerState:
        """Current immutable state snapshot."""
        return ControllerState(
            view=self._view,
            is_loading=self._is_loading,
            error=self._error,
            transcript=self._transcript.snapshot(),
            session_id=self._session.id if self._session is not None else None,
        )

    @property
    def session(self) -> SessionHandle | None:
        """The live session handle, if any."""
        return self._session

    @property
    def session_config(self) -> SessionConfig:
        """Fixed configuration every new session is created with."""
        return self._session_config

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for state changes; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Operations ---

    async def generate_script(
        self, resume: str, job_description: str, language: str
    ) -> bool:
        """Open a new session and stream the interview script into the transcript.

        The view flips to interview before the request is issued and rolls
        back to setup if the script fails, keeping any partial text.

        Returns:
            True when the script streamed to completion.

        Raises:
            ValidationError: An input is empty; no session is created.
            SessionBusyError: A request is already in flight.
        """
        _require_text(resume=resume, job_description=job_description, language=language)
        self._acquire()

        # A new script always starts a fresh conversation.
        self._transcript.reset()
        self._session = None
        self._error = None
        self._view = ViewState.INTERVIEW
        generation = self._transcript.generation
        self._notify()
        logger.debug(
            "Generating script (language=%s, resume_chars=%d, jd_chars=%d)",
            language,
            len(resume),
            len(job_description),
        )

        try:
            session = await self._service.create_session(self._session_config)
            if not self._is_current(generation):
                logger.debug("Discarding session %s created after restart", session.id)
                return False
            self._session = session
            self._notify()

            prompt = build_script_prompt(resume, job_description, language)
            stream = await self._service.send_and_stream(session, prompt)
            if not self._is_current(generation, session):
                await _aclose(stream)
                return False

            self._transcript.append_turn(Role.ASSISTANT, "", status=TurnStatus.STREAMING)
            self._notify()
            return await self._consume(stream, generation, session)
        except ServiceError as exc:
            if self._is_current(generation):
                self._recover_script_failure(exc)
            return False
        except Exception as exc:
            if self._is_current(generation):
                self._recover_script_failure(exc)
            raise
        finally:
            if self._is_current(generation) and self._is_loading:
                self._release()

    async def send_turn(self, text: str) -> bool:
        """Send a user message and stream the reply into a new assistant turn.

        A service failure replaces the assistant turn with `ERROR_TURN_TEXT`;
        the session stays usable.

        Returns:
            True when the reply streamed to completion.

        Raises:
            SessionBusyError: A request is already in flight.
            NoActiveSessionError: No session exists (never started or restarted).
            ValidationError: *text* is blank.
        """
        if self._is_loading:
            raise SessionBusyError(
                "A request is already in flight",
                hint="Wait for the current reply to finish.",
            )
        session = self._session
        if session is None:
            raise NoActiveSessionError(
                "No active interview session",
                hint="Generate an interview script first.",
            )
        _require_text(text=text)
        self._acquire()

        generation = self._transcript.generation
        self._transcript.append_turn(Role.USER, text)
        self._transcript.append_turn(Role.ASSISTANT, "", status=TurnStatus.STREAMING)
        self._notify()

        try:
            stream = await self._service.send_and_stream(session, text)
            if not self._is_current(generation, session):
                await _aclose(stream)
                return False
            return await self._consume(stream, generation, session)
        except ServiceError as exc:
            if self._is_current(generation, session):
                logger.warning("Turn failed on session %s: %s", session.id, exc)
                self._transcript.update_last_turn_text(
                    ERROR_TURN_TEXT, status=TurnStatus.ERROR
                )
                self._notify()
            return False
        except Exception:
            self._interrupt_open_turn(generation, session)
            raise
        finally:
            if self._is_current(generation, session) and self._is_loading:
                self._release()

    def restart(self) -> bool:
        """Discard the session and transcript and return to setup.

        Asks the confirmation gate first, since the transcript is lost.

        Returns:
            False when the user declined and nothing changed.
        """
        if not self._confirm(RESTART_WARNING):
            logger.debug("Restart declined")
            return False

        old = self._session
        self._session = None
        self._transcript.reset()
        self._view = ViewState.SETUP
        self._error = None
        self._is_loading = False
        self._notify()
        if old is not None:
            logger.info("Session %s discarded by restart", old.id)
        return True

    # --- Internals ---

    def _acquire(self) -> None:
        if self._is_loading:
            raise SessionBusyError(
                "A request is already in flight",
                hint="Wait for the current reply to finish.",
            )
        self._is_loading = True

    def _release(self) -> None:
        self._is_loading = False
        self._notify()

    def _is_current(
        self, generation: int, session: SessionHandle | None = None
    ) -> bool:
        """Whether an operation's tag still matches the live state."""
        if self._transcript.generation != generation:
            return False
        return session is None or self._session is session

    async def _consume(
        self,
        stream: AsyncIterator[Fragment],
        generation: int,
        session: SessionHandle,
    ) -> bool:
        """Accumulate fragments into the open assistant turn.

        Each fragment is appended to a running total and the turn is replaced
        with the full total, so readers never need delta logic.
        """
        total = ""
        finished = False
        try:
            async for fragment in stream:
                if not self._is_current(generation, session):
                    logger.debug("Dropping late fragment for stale session %s", session.id)
                    return False
                if not fragment.text:
                    continue
                total += fragment.text
                self._transcript.update_last_turn_text(total)
                self._notify()
            finished = True
        finally:
            await _aclose(stream)
            if not finished:
                self._interrupt_open_turn(generation, session)

        if not self._is_current(generation, session):
            return False
        self._transcript.update_last_turn_text(total, status=TurnStatus.COMPLETE)
        self._notify()
        return True

    def _interrupt_open_turn(
        self, generation: int, session: SessionHandle | None
    ) -> None:
        """Close a still-streaming assistant turn left behind by a failure."""
        if not self._is_current(generation, session):
            return
        last = self._transcript.last
        if last is None or last.status is not TurnStatus.STREAMING:
            return
        self._transcript.update_last_turn_text(last.text, status=TurnStatus.INTERRUPTED)
        self._notify()

    def _recover_script_failure(self, exc: Exception) -> None:
        """Roll back to setup after a failed script; resubmitting retries.

        Text that already arrived stays visible as an interrupted turn.
        """
        logger.warning("Script generation failed: %s", exc)
        last = self._transcript.last
        if last is not None and last.text:
            if last.is_open:
                self._transcript.update_last_turn_text(
                    last.text, status=TurnStatus.INTERRUPTED
                )
            self._error = _error_message(SCRIPT_INTERRUPTED_MESSAGE, exc)
        else:
            self._transcript.reset()
            self._error = _error_message(SCRIPT_FAILED_MESSAGE, exc)
        self._session = None
        self._view = ViewState.SETUP
        self._is_loading = False
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        state = self.state
        for listener in tuple(self._listeners):
            listener(state)
