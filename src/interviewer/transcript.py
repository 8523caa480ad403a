"""Ordered, append-only transcript of interview turns.

Turns are frozen; "mutating" the open assistant turn replaces the last slot
with an updated copy. Everything before the last slot is never touched, so a
snapshot taken at any point stays a valid prefix of every later snapshot
(apart from the last turn's text growing).
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import TYPE_CHECKING

from interviewer.errors import InternalError

if TYPE_CHECKING:
    from collections.abc import Iterator


class Role(str, Enum):
    """Who authored a turn."""

    USER = "user"
    ASSISTANT = "assistant"


class TurnStatus(str, Enum):
    """Lifecycle of a turn's text."""

    STREAMING = "streaming"
    COMPLETE = "complete"
    #: The stream failed after some text arrived; the text is a prefix.
    INTERRUPTED = "interrupted"
    #: The text was replaced by a fixed error message.
    ERROR = "error"


@dataclasses.dataclass(frozen=True, slots=True)
class Turn:
    """One message in the transcript."""

    role: Role
    text: str = ""
    status: TurnStatus = TurnStatus.COMPLETE

    def __post_init__(self) -> None:
        """Coerce plain strings into enums and check the text type."""
        if not isinstance(self.role, Role):
            object.__setattr__(self, "role", Role(self.role))
        if not isinstance(self.status, TurnStatus):
            object.__setattr__(self, "status", TurnStatus(self.status))
        if not isinstance(self.text, str):
            raise TypeError("Turn.text must be str")

    @property
    def is_open(self) -> bool:
        """Whether the turn is still accumulating streamed text."""
        return self.status is TurnStatus.STREAMING


class Transcript:
    """Mutable owner of the ordered turn sequence.

    Only the session controller mutates a transcript; renderers read
    `snapshot()`.
    """

    def __init__(self) -> None:
        self._turns: list[Turn] = []
        self._generation = 0

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.snapshot())

    @property
    def generation(self) -> int:
        """Counter bumped by `reset()`; stale writers compare against it."""
        return self._generation

    @property
    def last(self) -> Turn | None:
        """The most recent turn, or None when empty."""
        return self._turns[-1] if self._turns else None

    def append_turn(
        self,
        role: Role | str,
        initial_text: str = "",
        *,
        status: TurnStatus | str = TurnStatus.COMPLETE,
    ) -> int:
        """Append a new turn and return its index."""
        self._turns.append(Turn(role=role, text=initial_text, status=status))
        return len(self._turns) - 1

    def update_last_turn_text(
        self, text: str, *, status: TurnStatus | str | None = None
    ) -> Turn:
        """Replace the full text (not a delta) of the most recent turn.

        Raises:
            InternalError: The transcript is empty.
        """
        if not self._turns:
            raise InternalError(
                "update_last_turn_text called on an empty transcript",
                hint="Append a turn before streaming into it.",
            )
        current = self._turns[-1]
        changes: dict[str, object] = {"text": text}
        if status is not None:
            changes["status"] = status
        updated = dataclasses.replace(current, **changes)
        self._turns[-1] = updated
        return updated

    def reset(self) -> None:
        """Drop every turn and invalidate in-progress accumulation."""
        self._turns.clear()
        self._generation += 1

    def snapshot(self) -> tuple[Turn, ...]:
        """Return an immutable ordered view of all turns."""
        return tuple(self._turns)
