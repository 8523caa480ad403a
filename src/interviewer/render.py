"""Markdown rendering for the terminal.

Model output is untrusted text. Rich's Markdown renderer never executes
embedded HTML, but raw escape sequences would still reach the terminal, so
`sanitize` strips them before rendering. Callers must render model text only
through `render`.
"""

from __future__ import annotations

import re

from rich.console import Console
from rich.markdown import Markdown

# CSI/OSC escape sequences, then any remaining C0/C1 control bytes except \t and \n.
_ANSI_RE = re.compile(r"\x1b(?:\[[0-?]*[ -/]*[@-~]|\][^\x07\x1b]*(?:\x07|\x1b\\)?|[@-Z\\-_])")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")


def sanitize(text: str) -> str:
    """Remove terminal escape sequences and control characters."""
    text = text.replace("\r\n", "\n")
    return _CONTROL_RE.sub("", _ANSI_RE.sub("", text))


def render(text: str) -> Markdown:
    """Render model text as a rich Markdown renderable."""
    return Markdown(sanitize(text))


def render_to_text(text: str, *, width: int = 80) -> str:
    """Render markdown to plain terminal text (no colour codes)."""
    console = Console(width=width, no_color=True, color_system=None)
    with console.capture() as capture:
        console.print(render(text))
    return capture.get()
