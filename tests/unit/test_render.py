"""Terminal markdown rendering."""

from __future__ import annotations

from rich.markdown import Markdown
import pytest

from interviewer.render import render, render_to_text, sanitize

pytestmark = pytest.mark.unit


def test_sanitize_strips_escape_sequences_and_controls() -> None:
    text = "\x1b[31mred\x1b[0m \x1b]0;title\x07ok\x00\r\nnext\tcol"

    assert sanitize(text) == "red ok\nnext\tcol"


def test_sanitize_keeps_plain_unicode() -> None:
    assert sanitize("你好 café") == "你好 café"


def test_render_returns_markdown_of_sanitized_text() -> None:
    rendered = render("**bold**\x1b[2J")

    assert isinstance(rendered, Markdown)
    assert rendered.markup == "**bold**"


def test_render_to_text_formats_markdown_without_markup_syntax() -> None:
    out = render_to_text("## Script\n\n**Q1:** Tell me about *it*.")

    assert "Script" in out
    assert "Q1: Tell me about it." in out
    assert "**" not in out
    assert "\x1b[" not in out
