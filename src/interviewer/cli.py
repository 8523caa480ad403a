"""Terminal front-end for interview practice.

Examples:
- interviewer-pro --resume resume.txt --job job.txt
- interviewer-pro --mock --language Spanish
- python -m interviewer --resume resume.txt --job job.txt --verbose

In the chat, type an answer and press Enter. ``/restart`` starts over and
``/quit`` exits.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console, Group
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm
from rich.spinner import Spinner
from rich.text import Text

from interviewer.config import Config, create_service
from interviewer.controller import SessionController, ViewState
from interviewer.errors import ConfigurationError, InterviewerError, ValidationError
from interviewer.forms import SetupForm
from interviewer.prompts import LANGUAGE_LABELS, SUPPORTED_LANGUAGES
from interviewer.render import render
from interviewer.transcript import Role, TurnStatus

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from rich.console import RenderableType

    from interviewer.controller import ControllerState
    from interviewer.providers.base import ModelService

    ReadLine = Callable[[str], Awaitable[str | None]]

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2

QUIT_COMMAND = "/quit"
RESTART_COMMAND = "/restart"
END_OF_TEXT = "."

THINKING_TEXT = "Interviewer is thinking..."


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the ``interviewer-pro`` command."""
    parser = argparse.ArgumentParser(
        prog="interviewer-pro",
        description="Turn a resume and job description into a mock interview.",
    )
    parser.add_argument("--resume", type=Path, help="Path to a plain-text resume")
    parser.add_argument("--job", type=Path, help="Path to a plain-text job description")
    parser.add_argument(
        "--language",
        choices=SUPPORTED_LANGUAGES,
        default=None,
        help="Interview language (default: English)",
    )
    parser.add_argument("--model", default=None, help="Gemini model name")
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use the offline mock service instead of Gemini",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def configure_logging(console: Console, *, verbose: bool) -> None:
    """Route library logs through rich; debug level when *verbose*."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # The SDK's HTTP stack is noisy at debug level.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def print_error(console: Console, error: str | InterviewerError) -> None:
    """Print an error and its hint as plain text, never as rich markup."""
    console.print(Text(str(error), style="red"))
    hint = getattr(error, "hint", None)
    if hint:
        console.print(Text(hint))


class StreamView:
    """Controller listener that live-renders the open assistant turn."""

    def __init__(self, console: Console) -> None:
        self._console = console
        self._live: Live | None = None

    def __call__(self, state: ControllerState) -> None:
        if state.view is not ViewState.INTERVIEW or not state.transcript:
            self.stop()
            return
        last = state.transcript[-1]
        if last.role is not Role.ASSISTANT:
            return
        if state.is_loading and self._live is None:
            self._live = Live(
                console=self._console, refresh_per_second=8, vertical_overflow="visible"
            )
            self._live.start()
        if self._live is not None:
            self._live.update(self._renderable(state))
            if not state.is_loading:
                self.stop()

    def stop(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

    @staticmethod
    def _renderable(state: ControllerState) -> RenderableType:
        last = state.transcript[-1]
        if last.status is TurnStatus.STREAMING and not last.text:
            return Spinner("dots", text=THINKING_TEXT)
        body = render(last.text)
        if last.status is TurnStatus.ERROR:
            return Panel(body, border_style="red")
        if last.status is TurnStatus.INTERRUPTED:
            return Group(body, Text("(incomplete)", style="yellow"))
        return body


async def read_console_line(console: Console, prompt: str) -> str | None:
    """Read one line without blocking the event loop; None on EOF."""
    try:
        return await asyncio.to_thread(console.input, prompt)
    except EOFError:
        return None


async def read_block(read_line: ReadLine, label: str) -> str:
    """Read multi-line text terminated by a lone ``.`` line (or EOF)."""
    lines: list[str] = []
    first = True
    while True:
        line = await read_line(f"{label} (end with '{END_OF_TEXT}')> " if first else "")
        first = False
        if line is None or line.strip() == END_OF_TEXT:
            break
        lines.append(line)
    return "\n".join(lines)


def read_text_file(path: Path) -> str:
    """Read a UTF-8 input file, mapping I/O failures to `ValidationError`."""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValidationError(
            f"Cannot read {path}: {e.strerror or e}",
            hint="Pass a readable plain-text file.",
        ) from e


async def collect_setup(
    read_line: ReadLine,
    *,
    resume_path: Path | None,
    job_path: Path | None,
    language: str,
) -> SetupForm:
    """Gather and validate the setup inputs from files or the terminal."""
    resume = (
        read_text_file(resume_path)
        if resume_path is not None
        else await read_block(read_line, "Paste resume text")
    )
    job_description = (
        read_text_file(job_path)
        if job_path is not None
        else await read_block(read_line, "Paste job description")
    )
    return SetupForm.parse(resume, job_description, language)


async def chat_loop(
    controller: SessionController, console: Console, read_line: ReadLine
) -> bool:
    """Run the interview chat until quit or restart.

    Returns:
        True when the user restarted, False when they quit.
    """
    while True:
        line = await read_line("You> ")
        if line is None or line.strip() == QUIT_COMMAND:
            return False
        if line.strip() == RESTART_COMMAND:
            if controller.restart():
                return True
            continue
        if not line.strip():
            continue
        console.print()
        await controller.send_turn(line)
        console.print()


async def run_app(
    config: Config,
    console: Console,
    read_line: ReadLine,
    *,
    resume_path: Path | None = None,
    job_path: Path | None = None,
    service: ModelService | None = None,
    confirm: Callable[[str], bool] | None = None,
) -> int:
    """Drive setup → interview → (restart) until the user quits."""
    service = service if service is not None else create_service(config)
    if confirm is None:
        confirm = lambda message: Confirm.ask(message, console=console)  # noqa: E731
    controller = SessionController.from_config(config, service=service, confirm=confirm)
    view = StreamView(console)
    unsubscribe = controller.subscribe(view)

    try:
        while True:
            console.rule("Interviewer Pro")
            console.print(
                Text(
                    f"Language: {LANGUAGE_LABELS.get(config.language, config.language)}"
                    f" • Model: {config.model}"
                )
            )
            try:
                form = await collect_setup(
                    read_line,
                    resume_path=resume_path,
                    job_path=job_path,
                    language=config.language,
                )
            except ValidationError as e:
                print_error(console, e)
                return EXIT_USAGE

            await controller.generate_script(
                form.resume, form.job_description, form.language
            )
            state = controller.state
            if state.error:
                print_error(console, state.error)
            if state.view is ViewState.SETUP:
                # Files are re-read on retry; pasted text must be pasted again.
                if not confirm("Try again?"):
                    return EXIT_OK
                continue

            console.print(
                f"\nType your answer. {RESTART_COMMAND} starts over, {QUIT_COMMAND} exits.\n"
            )
            if not await chat_loop(controller, console, read_line):
                return EXIT_OK
            # After a restart, ask for fresh input instead of reusing files.
            resume_path = job_path = None
    finally:
        unsubscribe()
        view.stop()
        aclose = getattr(service, "aclose", None)
        if callable(aclose):
            try:
                await aclose()
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                # Cleanup should never mask the primary failure.
                logger.warning("Service cleanup failed: %s", exc)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``interviewer-pro`` command."""
    args = build_parser().parse_args(argv)
    console = Console()
    configure_logging(console, verbose=args.verbose)

    try:
        config = Config.from_env(
            model=args.model,
            language=args.language,
            use_mock=True if args.mock else None,
        )
    except ConfigurationError as e:
        print_error(console, e)
        return EXIT_USAGE

    async def read_line(prompt: str) -> str | None:
        return await read_console_line(console, prompt)

    try:
        return asyncio.run(
            run_app(
                config,
                console,
                read_line,
                resume_path=args.resume,
                job_path=args.job,
            )
        )
    except KeyboardInterrupt:
        return EXIT_OK
    except InterviewerError as e:
        print_error(console, e)
        return EXIT_USAGE


if __name__ == "__main__":
    raise SystemExit(main())
