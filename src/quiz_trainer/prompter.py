"""Interactive text channel used by the command engine.

The :class:`Prompter` writes prompts through a Rich console and reads the
reply on a daemon thread, so awaiting :meth:`Prompter.ask` is the only place
a command suspends waiting for the user. Cancelling that await (Ctrl-C under
``asyncio.run``) returns at once; the abandoned read never holds up exit.
"""

from __future__ import annotations

import asyncio
import sys
import threading
from typing import Callable

from rich.console import Console
from rich.text import Text

try:  # readline is missing on some platforms; pre-fill is then a no-op.
    import readline
except ImportError:  # pragma: no cover - platform dependent
    readline = None  # type: ignore[assignment]

__all__ = ["LineReader", "Prompter"]

LineReader = Callable[[], str]


class Prompter:
    """Ask questions and print results over one interactive channel."""

    def __init__(
        self,
        console: Console,
        err_console: Console | None = None,
        *,
        reader: LineReader | None = None,
        interactive: bool | None = None,
        prompt_style: str = "red",
    ) -> None:
        self._console = console
        self._err_console = err_console or console
        self._reader = reader or input
        if interactive is None:
            interactive = console.is_terminal and sys.stdin.isatty()
        self._interactive = interactive
        self._prompt_style = prompt_style
        self._closed = False

    @property
    def interactive(self) -> bool:
        return self._interactive

    @property
    def closed(self) -> bool:
        return self._closed

    async def ask(self, text: str, prefill: str | None = None) -> str:
        """Prompt with ``text`` and return the user's reply, trimmed.

        ``prefill`` seeds the edit buffer when the channel is a real
        terminal with readline support. End of input raises ``EOFError``.
        """

        self._console.print(Text(text, style=self._prompt_style), end="")
        line = await self._read_in_background(prefill)
        return line.strip()

    def write(self, text: str | Text = "") -> None:
        self._console.print(text)

    def error(self, text: str | Text) -> None:
        if isinstance(text, str):
            text = Text(text, style="bold red")
        self._err_console.print(text)

    def close(self) -> None:
        self._closed = True

    def _read_in_background(self, prefill: str | None) -> asyncio.Future[str]:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()

        def deliver(line: str | None, exc: Exception | None) -> None:
            if future.done():
                return
            if exc is not None:
                future.set_exception(exc)
            else:
                future.set_result(line)

        def target() -> None:
            line: str | None = None
            exc: Exception | None = None
            try:
                line = self._read_line(prefill)
            except Exception as error:
                exc = error
            try:
                loop.call_soon_threadsafe(deliver, line, exc)
            except RuntimeError:
                return  # loop closed after a cancelled read

        threading.Thread(
            target=target, name="quiz-trainer-reader", daemon=True
        ).start()
        return future

    def _read_line(self, prefill: str | None) -> str:
        hooked = bool(prefill) and self._interactive and readline is not None
        if hooked:
            readline.set_startup_hook(lambda: readline.insert_text(prefill))
        try:
            return self._reader()
        except StopIteration as exc:
            raise EOFError("input exhausted") from exc
        finally:
            if hooked:
                readline.set_startup_hook()
