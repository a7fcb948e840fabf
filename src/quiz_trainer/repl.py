"""Read-dispatch loop driving the command handlers."""

from __future__ import annotations

import asyncio
import logging

from rich.text import Text

from .commands import CommandContext, resolve_command

__all__ = ["DEFAULT_PROMPT", "parse_command_line", "run_repl"]

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "quiz > "


def parse_command_line(line: str) -> tuple[str, str | None] | None:
    """Split ``line`` into a lower-cased command name and first argument.

    Returns ``None`` for blank lines. Words after the first argument are
    ignored.
    """

    words = line.split()
    if not words:
        return None
    name = words[0].lower()
    argument = words[1] if len(words) > 1 else None
    return name, argument


async def run_repl(
    ctx: CommandContext, prompt_text: str = DEFAULT_PROMPT
) -> None:
    """Run commands until ``quit`` closes the channel or input ends.

    Ctrl-C under ``asyncio.run`` arrives as cancellation of this task; it
    closes the session like end of input does.
    """

    prompter = ctx.prompter
    while not prompter.closed:
        try:
            line = await prompter.ask(prompt_text)
        except (EOFError, asyncio.CancelledError):
            prompter.write()
            prompter.close()
            break
        parsed = parse_command_line(line)
        if parsed is None:
            continue
        name, argument = parsed
        spec = resolve_command(name)
        if spec is None:
            prompter.error(f"Unknown command: {name}")
            prompter.write("Use 'help' to see every available command.")
            continue
        logger.info(
            "Dispatching %s",
            spec.name,
            extra={
                "event": "command",
                "command": spec.name,
                "argument": argument,
            },
        )
        try:
            await spec.handler(ctx, argument)
        except (EOFError, asyncio.CancelledError):
            prompter.write()
            prompter.close()
        except Exception as exc:
            logger.exception(
                "Command crashed",
                extra={"event": "command.crash", "command": spec.name},
            )
            prompter.error(f"Unexpected error in '{spec.name}': {exc}")
    prompter.write(Text("Goodbye!", style="magenta"))
