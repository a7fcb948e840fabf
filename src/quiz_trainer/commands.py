"""Command handlers for the interactive quiz trainer.

Each handler is an ``async`` callable taking the :class:`CommandContext` and
the optional single argument typed after the command name. Handlers are
wrapped by :func:`command_boundary`, which turns any :class:`QuizError` into
error lines on the channel, so the REPL can always read the next command
once a handler returns.
"""

from __future__ import annotations

import functools
import logging
import random
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Mapping, Optional, Sequence

from rich.text import Text

from .errors import QuizError, QuizNotFoundError, QuizValidationError
from .prompter import Prompter
from .session import answers_match, question_prompt, run_play_session
from .store import QuizRecord, QuizStore
from .validation import validate_id

__all__ = [
    "DEFAULT_CREDITS",
    "COMMANDS",
    "CommandContext",
    "CommandHandler",
    "CommandSpec",
    "command_boundary",
    "format_help",
    "resolve_command",
]

logger = logging.getLogger(__name__)

DEFAULT_CREDITS: tuple[str, ...] = ("The quiz-trainer authors",)


@dataclass
class CommandContext:
    """Collaborators shared by every command of one interactive session."""

    prompter: Prompter
    store: QuizStore
    rng: random.Random = field(default_factory=random.Random)
    credits: Sequence[str] = DEFAULT_CREDITS


CommandHandler = Callable[[CommandContext, Optional[str]], Awaitable[None]]


def command_boundary(func: CommandHandler) -> CommandHandler:
    """Report :class:`QuizError` failures instead of propagating them."""

    @functools.wraps(func)
    async def wrapper(ctx: CommandContext, arg: str | None = None) -> None:
        try:
            await func(ctx, arg)
        except QuizValidationError as exc:
            ctx.prompter.error(exc.heading)
            for message in exc.messages:
                ctx.prompter.error(message)
            _log_failure(func, arg, exc)
        except QuizError as exc:
            ctx.prompter.error(str(exc))
            _log_failure(func, arg, exc)

    return wrapper


def _log_failure(
    func: CommandHandler, arg: str | None, exc: Exception
) -> None:
    logger.warning(
        "Command failed: %s",
        exc,
        extra={
            "event": "command.error",
            "command": func.__name__,
            "argument": arg,
            "error": type(exc).__name__,
        },
    )


def _describe(record: QuizRecord, *, with_answer: bool = True) -> Text:
    text = Text.assemble(
        "[",
        (str(record.id), "magenta"),
        "]: ",
        record.question,
    )
    if with_answer:
        text.append(" => ", style="magenta")
        text.append(record.answer)
    return text


async def _fetch(ctx: CommandContext, arg: str | None) -> QuizRecord:
    quiz_id = validate_id(arg)
    record = await ctx.store.find_by_id(quiz_id)
    if record is None:
        raise QuizNotFoundError(quiz_id)
    return record


@command_boundary
async def help_cmd(ctx: CommandContext, arg: str | None = None) -> None:
    ctx.prompter.write(format_help())


@command_boundary
async def list_cmd(ctx: CommandContext, arg: str | None = None) -> None:
    for record in await ctx.store.find_all():
        ctx.prompter.write(_describe(record, with_answer=False))


@command_boundary
async def show_cmd(ctx: CommandContext, arg: str | None = None) -> None:
    ctx.prompter.write(_describe(await _fetch(ctx, arg)))


@command_boundary
async def add_cmd(ctx: CommandContext, arg: str | None = None) -> None:
    question = await ctx.prompter.ask("Enter a question: ")
    answer = await ctx.prompter.ask("Enter the answer: ")
    record = await ctx.store.create(question, answer)
    ctx.prompter.write(Text.assemble(("Added ", "magenta"), _describe(record)))


@command_boundary
async def delete_cmd(ctx: CommandContext, arg: str | None = None) -> None:
    try:
        quiz_id = validate_id(arg)
    except QuizNotFoundError:
        return
    await ctx.store.destroy(quiz_id)


@command_boundary
async def edit_cmd(ctx: CommandContext, arg: str | None = None) -> None:
    record = await _fetch(ctx, arg)
    record.question = await ctx.prompter.ask(
        "Enter the question: ", prefill=record.question
    )
    record.answer = await ctx.prompter.ask(
        "Enter the answer: ", prefill=record.answer
    )
    saved = await ctx.store.save(record)
    ctx.prompter.write(
        Text.assemble(
            ("Quiz ", "magenta"),
            (str(saved.id), "magenta"),
            (" updated: ", "magenta"),
            saved.question,
            (" => ", "magenta"),
            saved.answer,
        )
    )


@command_boundary
async def test_cmd(ctx: CommandContext, arg: str | None = None) -> None:
    record = await _fetch(ctx, arg)
    reply = await ctx.prompter.ask(question_prompt(record))
    if answers_match(reply, record.answer):
        ctx.prompter.write(Text("Correct", style="green"))
    else:
        ctx.prompter.write(Text("Incorrect", style="red"))


@command_boundary
async def play_cmd(ctx: CommandContext, arg: str | None = None) -> None:
    await run_play_session(ctx.store, ctx.prompter, ctx.rng)


@command_boundary
async def credits_cmd(ctx: CommandContext, arg: str | None = None) -> None:
    ctx.prompter.write("Authors:")
    for author in ctx.credits:
        ctx.prompter.write(Text(f"  {author}", style="green"))


@command_boundary
async def quit_cmd(ctx: CommandContext, arg: str | None = None) -> None:
    ctx.prompter.close()


@dataclass(frozen=True)
class CommandSpec:
    """A REPL command, its aliases and its help line."""

    name: str
    summary: str
    handler: CommandHandler
    aliases: tuple[str, ...] = ()
    usage: str = ""

    @property
    def label(self) -> str:
        names = "|".join((*self.aliases, self.name))
        return f"{names} {self.usage}".rstrip()


_COMMAND_SPECS: Sequence[CommandSpec] = (
    CommandSpec("help", "Show this help.", help_cmd, aliases=("h",)),
    CommandSpec("list", "List the stored quizzes.", list_cmd),
    CommandSpec(
        "show",
        "Show the question and answer of a quiz.",
        show_cmd,
        usage="<id>",
    ),
    CommandSpec("add", "Add a new quiz interactively.", add_cmd),
    CommandSpec("delete", "Delete a quiz.", delete_cmd, usage="<id>"),
    CommandSpec(
        "edit", "Edit a quiz interactively.", edit_cmd, usage="<id>"
    ),
    CommandSpec(
        "test", "Answer the question of one quiz.", test_cmd, usage="<id>"
    ),
    CommandSpec(
        "play",
        "Play every quiz in random order.",
        play_cmd,
        aliases=("p",),
    ),
    CommandSpec("credits", "Show the credits.", credits_cmd),
    CommandSpec("quit", "Quit the program.", quit_cmd, aliases=("q",)),
)

COMMANDS: Mapping[str, CommandSpec] = {
    name: spec
    for spec in _COMMAND_SPECS
    for name in (spec.name, *spec.aliases)
}


def resolve_command(name: str) -> CommandSpec | None:
    """Look up a command by name or alias, ignoring case."""

    return COMMANDS.get(name.strip().lower())


def format_help() -> str:
    width = max(len(spec.label) for spec in _COMMAND_SPECS)
    lines = ["Commands:"]
    for spec in _COMMAND_SPECS:
        lines.append(f"  {spec.label.ljust(width)}  {spec.summary}")
    return "\n".join(lines)
