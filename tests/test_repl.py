from __future__ import annotations

import asyncio
import random
import threading

import pytest

from fixtures import FakePrompter, ScriptedInput, recording_console
from quiz_trainer import commands as commands_mod
from quiz_trainer.commands import CommandContext, CommandSpec
from quiz_trainer.prompter import Prompter
from quiz_trainer.repl import DEFAULT_PROMPT, parse_command_line, run_repl
from quiz_trainer.store import MemoryQuizStore


def test_parse_command_line_variants():
    assert parse_command_line("show 3") == ("show", "3")
    assert parse_command_line("  SHOW   3  extra") == ("show", "3")
    assert parse_command_line("list") == ("list", None)
    assert parse_command_line("") is None
    assert parse_command_line("   \t ") is None


@pytest.mark.asyncio
async def test_repl_dispatches_until_quit():
    prompter = FakePrompter(["list", "", "show 1", "q", "list"])
    ctx = CommandContext(
        prompter=prompter,
        store=MemoryQuizStore([("Capital of Italy", "Rome")]),
    )

    await run_repl(ctx)

    assert prompter.closed is True
    assert prompter.prompts == [DEFAULT_PROMPT] * 4
    assert prompter.output == [
        "[1]: Capital of Italy",
        "[1]: Capital of Italy => Rome",
        "Goodbye!",
    ]


@pytest.mark.asyncio
async def test_repl_recovers_after_failed_commands():
    prompter = FakePrompter(["show", "frobnicate", "show 1", "quit"])
    ctx = CommandContext(
        prompter=prompter,
        store=MemoryQuizStore([("Q", "A")]),
    )

    await run_repl(ctx, "> ")

    assert prompter.errors == [
        "Missing parameter <id>.",
        "Unknown command: frobnicate",
    ]
    assert "[1]: Q => A" in prompter.output
    assert prompter.prompts == ["> "] * 4


@pytest.mark.asyncio
async def test_repl_closes_on_end_of_input():
    prompter = FakePrompter(["list"])
    ctx = CommandContext(prompter=prompter, store=MemoryQuizStore())

    await run_repl(ctx)

    assert prompter.closed is True
    assert prompter.output[-1] == "Goodbye!"


@pytest.mark.asyncio
async def test_repl_closes_when_input_ends_mid_command():
    prompter = FakePrompter(["add", "Only a question"])
    ctx = CommandContext(prompter=prompter, store=MemoryQuizStore())

    await run_repl(ctx)

    assert prompter.closed is True
    assert len(prompter.prompts) == 3


@pytest.mark.asyncio
async def test_repl_survives_unexpected_handler_errors(monkeypatch):
    async def _explode(ctx, arg=None):
        raise ValueError("kaboom")

    broken = CommandSpec("boom", "Always fails.", _explode)
    monkeypatch.setitem(commands_mod.COMMANDS, "boom", broken)
    prompter = FakePrompter(["boom", "quit"])
    ctx = CommandContext(prompter=prompter, store=MemoryQuizStore())

    await run_repl(ctx)

    assert prompter.errors == ["Unexpected error in 'boom': kaboom"]
    assert prompter.closed is True


@pytest.mark.asyncio
async def test_repl_with_real_prompter_plays_a_game():
    out = recording_console()
    reader = ScriptedInput(["play", " ROME ", "quit"])
    ctx = CommandContext(
        prompter=Prompter(out, reader=reader, interactive=False),
        store=MemoryQuizStore([("Capital of Italy", "Rome")]),
        rng=random.Random(1),
    )

    await run_repl(ctx)

    text = out.export_text(clear=False)
    assert "Capital of Italy" in text
    assert "Correct" in text
    assert "Your score: 1" in text
    assert reader.remaining == 0


@pytest.mark.asyncio
async def test_repl_cancelled_at_prompt_says_goodbye():
    out = recording_console()
    started = threading.Event()
    release = threading.Event()

    def _blocking_reader() -> str:
        started.set()
        release.wait(timeout=5)
        return "list"

    ctx = CommandContext(
        prompter=Prompter(out, reader=_blocking_reader, interactive=False),
        store=MemoryQuizStore(),
    )
    task = asyncio.create_task(run_repl(ctx))
    while not started.is_set():
        await asyncio.sleep(0.01)

    task.cancel()
    try:
        await asyncio.wait_for(task, timeout=1)
    finally:
        release.set()

    assert ctx.prompter.closed is True
    assert out.export_text(clear=False).rstrip().endswith("Goodbye!")


@pytest.mark.asyncio
async def test_repl_cancelled_inside_a_command_closes_session():
    def _reply(prompt: str) -> str:
        if prompt == DEFAULT_PROMPT:
            return "add"
        raise asyncio.CancelledError

    prompter = FakePrompter(answer_for=_reply)
    ctx = CommandContext(prompter=prompter, store=MemoryQuizStore())

    await run_repl(ctx)

    assert prompter.closed is True
    assert prompter.prompts == [DEFAULT_PROMPT, "Enter a question: "]
    assert prompter.output == ["", "Goodbye!"]
