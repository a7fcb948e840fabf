"""Shared testing helpers for the quiz_trainer test suite."""

from .prompter import FakePrompter, ScriptedInput, recording_console  # noqa: F401

__all__ = [
    "FakePrompter",
    "ScriptedInput",
    "recording_console",
]
