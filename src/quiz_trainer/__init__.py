"""Interactive question/answer trainer."""

from .commands import COMMANDS, CommandContext, CommandSpec, resolve_command
from .errors import (
    MissingParameterError,
    NotANumberError,
    QuizError,
    QuizNotFoundError,
    QuizValidationError,
    StoreError,
)
from .prompter import Prompter
from .repl import parse_command_line, run_repl
from .session import (
    PlayResult,
    PlaySessionState,
    answers_match,
    run_play_session,
)
from .store import JsonlQuizStore, MemoryQuizStore, QuizRecord, QuizStore
from .validation import validate_id

__all__ = [
    "COMMANDS",
    "CommandContext",
    "CommandSpec",
    "resolve_command",
    "MissingParameterError",
    "NotANumberError",
    "QuizError",
    "QuizNotFoundError",
    "QuizValidationError",
    "StoreError",
    "Prompter",
    "parse_command_line",
    "run_repl",
    "PlayResult",
    "PlaySessionState",
    "answers_match",
    "run_play_session",
    "JsonlQuizStore",
    "MemoryQuizStore",
    "QuizRecord",
    "QuizStore",
    "validate_id",
]
