"""Errors reported to the user by quiz trainer commands."""

from __future__ import annotations

from typing import Iterable

__all__ = [
    "QuizError",
    "MissingParameterError",
    "NotANumberError",
    "QuizNotFoundError",
    "QuizValidationError",
    "StoreError",
]


class QuizError(RuntimeError):
    """Base class for failures a command reports without crashing."""


class MissingParameterError(QuizError):
    """Raised when a command needs an <id> and none was given."""

    def __init__(self, name: str = "id") -> None:
        super().__init__(f"Missing parameter <{name}>.")
        self.name = name


class NotANumberError(QuizError):
    """Raised when the <id> argument is not an integer."""

    def __init__(self, raw: str, name: str = "id") -> None:
        super().__init__(f"The value of parameter <{name}> is not a number.")
        self.raw = raw
        self.name = name


class QuizNotFoundError(QuizError):
    def __init__(self, quiz_id: int | str) -> None:
        super().__init__(f"There is no quiz with id={quiz_id}.")
        self.quiz_id = quiz_id


class QuizValidationError(QuizError):
    """Raised by the store when a quiz has invalid fields.

    ``messages`` holds one entry per offending field, in field order.
    """

    heading = "The quiz is invalid:"

    def __init__(self, messages: Iterable[str]) -> None:
        self.messages = tuple(messages)
        super().__init__(" ".join(self.messages) or self.heading)


class StoreError(QuizError):
    """Raised when the quiz store cannot be read or written."""
