"""Argument validation for commands that take a quiz id."""

from __future__ import annotations

import re

from .errors import MissingParameterError, NotANumberError, QuizNotFoundError

__all__ = ["validate_id"]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def validate_id(raw: str | None) -> int:
    """Turn the raw ``<id>`` argument into an integer key.

    Only the leading integer is read, so ``"12abc"`` gives 12 and ``"3.5"``
    gives 3. Whether a quiz with that id exists is left to the store lookup,
    except for digit runs too long to convert to an int: no store can hold
    such an id, so :class:`QuizNotFoundError` is raised straight away.
    """

    if raw is None:
        raise MissingParameterError()
    match = _LEADING_INT.match(raw)
    if match is None:
        raise NotANumberError(raw)
    digits = match.group(1)
    try:
        return int(digits)
    except ValueError:
        raise QuizNotFoundError(digits) from None
