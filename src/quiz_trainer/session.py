"""Play session: ask every stored quiz once, in random order.

A session snapshots the store, then repeatedly draws a quiz uniformly at
random from what is left, removes it from the pool and asks it. The first
wrong answer ends the game; answering the whole pool wins it. The pool and
score live on :class:`PlaySessionState`, which belongs to a single call of
:func:`run_play_session` and is thrown away when it returns.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Literal

from rich.text import Text

from .errors import StoreError
from .prompter import Prompter
from .store import QuizRecord, QuizStore

__all__ = [
    "PlayOutcome",
    "PlayResult",
    "PlaySessionState",
    "answers_match",
    "question_prompt",
    "run_play_session",
]

logger = logging.getLogger(__name__)

PlayOutcome = Literal["won", "lost", "empty", "failed"]


def answers_match(given: str, expected: str) -> bool:
    """Compare answers ignoring case and surrounding whitespace."""

    return given.strip().lower() == expected.strip().lower()


def question_prompt(record: QuizRecord) -> str:
    return f"{record.question.strip()} "


@dataclass
class PlaySessionState:
    """Remaining pool and running score for one play session."""

    pool: list[QuizRecord]
    score: int = 0
    asked: list[int] = field(default_factory=list)

    @property
    def remaining(self) -> int:
        return len(self.pool)

    def draw(self, rng: random.Random) -> QuizRecord:
        """Remove and return a uniformly random quiz from the pool.

        The chosen slot is filled with the last quiz, so each draw is O(1)
        and a drawn quiz can never come back.
        """

        index = rng.randrange(len(self.pool))
        last = self.pool.pop()
        if index == len(self.pool):
            chosen = last
        else:
            chosen, self.pool[index] = self.pool[index], last
        self.asked.append(chosen.id)
        return chosen

    def record_correct(self) -> None:
        self.score += 1


@dataclass(frozen=True)
class PlayResult:
    """Return value from :func:`run_play_session`."""

    score: int
    asked: int
    total: int
    outcome: PlayOutcome


async def run_play_session(
    store: QuizStore,
    prompter: Prompter,
    rng: random.Random | None = None,
) -> PlayResult:
    """Play through every quiz until one is missed or none are left."""

    rng = rng or random.Random()
    try:
        quizzes = await store.find_all()
    except StoreError as exc:
        prompter.error(str(exc))
        logger.warning(
            "Play session could not read the store: %s",
            exc,
            extra={"event": "play.error"},
        )
        result = PlayResult(score=0, asked=0, total=0, outcome="failed")
        _render_summary(prompter, result)
        return result
    state = PlaySessionState(list(quizzes))
    total = state.remaining
    logger.info(
        "Play session started",
        extra={"event": "play.start", "total": total},
    )

    outcome: PlayOutcome = "empty" if total == 0 else "won"
    while state.remaining:
        quiz = state.draw(rng)
        reply = await prompter.ask(question_prompt(quiz))
        if not answers_match(reply, quiz.answer):
            prompter.write(Text("Incorrect", style="red"))
            outcome = "lost"
            break
        state.record_correct()
        prompter.write(Text("Correct", style="green"))

    if outcome == "won":
        prompter.write(Text("You answered every quiz!", style="bold green"))
    elif outcome == "empty":
        prompter.write("There are no quizzes to play.")

    result = PlayResult(
        score=state.score,
        asked=len(state.asked),
        total=total,
        outcome=outcome,
    )
    _render_summary(prompter, result)
    logger.info(
        "Play session finished",
        extra={
            "event": "play.finish",
            "outcome": outcome,
            "score": result.score,
            "asked": result.asked,
        },
    )
    return result


def _render_summary(prompter: Prompter, result: PlayResult) -> None:
    prompter.write("Game over.")
    prompter.write(
        Text.assemble("Your score: ", (str(result.score), "bold magenta"))
    )
