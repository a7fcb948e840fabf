"""Quiz storage backends.

Commands only talk to the :class:`QuizStore` protocol. Two backends ship
with the trainer: :class:`MemoryQuizStore` keeps quizzes for the lifetime of
the process and :class:`JsonlQuizStore` persists them to a JSON-lines file.
Both hand out copies of their records, so a command can mutate what it
fetched without touching stored state until it calls ``save``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Protocol

from .errors import QuizNotFoundError, QuizValidationError, StoreError
from .utils import read_jsonl, write_jsonl

__all__ = [
    "QuizRecord",
    "QuizStore",
    "MemoryQuizStore",
    "JsonlQuizStore",
    "SAMPLE_QUIZZES",
    "validate_fields",
]

logger = logging.getLogger(__name__)

SAMPLE_QUIZZES: tuple[tuple[str, str], ...] = (
    ("Capital of Italy", "Rome"),
    ("Capital of France", "Paris"),
    ("Capital of Spain", "Madrid"),
    ("Capital of Portugal", "Lisbon"),
)


@dataclass
class QuizRecord:
    """A stored question/answer pair. ``id`` cannot change once set."""

    id: int
    question: str
    answer: str

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("Quiz id is immutable once assigned.")
        super().__setattr__(name, value)

    def copy(self) -> "QuizRecord":
        return QuizRecord(self.id, self.question, self.answer)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "answer": self.answer,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "QuizRecord":
        try:
            quiz_id = payload["id"]
            question = payload["question"]
            answer = payload["answer"]
        except (KeyError, TypeError) as exc:
            raise StoreError(f"Quiz entry missing field: {exc}") from exc
        if not isinstance(quiz_id, int) or isinstance(quiz_id, bool):
            raise StoreError(f"Quiz id must be an integer, got {quiz_id!r}.")
        return cls(quiz_id, str(question), str(answer))


class QuizStore(Protocol):
    """CRUD operations the command engine relies on."""

    async def find_all(self) -> list[QuizRecord]:
        """Return every quiz in id order."""

    async def find_by_id(self, quiz_id: int) -> QuizRecord | None:
        """Return the quiz with ``quiz_id`` or ``None``."""

    async def create(self, question: str, answer: str) -> QuizRecord:
        """Store a new quiz and return it with its assigned id."""

    async def save(self, record: QuizRecord) -> QuizRecord:
        """Overwrite the stored fields of ``record``."""

    async def destroy(self, quiz_id: int) -> bool:
        """Remove the quiz; report whether it existed."""


def validate_fields(question: str, answer: str) -> None:
    """Raise :class:`QuizValidationError` listing every empty field."""

    messages = []
    if not question or not question.strip():
        messages.append("Question must not be empty.")
    if not answer or not answer.strip():
        messages.append("Answer must not be empty.")
    if messages:
        raise QuizValidationError(messages)


class MemoryQuizStore:
    """Quiz store held in process memory.

    Operations are serialized with an :class:`asyncio.Lock`; ids come from
    a counter that never goes backwards, so a deleted id is not reused.
    """

    def __init__(self, quizzes: Iterable[tuple[str, str]] = ()) -> None:
        self._records: dict[int, QuizRecord] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()
        for question, answer in quizzes:
            self._insert(question, answer)

    async def find_all(self) -> list[QuizRecord]:
        async with self._lock:
            await self._ensure_loaded()
            return [self._records[key].copy() for key in sorted(self._records)]

    async def find_by_id(self, quiz_id: int) -> QuizRecord | None:
        async with self._lock:
            await self._ensure_loaded()
            record = self._records.get(quiz_id)
            return record.copy() if record is not None else None

    async def create(self, question: str, answer: str) -> QuizRecord:
        validate_fields(question, answer)
        async with self._lock:
            await self._ensure_loaded()
            record = self._insert(question, answer)
            await self._persist()
        logger.info(
            "Quiz created",
            extra={"event": "store.create", "quiz_id": record.id},
        )
        return record.copy()

    async def save(self, record: QuizRecord) -> QuizRecord:
        validate_fields(record.question, record.answer)
        async with self._lock:
            await self._ensure_loaded()
            stored = self._records.get(record.id)
            if stored is None:
                raise QuizNotFoundError(record.id)
            stored.question = record.question
            stored.answer = record.answer
            await self._persist()
        logger.info(
            "Quiz updated",
            extra={"event": "store.save", "quiz_id": record.id},
        )
        return stored.copy()

    async def destroy(self, quiz_id: int) -> bool:
        async with self._lock:
            await self._ensure_loaded()
            existed = self._records.pop(quiz_id, None) is not None
            if existed:
                await self._persist()
        logger.info(
            "Quiz destroyed" if existed else "Quiz to destroy not found",
            extra={"event": "store.destroy", "quiz_id": quiz_id},
        )
        return existed

    def _insert(self, question: str, answer: str) -> QuizRecord:
        record = QuizRecord(self._next_id, question, answer)
        self._records[record.id] = record
        self._next_id += 1
        return record

    async def _ensure_loaded(self) -> None:
        return None

    async def _persist(self) -> None:
        return None


class JsonlQuizStore(MemoryQuizStore):
    """Quiz store backed by a JSON-lines file.

    The file is read on first use and rewritten after every mutation. A
    missing file starts an empty store, or the sample quizzes when
    ``seed_defaults`` is set. If a write fails the in-memory copy is
    discarded and re-read from disk on the next call.
    """

    def __init__(self, path: Path, *, seed_defaults: bool = False) -> None:
        super().__init__()
        self._path = Path(path)
        self._seed_defaults = seed_defaults
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        records = await asyncio.to_thread(self._read)
        self._records = {record.id: record for record in records}
        self._next_id = max(self._records, default=0) + 1
        self._loaded = True
        if not records and self._seed_defaults and not self._path.exists():
            for question, answer in SAMPLE_QUIZZES:
                self._insert(question, answer)
            await self._persist()
            logger.info(
                "Seeded sample quizzes",
                extra={"event": "store.seed", "path": self._path},
            )

    async def _persist(self) -> None:
        rows = [self._records[key].to_dict() for key in sorted(self._records)]
        try:
            await asyncio.to_thread(write_jsonl, self._path, rows)
        except OSError as exc:
            self._loaded = False
            raise StoreError(
                f"Unable to write quiz store {self._path}: {exc}"
            ) from exc

    def _read(self) -> list[QuizRecord]:
        if not self._path.exists():
            return []
        try:
            rows = read_jsonl(self._path)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StoreError(
                f"Quiz store {self._path} is corrupt: {exc}"
            ) from exc
        except OSError as exc:
            raise StoreError(
                f"Unable to read quiz store {self._path}: {exc}"
            ) from exc
        records = [QuizRecord.from_dict(row) for row in rows]
        seen: set[int] = set()
        for record in records:
            if record.id in seen:
                raise StoreError(
                    f"Quiz store {self._path} repeats id {record.id}."
                )
            seen.add(record.id)
        return records
