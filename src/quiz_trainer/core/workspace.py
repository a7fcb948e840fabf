"""Data home bootstrap for the quiz trainer."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, MutableMapping


WORKSPACE_ENV = "QUIZ_TRAINER_HOME"
DEFAULT_WORKSPACE = Path.home() / ".quiz-trainer"

_SUBDIRS = {
    "config": "config",
    "logs": "logs",
    "data": "data",
}


class WorkspaceError(RuntimeError):
    """Raised when the data home cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved data home paths."""

    home: Path
    directories: Mapping[str, Path]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise WorkspaceError(
                f"Unknown workspace directory '{key}'."
            ) from exc


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Return the data home layout, creating directories when ``create``.

    An explicit ``path`` or ``QUIZ_TRAINER_HOME`` wins over the default
    location. Only the default location falls back to the temp directory
    when it is not writable.
    """

    env_map = os.environ if env is None else env
    base, explicit = _resolve_base(env_map, override=path)

    candidates = [base]
    if create and not explicit:
        candidates.append(Path(tempfile.gettempdir()) / "quiz-trainer")

    last_error: Exception | None = None
    for candidate in candidates:
        try:
            return _materialize(candidate, create=create)
        except PermissionError as exc:
            last_error = exc
    raise WorkspaceError(
        f"Unable to prepare workspace at {base}"
    ) from last_error


def _resolve_base(
    env: Mapping[str, str], *, override: Path | None
) -> tuple[Path, bool]:
    if override is not None:
        return override.expanduser().resolve(), True
    custom = (env.get(WORKSPACE_ENV) or "").strip()
    if custom:
        return Path(custom).expanduser().resolve(), True
    return DEFAULT_WORKSPACE, False


def _materialize(base: Path, *, create: bool) -> WorkspaceLayout:
    if base.exists() and not base.is_dir():
        raise WorkspaceError(
            f"Configured workspace exists and is not a directory: {base}"
        )

    if create:
        _ensure_dir(base)
    directories: MutableMapping[str, Path] = {}
    for key, relative in _SUBDIRS.items():
        candidate = base / relative
        if create:
            _ensure_dir(candidate)
        elif candidate.exists() and not candidate.is_dir():
            raise WorkspaceError(
                f"Expected workspace directory for '{key}' but found a "
                f"file: {candidate}"
            )
        directories[key] = candidate

    return WorkspaceLayout(
        home=base,
        directories=MappingProxyType(dict(directories)),
    )


def _ensure_dir(path: Path) -> None:
    if path.exists() and not path.is_dir():
        raise WorkspaceError(
            f"Expected directory but found a non-directory entry: {path}"
        )
    path.mkdir(parents=True, exist_ok=True)
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):  # pragma: no cover
        pass
