from __future__ import annotations

import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from quiz_trainer.core import workspace as workspace_mod  # noqa: E402


@pytest.fixture
def workspace_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point QUIZ_TRAINER_HOME at a per-test directory."""

    home = tmp_path / "home"
    monkeypatch.setenv(workspace_mod.WORKSPACE_ENV, str(home))
    monkeypatch.delenv("QUIZ_TRAINER_CONFIG", raising=False)
    monkeypatch.delenv("QUIZ_TRAINER_STORE", raising=False)
    monkeypatch.delenv("QUIZ_TRAINER_SEED", raising=False)
    monkeypatch.delenv("QUIZ_TRAINER_LOG_LEVEL", raising=False)
    return home
