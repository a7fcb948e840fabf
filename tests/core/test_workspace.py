from __future__ import annotations

import pytest

from quiz_trainer.core import workspace


def test_ensure_workspace_creates_directories(tmp_path, monkeypatch):
    root = tmp_path / "data"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    layout = workspace.ensure_workspace()

    assert layout.home == root.resolve()
    assert layout.home.is_dir()
    for path in layout.directories.values():
        assert path.is_dir()
    assert {"config", "logs", "data"} == set(layout.directories)


def test_ensure_workspace_is_idempotent(tmp_path, monkeypatch):
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(tmp_path / "existing"))

    first = workspace.ensure_workspace()
    marker = first.path_for("data") / "quizzes.jsonl"
    marker.write_text("", encoding="utf-8")
    second = workspace.ensure_workspace()

    assert first == second
    assert marker.exists()


def test_ensure_workspace_respects_custom_path(tmp_path):
    custom = tmp_path / "custom-root"

    layout = workspace.ensure_workspace(path=custom, env={})

    assert layout.home == custom.resolve()


def test_ensure_workspace_without_create(tmp_path):
    root = tmp_path / "deferred"

    layout = workspace.ensure_workspace(
        env={workspace.WORKSPACE_ENV: str(root)}, create=False
    )

    assert layout.home == root.resolve()
    assert not root.exists()
    assert layout.path_for("logs") == root.resolve() / "logs"


def test_ensure_workspace_rejects_file_home(tmp_path):
    target = tmp_path / "file"
    target.write_text("not a dir", encoding="utf-8")

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(path=target)


def test_path_for_unknown_key(tmp_path):
    layout = workspace.ensure_workspace(path=tmp_path / "ws")
    with pytest.raises(workspace.WorkspaceError):
        layout.path_for("missing")
