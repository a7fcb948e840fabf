from __future__ import annotations

from pathlib import Path

import pytest

from quiz_trainer import config as config_mod


def test_defaults_without_config_file(workspace_home):
    result = config_mod.load_config()

    cfg = result.config
    assert result.config_path is None
    assert cfg.store.path == workspace_home.resolve() / "data" / "quizzes.jsonl"
    assert cfg.store.seed_defaults is True
    assert cfg.prompt.text == "quiz > "
    assert cfg.play.seed is None
    assert cfg.logging.level == "INFO"
    assert cfg.logging.verbose is False
    assert cfg.credits


def test_file_values_are_applied(workspace_home, tmp_path):
    path = tmp_path / "custom.toml"
    path.write_text(
        "[store]\n"
        'path = "bank.jsonl"\n'
        "seed_defaults = false\n"
        "[prompt]\n"
        'text = "? "\n'
        "[play]\n"
        "seed = 9\n"
        "[credits]\n"
        'authors = ["Ada", "Grace"]\n'
        "[logging]\n"
        'level = "debug"\n',
        encoding="utf-8",
    )

    cfg = config_mod.load_config(config_path=path).config

    assert cfg.store.path == tmp_path / "bank.jsonl"
    assert cfg.store.seed_defaults is False
    assert cfg.prompt.text == "? "
    assert cfg.play.seed == 9
    assert cfg.credits == ("Ada", "Grace")
    assert cfg.logging.level == "DEBUG"


def test_precedence_cli_over_env_over_file(workspace_home, tmp_path):
    path = tmp_path / "quiz.toml"
    path.write_text("[play]\nseed = 1\n", encoding="utf-8")
    env = {
        "QUIZ_TRAINER_HOME": str(workspace_home),
        "QUIZ_TRAINER_SEED": "2",
        "QUIZ_TRAINER_STORE": str(tmp_path / "env.jsonl"),
    }

    from_env = config_mod.load_config(config_path=path, env=env).config
    from_cli = config_mod.load_config(
        config_path=path,
        env=env,
        overrides=config_mod.ConfigOverrides(
            seed=3, store_path=tmp_path / "cli.jsonl", verbose=True
        ),
    ).config

    assert from_env.play.seed == 2
    assert from_env.store.path == tmp_path / "env.jsonl"
    assert from_cli.play.seed == 3
    assert from_cli.store.path == tmp_path / "cli.jsonl"
    assert from_cli.logging.verbose is True


def test_config_env_variable_is_used(workspace_home, tmp_path, monkeypatch):
    path = tmp_path / "env.toml"
    path.write_text('[prompt]\ntext = ">> "\n', encoding="utf-8")
    monkeypatch.setenv(config_mod.CONFIG_ENV, str(path))

    result = config_mod.load_config()

    assert result.config_path == path
    assert result.config.prompt.text == ">> "


def test_missing_explicit_config_is_an_error(workspace_home, tmp_path):
    with pytest.raises(config_mod.TrainerConfigError):
        config_mod.load_config(config_path=tmp_path / "absent.toml")


@pytest.mark.parametrize(
    ("body", "fragment"),
    [
        ("[store]\ncolour = 1\n", "store.colour"),
        ("store = 1\n", "Expected table"),
        ("[play]\nseed = true\n", "play.seed"),
        ("[store]\nseed_defaults = 1\n", "store.seed_defaults"),
        ("[logging]\nlevel = \"loud\"\n", "Unknown log level"),
        ("[credits]\nauthors = \"me\"\n", "credits.authors"),
        ("[store\n", "Failed to parse"),
    ],
)
def test_invalid_config_values(workspace_home, tmp_path, body, fragment):
    path = tmp_path / "bad.toml"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(config_mod.TrainerConfigError) as info:
        config_mod.load_config(config_path=path)
    assert fragment in str(info.value)


def test_invalid_env_seed(workspace_home):
    env = {"QUIZ_TRAINER_HOME": str(workspace_home), "QUIZ_TRAINER_SEED": "x"}
    with pytest.raises(config_mod.TrainerConfigError):
        config_mod.load_config(env=env)


def test_template_round_trips_through_loader(workspace_home, tmp_path):
    path = config_mod.write_template(tmp_path / "quiz_trainer.toml")

    cfg = config_mod.load_config(config_path=path).config

    assert cfg.prompt.text == "quiz > "
    assert cfg.store.seed_defaults is True
    with pytest.raises(config_mod.TrainerConfigError):
        config_mod.write_template(path)
    assert config_mod.write_template(path, overwrite=True) == path


def test_resolve_config_path_prefers_explicit(workspace_home):
    layout = config_mod.workspace_mod.ensure_workspace()
    explicit = Path("elsewhere.toml")

    assert (
        config_mod.resolve_config_path(
            config_path=explicit, env={}, layout=layout
        )
        == explicit
    )
    assert config_mod.resolve_config_path(
        config_path=None, env={}, layout=layout
    ) == layout.path_for("config") / config_mod.CONFIG_FILENAME
