"""Configuration loader for the quiz trainer."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from .core import config as core_config
from .core import workspace as workspace_mod

__all__ = [
    "CONFIG_ENV",
    "CONFIG_FILENAME",
    "ConfigOverrides",
    "LoadResult",
    "TrainerConfig",
    "TrainerConfigError",
    "load_config",
    "resolve_config_path",
    "write_template",
]

CONFIG_FILENAME = "quiz_trainer.toml"
CONFIG_ENV = "QUIZ_TRAINER_CONFIG"
ENV_PREFIX = "QUIZ_TRAINER_"
STORE_FILENAME = "quizzes.jsonl"
TEMPLATE_RESOURCE = "template.toml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class TrainerConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class StoreConfig:
    path: Path
    seed_defaults: bool


@dataclass(frozen=True)
class PromptConfig:
    text: str


@dataclass(frozen=True)
class PlayConfig:
    seed: Optional[int]


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class TrainerConfig:
    """Fully resolved configuration for one trainer run."""

    store: StoreConfig
    prompt: PromptConfig
    play: PlayConfig
    credits: tuple[str, ...]
    logging: LoggingConfig


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of env and file options."""

    store_path: Optional[Path] = None
    seed_defaults: Optional[bool] = None
    seed: Optional[int] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    config: TrainerConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults.

    A missing config file is fine at the default location but an error when
    it was requested explicitly through ``config_path`` or
    ``QUIZ_TRAINER_CONFIG``.
    """

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise TrainerConfigError(str(exc)) from exc

    requested = resolve_config_path(
        config_path=config_path, env=env_map, layout=layout
    )
    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        try:
            core_config.merge_defaults(
                table, core_config.load_toml(requested)
            )
        except core_config.TomlConfigError as exc:
            raise TrainerConfigError(str(exc)) from exc
        loaded_path = requested
    elif config_path is not None or (env_map.get(CONFIG_ENV) or "").strip():
        raise TrainerConfigError(f"Config file not found: {requested}")

    store_path = _pick_first(
        overrides.store_path,
        _env_path(env_map, "STORE"),
        _optional_path(table["store"]["path"], field="store.path"),
    )
    if store_path is None:
        store_path = layout.path_for("data") / STORE_FILENAME
    elif not store_path.is_absolute() and loaded_path is not None:
        store_path = loaded_path.parent / store_path

    seed = _pick_first(
        overrides.seed,
        _env_int(env_map, "SEED"),
        _optional_int(table["play"]["seed"], field="play.seed"),
    )
    level = str(
        _pick_first(
            _env_string(env_map, "LOG_LEVEL"), table["logging"]["level"]
        )
    ).upper()
    if level not in _LOG_LEVELS:
        raise TrainerConfigError(
            f"Unknown log level '{level}'. Expected one of: "
            f"{', '.join(_LOG_LEVELS)}."
        )

    config = TrainerConfig(
        store=StoreConfig(
            path=store_path.expanduser(),
            seed_defaults=_require_bool(
                _pick_first(
                    overrides.seed_defaults, table["store"]["seed_defaults"]
                ),
                field="store.seed_defaults",
            ),
        ),
        prompt=PromptConfig(
            text=_require_string(table["prompt"]["text"], field="prompt.text")
        ),
        play=PlayConfig(seed=seed),
        credits=_require_authors(table["credits"]["authors"]),
        logging=LoggingConfig(
            level=level,
            verbose=_require_bool(
                _pick_first(overrides.verbose, table["logging"]["verbose"]),
                field="logging.verbose",
            ),
        ),
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def resolve_config_path(
    *,
    config_path: Optional[Path],
    env: Mapping[str, str],
    layout: workspace_mod.WorkspaceLayout,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = (env.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return layout.path_for("config") / CONFIG_FILENAME


def read_template() -> str:
    resource = resources.files("quiz_trainer").joinpath(TEMPLATE_RESOURCE)
    return resource.read_text(encoding="utf-8")


def write_template(path: Path, *, overwrite: bool = False) -> Path:
    """Write the packaged config template to ``path``."""

    try:
        return core_config.write_toml_template(
            path, template=read_template(), overwrite=overwrite
        )
    except core_config.TomlConfigError as exc:
        raise TrainerConfigError(str(exc)) from exc


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    return {
        "store": {"path": None, "seed_defaults": True},
        "prompt": {"text": "quiz > "},
        "play": {"seed": None},
        "credits": {"authors": ["The quiz-trainer authors"]},
        "logging": {"level": "INFO", "verbose": False},
    }


def _pick_first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _env_string(env: Mapping[str, str], name: str) -> Optional[str]:
    value = env.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_path(env: Mapping[str, str], name: str) -> Optional[Path]:
    value = _env_string(env, name)
    return Path(value) if value is not None else None


def _env_int(env: Mapping[str, str], name: str) -> Optional[int]:
    value = _env_string(env, name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise TrainerConfigError(
            f"{ENV_PREFIX}{name} must be an integer, got '{value}'."
        ) from exc


def _optional_path(value: Any, *, field: str) -> Optional[Path]:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise TrainerConfigError(f"'{field}' must be a non-empty string.")
    return Path(value.strip())


def _optional_int(value: Any, *, field: str) -> Optional[int]:
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise TrainerConfigError(f"'{field}' must be an integer.")
    return value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise TrainerConfigError(f"'{field}' must be true or false.")
    return value


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value:
        raise TrainerConfigError(f"'{field}' must be a non-empty string.")
    return value


def _require_authors(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(
        isinstance(item, str) and item.strip() for item in value
    ):
        raise TrainerConfigError(
            "'credits.authors' must be a list of non-empty strings."
        )
    return tuple(item.strip() for item in value)
