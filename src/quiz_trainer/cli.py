"""Command-line entry point for the quiz trainer."""

from __future__ import annotations

import argparse
import asyncio
import os
import random
import sys
from importlib import metadata
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

from rich.console import Console

from . import config as config_mod
from .commands import CommandContext
from .core.logging import configure_logger
from .core import workspace as workspace_mod
from .prompter import Prompter
from .repl import run_repl
from .store import JsonlQuizStore

DIST_NAME = "quiz-trainer"
LOGGER_NAME = "quiz_trainer"

_SUBCOMMANDS = ("run", "init", "config", "version")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quiz-trainer",
        description=(
            "Interactive question/answer trainer. Runs the quiz shell when "
            "no subcommand is given."
        ),
    )
    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Print the installed version and exit.",
    )
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser(
        "run",
        help="Start the interactive quiz shell.",
    )
    run_parser.add_argument(
        "--config",
        type=Path,
        help="Path to quiz_trainer.toml (overrides QUIZ_TRAINER_CONFIG).",
    )
    run_parser.add_argument(
        "--store",
        type=Path,
        help="JSON-lines quiz store to use instead of the configured one.",
    )
    run_parser.add_argument(
        "--seed",
        type=int,
        help="Seed for the random question order of 'play'.",
    )
    run_parser.add_argument(
        "--no-seed-defaults",
        dest="seed_defaults",
        action="store_false",
        default=None,
        help="Start a missing store empty instead of with sample quizzes.",
    )
    run_parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Mirror log records to stderr.",
    )

    init_parser = subparsers.add_parser(
        "init",
        help="Create the workspace and write the config template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help="Where to write the config (defaults to the workspace).",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config file.",
    )

    config_parser = subparsers.add_parser(
        "config",
        help="Inspect the trainer configuration.",
    )
    config_sub = config_parser.add_subparsers(
        dest="config_command", required=True
    )
    path_parser = config_sub.add_parser(
        "path",
        help="Print the config path the trainer would read.",
    )
    path_parser.add_argument("--config", type=Path)

    subparsers.add_parser("version", help="Print the installed version.")
    return parser


def _build_prompter() -> Prompter:
    return Prompter(Console(), Console(stderr=True))


def _handle_run(args: argparse.Namespace) -> int:
    overrides = config_mod.ConfigOverrides(
        store_path=args.store,
        seed_defaults=args.seed_defaults,
        seed=args.seed,
        verbose=args.verbose,
    )
    try:
        loaded = config_mod.load_config(
            config_path=args.config, overrides=overrides
        )
    except config_mod.TrainerConfigError as exc:
        _print_error(f"Error: {exc}")
        return 2

    cfg = loaded.config
    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=loaded.layout.path_for("logs"),
        level=cfg.logging.level,
        verbose=cfg.logging.verbose,
    )
    logger.info(
        "Starting quiz shell",
        extra={
            "event": "startup",
            "store": cfg.store.path,
            "config": loaded.config_path,
            "log_file": log_path,
        },
    )

    ctx = CommandContext(
        prompter=_build_prompter(),
        store=JsonlQuizStore(
            cfg.store.path, seed_defaults=cfg.store.seed_defaults
        ),
        rng=random.Random(cfg.play.seed),
        credits=cfg.credits,
    )
    try:
        asyncio.run(run_repl(ctx, cfg.prompt.text))
    except KeyboardInterrupt:
        ctx.prompter.write()
    logger.info("Quiz shell closed", extra={"event": "shutdown"})
    return 0


def _handle_init(args: argparse.Namespace) -> int:
    try:
        layout = workspace_mod.ensure_workspace()
    except workspace_mod.WorkspaceError as exc:
        _print_error(f"Error: {exc}")
        return 2
    target = args.path or (
        layout.path_for("config") / config_mod.CONFIG_FILENAME
    )
    try:
        written = config_mod.write_template(target, overwrite=args.force)
    except config_mod.TrainerConfigError as exc:
        _print_error(f"Error: {exc}")
        return 2
    print(f"Workspace ready at {layout.home}")
    print(f"Wrote config template -> {written}")
    return 0


def _handle_config(args: argparse.Namespace) -> int:
    try:
        layout = workspace_mod.ensure_workspace(create=False)
    except workspace_mod.WorkspaceError as exc:
        _print_error(f"Error: {exc}")
        return 2
    path = config_mod.resolve_config_path(
        config_path=args.config, env=os.environ, layout=layout
    )
    status = "exists" if path.exists() else "missing"
    print(f"{path} ({status})")
    return 0


def _handle_version(args: Optional[argparse.Namespace] = None) -> int:
    try:
        version = metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        version = "unknown"
    print(version)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args_list = list(argv if argv is not None else sys.argv[1:])
    if not args_list or (
        args_list[0] not in _SUBCOMMANDS
        and args_list[0] not in ("-h", "--help", "-V", "--version")
    ):
        args_list = ["run", *args_list]

    parser = _build_parser()
    try:
        args = parser.parse_args(args_list)
    except SystemExit as exc:
        return int(exc.code or 0)

    if args.version:
        return _handle_version()

    handlers: Mapping[str, Callable[[argparse.Namespace], int]] = {
        "run": _handle_run,
        "init": _handle_init,
        "config": _handle_config,
        "version": _handle_version,
    }
    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 2
    return handler(args)


def _print_error(message: str) -> None:
    sys.stderr.write(message + "\n")


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
