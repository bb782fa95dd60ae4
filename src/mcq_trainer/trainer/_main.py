"""Command-line entry points for practice sessions."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from mcq_trainer.core import config_templates
from mcq_trainer.core import workspace as workspace_mod
from mcq_trainer.core.config_templates import ConfigTemplateError
from mcq_trainer.core.logging import configure_logger
from mcq_trainer.core.workspace import WorkspaceError

from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    LoadResult,
    TrainerConfigError,
    load_config,
)
from .engine import TrainerEngine
from .loader import load_corpus
from .session import render_stats, run_trainer_session
from .view import TrainerApp


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to trainer.toml (defaults to the workspace config dir).",
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the data home used for config and log files.",
    )
    parser.add_argument(
        "--source",
        dest="sources",
        action="append",
        type=Path,
        metavar="CSV",
        help="Question CSV to load; repeat for several files.",
    )
    parser.add_argument("--search", help="Only questions containing TEXT.")
    parser.add_argument("--topic", help="Exact topic to practise, or 'all'.")
    parser.add_argument(
        "--difficulty", help="Exact difficulty to practise, or 'all'."
    )
    parser.add_argument(
        "--pool-size", type=int, help="Number of questions per session."
    )
    parser.add_argument(
        "--shuffle", dest="shuffle", action="store_true", default=None
    )
    parser.add_argument("--no-shuffle", dest="shuffle", action="store_false")
    parser.add_argument(
        "--exclude-answered",
        dest="exclude_answered",
        action="store_true",
        default=None,
    )
    parser.add_argument(
        "--include-answered", dest="exclude_answered", action="store_false"
    )
    parser.add_argument("--log-level", help="Log file level (default INFO).")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror log output to stderr.",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mcq-trainer",
        description="Practise multiple-choice questions from CSV banks",
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_start = sub.add_parser("start", help="Practise in the console")
    _add_common_arguments(sp_start)
    sp_tui = sub.add_parser("tui", help="Practise in a full-screen TUI")
    _add_common_arguments(sp_tui)
    sp_stats = sub.add_parser("stats", help="Summarize the loaded questions")
    _add_common_arguments(sp_stats)

    sp_config = sub.add_parser("config", help="Manage trainer.toml")
    config_sub = sp_config.add_subparsers(dest="action", required=True)
    sp_init = config_sub.add_parser("init", help="Write the default template")
    sp_init.add_argument("--path", type=Path)
    sp_init.add_argument("--workspace", type=Path)
    sp_init.add_argument("--force", action="store_true")
    return p


def _overrides_from_args(args: argparse.Namespace) -> ConfigOverrides:
    return ConfigOverrides(
        sources=args.sources,
        search_text=args.search,
        topic_filter=args.topic,
        difficulty_filter=args.difficulty,
        pool_size=args.pool_size,
        shuffle=args.shuffle,
        exclude_answered=args.exclude_answered,
        log_level=args.log_level,
    )


def prepare_engine(
    load_result: LoadResult, logger: logging.Logger
) -> TrainerEngine:
    """Create an engine and fill it from the configured sources."""

    config = load_result.config
    engine = TrainerEngine(config=config.session, logger=logger)
    ticket = engine.begin_load()
    result = load_corpus(
        config.sources,
        max_workers=config.max_workers,
        logger=logger,
    )
    engine.apply_load(ticket, result)
    return engine


def _cmd_session(
    args: argparse.Namespace, parser: argparse.ArgumentParser
) -> int:
    try:
        load_result = load_config(
            config_path=args.config,
            overrides=_overrides_from_args(args),
            workspace_path=args.workspace,
        )
    except TrainerConfigError as exc:
        parser.error(str(exc))

    if not load_result.config.sources:
        print(
            "Error: no question sources configured. Pass --source or run "
            "'mcq-trainer config init'."
        )
        return 2

    logger, log_path = configure_logger(
        "mcq_trainer.trainer",
        log_dir=load_result.layout.path_for("logs"),
        level=load_result.config.log_level,
        verbose=bool(args.verbose),
    )
    logger.debug("mcq-trainer CLI invoked", extra={"command": args.command})

    engine = prepare_engine(load_result, logger)
    snapshot = engine.snapshot()
    if not snapshot.corpus_size:
        for message in snapshot.load_errors:
            print(f"Error: {message}")
        print("No questions loaded.")
        return 1

    console = Console()
    if args.command == "stats":
        for message in snapshot.load_errors:
            console.print(f"[red]{message}[/]")
        render_stats(console, snapshot)
        console.print(f"[dim]Log file: {log_path}[/]")
        return 0
    if args.command == "tui":
        TrainerApp(engine).run()
        return 0

    try:
        run_trainer_session(engine, console, lambda: console.input("> "))
    finally:
        engine.close()
    return 0


def _cmd_config_init(args: argparse.Namespace) -> int:
    try:
        if args.path is not None:
            target = args.path.expanduser()
            if not target.is_absolute():
                target = (Path.cwd() / target).resolve()
        else:
            layout = workspace_mod.ensure_workspace(path=args.workspace)
            target = layout.path_for("config") / CONFIG_FILENAME
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    template = config_templates.get_template("trainer")
    try:
        written = template.write(target, overwrite=args.force)
    except ConfigTemplateError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1
    print(f"Wrote trainer config to {written}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.command == "config":
        return _cmd_config_init(args)
    return _cmd_session(args, parser)
