"""Command-line interface for ``quizzr generate``."""

from __future__ import annotations

import argparse
import json
import random
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from rich.console import Console

from quizzr.core import ai as ai_mod
from quizzr.core import workspace as workspace_mod
from quizzr.core.config import (
    DIFFICULTIES,
    EXPORT_FORMATS,
    ConfigError,
    load_config,
)
from quizzr.core.logging import configure_logger
from quizzr.errors import ValidationError
from quizzr.export.formats import write_exports
from quizzr.export.summary import render_failure, render_quiz_summary

from .models import GenerationFailure
from .pipeline import PipelineSettings, generate_quiz
from .schema import validate_request
from .shuffle import shuffle_choices


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quizzr generate",
        description=(
            "Generate a multiple-choice quiz on TOPIC with a language model "
            "and export it."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("TOPIC", help="Quiz topic (at least 2 characters)")
    parser.add_argument(
        "-n",
        "--num-questions",
        type=int,
        help="Number of questions (1-25); defaults to the config value",
    )
    parser.add_argument(
        "-d",
        "--difficulty",
        choices=DIFFICULTIES,
        help="Question difficulty; defaults to the config value",
    )
    parser.add_argument(
        "--source",
        type=Path,
        help="Text file whose content the questions must be drawn from",
    )
    parser.add_argument(
        "--format",
        dest="formats",
        nargs="+",
        choices=EXPORT_FORMATS,
        help="Export formats to write; defaults to [export].formats",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        help="Directory for exports (defaults to the workspace exports dir)",
    )
    parser.add_argument(
        "--shuffle",
        action="store_true",
        help="Shuffle answer choices before exporting",
    )
    parser.add_argument(
        "--seed", type=int, help="Random seed used with --shuffle"
    )
    parser.add_argument(
        "--json",
        dest="print_json",
        action="store_true",
        help="Print the {mode, quiz} or {error, hint, preview} object to stdout",
    )
    parser.add_argument("--config", type=Path, help="Path to quizzr.toml")
    parser.add_argument(
        "--workspace", type=Path, help="Workspace root override"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Mirror debug logs to stderr",
    )
    return parser


def _read_source(path: Optional[Path]) -> Optional[str]:
    if path is None:
        return None
    with path.expanduser().open("r", encoding="utf-8", errors="replace") as fh:
        return fh.read()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    console = Console(stderr=args.print_json)

    try:
        cfg = load_config(explicit_path=args.config)
        layout = workspace_mod.ensure_workspace(path=args.workspace)
    except (ConfigError, workspace_mod.WorkspaceError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2

    logger, log_path = configure_logger(
        "quizzr",
        log_dir=layout.path_for("logs"),
        level=cfg.logging.level,
        verbose=args.verbose or cfg.logging.verbose,
    )

    try:
        payload: Dict[str, Any] = {
            "topic": args.TOPIC,
            "numQuestions": args.num_questions,
            "difficulty": args.difficulty,
            "source": _read_source(args.source),
        }
        request = validate_request(
            payload,
            default_num_questions=cfg.generation.num_questions,
            default_difficulty=cfg.generation.difficulty,
        )
    except (OSError, ValidationError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2

    try:
        complete = ai_mod.completer_from_config(cfg.llm)
    except RuntimeError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2

    logger.info(
        "generation requested",
        extra={
            "topic": request.topic,
            "requested": request.num_questions,
            "difficulty": request.difficulty,
            "has_source": request.source is not None,
        },
    )
    with console.status("Generating quiz..."):
        outcome = generate_quiz(
            request,
            complete=complete,
            settings=PipelineSettings.from_config(cfg.generation),
        )

    if isinstance(outcome, GenerationFailure):
        render_failure(console, outcome)
        if args.print_json:
            sys.stdout.write(json.dumps(outcome.to_dict(), indent=2) + "\n")
        sys.stderr.write(f"See {log_path} for stage details.\n")
        return 1

    quiz = outcome.quiz
    if args.shuffle:
        quiz = shuffle_choices(quiz, random.Random(args.seed))

    out_dir = (
        args.out_dir
        or cfg.export.out_dir
        or layout.path_for("exports")
    ).expanduser()
    try:
        written = write_exports(quiz, out_dir, args.formats or cfg.export.formats)
    except OSError as exc:
        sys.stderr.write(f"Failed to write exports: {exc}\n")
        return 1

    render_quiz_summary(console, quiz, mode=outcome.mode, written=written)
    if args.print_json:
        body = {"mode": outcome.mode, "quiz": quiz.to_dict()}
        sys.stdout.write(json.dumps(body, indent=2, ensure_ascii=False) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
