"""Command-line interface for ``quizzr export``.

Re-exports a previously saved quiz (either a bare quiz object or a
``{"mode": ..., "quiz": ...}`` generation response) to other formats.
"""

from __future__ import annotations

import argparse
import json
import random
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from rich.console import Console

from quizzr.core import workspace as workspace_mod
from quizzr.core.config import EXPORT_FORMATS, ConfigError, load_config
from quizzr.errors import ValidationError
from quizzr.generate.models import Quiz
from quizzr.generate.schema import validate_quiz
from quizzr.generate.shuffle import shuffle_choices

from .formats import write_exports
from .summary import render_quiz_summary


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quizzr export",
        description="Export a saved quiz JSON file to JSON, CSV or QTI.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("QUIZ_JSON", type=Path, help="Saved quiz JSON file")
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
    parser.add_argument("--config", type=Path, help="Path to quizzr.toml")
    return parser


def load_quiz_file(path: Path) -> Quiz:
    """Read and validate a quiz document from ``path``."""

    with path.expanduser().open("r", encoding="utf-8") as fh:
        data: Any = json.load(fh)
    if isinstance(data, dict) and isinstance(data.get("quiz"), dict):
        data = data["quiz"]
    return validate_quiz(data)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        cfg = load_config(explicit_path=args.config)
    except ConfigError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2

    try:
        quiz = load_quiz_file(args.QUIZ_JSON)
    except FileNotFoundError:
        sys.stderr.write(f"Error: file not found: {args.QUIZ_JSON}\n")
        return 2
    except UnicodeDecodeError as exc:
        sys.stderr.write(f"Error: {args.QUIZ_JSON} is not UTF-8 text: {exc}\n")
        return 2
    except json.JSONDecodeError as exc:
        sys.stderr.write(f"Error: {args.QUIZ_JSON} is not valid JSON: {exc}\n")
        return 2
    except ValidationError as exc:
        sys.stderr.write(f"Error: invalid quiz: {exc}\n")
        return 2

    if args.shuffle:
        quiz = shuffle_choices(quiz, random.Random(args.seed))

    out_dir = args.out_dir or cfg.export.out_dir
    if out_dir is None:
        try:
            out_dir = workspace_mod.ensure_workspace().path_for("exports")
        except workspace_mod.WorkspaceError as exc:
            sys.stderr.write(f"Error: {exc}\n")
            return 2

    try:
        written = write_exports(
            quiz, out_dir.expanduser(), args.formats or cfg.export.formats
        )
    except OSError as exc:
        sys.stderr.write(f"Failed to write exports: {exc}\n")
        return 1

    render_quiz_summary(Console(), quiz, written=written)
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
