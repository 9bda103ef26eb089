"""Command-line entry points for quizzr configuration files."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from quizzr.core import config as config_mod


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quizzr config",
        description="Manage the quizzr configuration file.",
    )
    subparsers = parser.add_subparsers(dest="config_command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Write the default configuration template.",
    )
    init_parser.add_argument(
        "--path",
        type=str,
        help="Destination for the config TOML (defaults to the workspace).",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing config file if present.",
    )

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate the active configuration file.",
    )
    validate_parser.add_argument(
        "--path",
        type=str,
        help="Path to the config TOML (defaults to the resolved config).",
    )
    validate_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress success output; errors still print to stderr.",
    )

    subparsers.add_parser(
        "path",
        help="Print the config file that would be loaded.",
    )
    return parser


def _to_path(value: str | None) -> Path | None:
    if value is None:
        return None
    return Path(value).expanduser().resolve()


def _handle_init(args: argparse.Namespace) -> int:
    try:
        target = _to_path(args.path) or config_mod.default_config_path()
        config_mod.write_template(target, overwrite=args.force)
    except config_mod.ConfigError as exc:
        _print_error(str(exc))
        return 2
    print(f"Wrote config template to {target}")
    return 0


def _handle_validate(args: argparse.Namespace) -> int:
    try:
        cfg = config_mod.load_config(explicit_path=_to_path(args.path))
    except config_mod.ConfigError as exc:
        _print_error(str(exc))
        return 2
    if not args.quiet:
        print("Configuration OK")
        print(f"  base_url: {cfg.llm.base_url}")
        print(f"  model: {cfg.llm.model}")
        print(f"  num_questions: {cfg.generation.num_questions}")
        print(f"  difficulty: {cfg.generation.difficulty}")
        print(f"  formats: {', '.join(cfg.export.formats)}")
    return 0


def _handle_path(_args: argparse.Namespace) -> int:
    path = config_mod.resolve_config_path()
    if path is None:
        print("(defaults; no config file found)")
    else:
        print(path)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    handlers = {
        "init": _handle_init,
        "validate": _handle_validate,
        "path": _handle_path,
    }
    return handlers[args.config_command](args)


def _print_error(message: str) -> None:
    sys.stderr.write(message + "\n")


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
