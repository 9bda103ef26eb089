"""CLI entry point for ``quizzr init``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, Sequence

from quizzr.core import config as config_mod
from quizzr.core import workspace as workspace_mod


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quizzr init",
        description=(
            "Bootstrap the quizzr workspace (config, logs and exports "
            "directories) and write a starter config when none exists."
        ),
    )
    parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Override the workspace root (defaults to QUIZZR_DATA_HOME "
            "or ~/.quizzr-data)."
        ),
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        help="Skip writing config/quizzr.toml.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational output on success.",
    )
    return parser


def _format_created(created: Mapping[str, bool], key: str) -> str:
    return "created" if created.get(key, False) else "exists"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        layout = workspace_mod.ensure_workspace(path=args.path)
    except workspace_mod.WorkspaceError as exc:
        sys.stderr.write(f"{exc}\n")
        return 2

    config_line = None
    if not args.no_config:
        target = layout.path_for("config") / config_mod.CONFIG_FILENAME
        if target.exists():
            config_line = f"Config: {target} (exists)"
        else:
            config_mod.write_template(target)
            config_line = f"Config: {target} (created)"

    if args.quiet:
        return 0

    created = layout.created
    home_status = _format_created(created, "home")
    lines = [f"Workspace ready at {layout.home} ({home_status})"]

    if layout.directories:
        lines.append("Subdirectories:")
        width = max(len(name) for name in layout.directories)
        for name, directory in layout.items():
            status = _format_created(created, name)
            lines.append(f"  {name.ljust(width)}  {directory} ({status})")
    if config_line:
        lines.append(config_line)

    sys.stdout.write("\n".join(lines) + "\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
