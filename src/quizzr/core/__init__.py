"""Core shared helpers for quizzr commands."""

from __future__ import annotations

from .ai import Completer, build_completer, completer_from_config, load_client
from .config import (
    ConfigError,
    QuizzrConfig,
    load_config,
    write_template,
)
from .logging import JsonLogFormatter, clip_for_log, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "Completer",
    "build_completer",
    "completer_from_config",
    "load_client",
    "ConfigError",
    "QuizzrConfig",
    "load_config",
    "write_template",
    "JsonLogFormatter",
    "clip_for_log",
    "configure_logger",
    "WORKSPACE_ENV",
    "WorkspaceError",
    "WorkspaceLayout",
    "ensure_workspace",
]
