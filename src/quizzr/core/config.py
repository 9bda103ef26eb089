"""TOML configuration for quizzr.

The config groups the model endpoint, pipeline budgets, export defaults and
logging. Values start from an in-module defaults tree, the user's TOML file
is merged on top (unknown keys are rejected), and the merged tree is
validated into frozen dataclasses.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional, Tuple

try:  # Python >= 3.11 ships ``tomllib`` in the stdlib.
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - should never happen
    raise RuntimeError("Python 3.11+ is required for tomllib support.") from exc

from . import workspace as workspace_mod

__all__ = [
    "CONFIG_FILENAME",
    "CONFIG_PATH_ENV",
    "ConfigError",
    "DIFFICULTIES",
    "EXPORT_FORMATS",
    "ExportConfig",
    "GenerationConfig",
    "LLMConfig",
    "LoggingConfig",
    "MAX_QUESTIONS",
    "QuizzrConfig",
    "config_template",
    "default_config_path",
    "default_tree",
    "load_config",
    "resolve_config_path",
    "write_template",
]


CONFIG_FILENAME = "quizzr.toml"
CONFIG_PATH_ENV = "QUIZZR_CONFIG"

DIFFICULTIES: Tuple[str, ...] = ("easy", "medium", "hard")
MAX_QUESTIONS = 25
EXPORT_FORMATS = ("json", "csv", "qti")


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class LLMConfig:
    base_url: Optional[str]
    model: str
    api_key_env: str
    max_tokens: int
    temperature: float
    stop: Tuple[str, ...]
    timeout_seconds: Optional[float]


@dataclass(frozen=True)
class GenerationConfig:
    num_questions: int
    difficulty: str
    source_max_chars: int
    previous_max_chars: int
    preview_max_chars: int


@dataclass(frozen=True)
class ExportConfig:
    formats: Tuple[str, ...]
    out_dir: Optional[Path]


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class QuizzrConfig:
    llm: LLMConfig
    generation: GenerationConfig
    export: ExportConfig
    logging: LoggingConfig


_DEFAULTS: Dict[str, Any] = {
    "llm": {
        "base_url": "http://localhost:8005/v1",
        "model": "local",
        "api_key_env": "QUIZZR_API_KEY",
        "max_tokens": 2400,
        "temperature": 0.0,
        "stop": ["###END_JSON###", "```", "END_PREVIOUS", "---\n\n"],
        "timeout_seconds": None,
    },
    "generation": {
        "num_questions": 8,
        "difficulty": "medium",
        "source_max_chars": 18000,
        "previous_max_chars": 6000,
        "preview_max_chars": 1200,
    },
    "export": {
        "formats": ["json"],
        "out_dir": None,
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}


def default_tree() -> Dict[str, Any]:
    """Return a copy of the default configuration tree."""

    return copy.deepcopy(_DEFAULTS)


def _merge_dict(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise ConfigError(f"Unknown configuration key '{dotted}'.")
        base_value = base[key]
        if isinstance(base_value, MutableMapping):
            if not isinstance(value, Mapping):
                raise ConfigError(
                    f"Expected table for '{dotted}', "
                    f"found {type(value).__name__}."
                )
            _merge_dict(base_value, value, path=f"{dotted}.")
        else:
            base[key] = value


def _require_positive_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"'{field}' must be a positive integer.")
    return value


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _require_choice(value: Any, *, field: str, choices: Tuple[str, ...]) -> str:
    text = _require_string(value, field=field).lower()
    if text not in choices:
        raise ConfigError(f"'{field}' must be one of {', '.join(choices)}.")
    return text


def _coerce_optional_string(value: Any, *, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{field}' must be a string when set.")
    return value.strip() or None


def _coerce_optional_seconds(value: Any, *, field: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{field}' must be a number when set.")
    if value <= 0:
        raise ConfigError(f"'{field}' must be greater than zero.")
    return float(value)


def _build_llm(section: Mapping[str, Any]) -> LLMConfig:
    temperature = section.get("temperature")
    if isinstance(temperature, bool) or not isinstance(
        temperature, (int, float)
    ):
        raise ConfigError("'llm.temperature' must be a number.")
    if not 0.0 <= float(temperature) <= 2.0:
        raise ConfigError("'llm.temperature' must be between 0.0 and 2.0.")
    stop = section.get("stop")
    if not isinstance(stop, list) or not all(
        isinstance(item, str) and item for item in stop
    ):
        raise ConfigError("'llm.stop' must be a list of non-empty strings.")
    return LLMConfig(
        base_url=_coerce_optional_string(
            section.get("base_url"), field="llm.base_url"
        ),
        model=_require_string(section.get("model"), field="llm.model"),
        api_key_env=_require_string(
            section.get("api_key_env"), field="llm.api_key_env"
        ),
        max_tokens=_require_positive_int(
            section.get("max_tokens"), field="llm.max_tokens"
        ),
        temperature=float(temperature),
        stop=tuple(stop),
        timeout_seconds=_coerce_optional_seconds(
            section.get("timeout_seconds"), field="llm.timeout_seconds"
        ),
    )


def _build_generation(section: Mapping[str, Any]) -> GenerationConfig:
    num_questions = _require_positive_int(
        section.get("num_questions"), field="generation.num_questions"
    )
    if num_questions > MAX_QUESTIONS:
        raise ConfigError(
            f"'generation.num_questions' must be at most {MAX_QUESTIONS}."
        )
    return GenerationConfig(
        num_questions=num_questions,
        difficulty=_require_choice(
            section.get("difficulty"),
            field="generation.difficulty",
            choices=DIFFICULTIES,
        ),
        source_max_chars=_require_positive_int(
            section.get("source_max_chars"),
            field="generation.source_max_chars",
        ),
        previous_max_chars=_require_positive_int(
            section.get("previous_max_chars"),
            field="generation.previous_max_chars",
        ),
        preview_max_chars=_require_positive_int(
            section.get("preview_max_chars"),
            field="generation.preview_max_chars",
        ),
    )


def _build_export(section: Mapping[str, Any]) -> ExportConfig:
    formats = section.get("formats")
    if not isinstance(formats, list) or not formats:
        raise ConfigError("'export.formats' must be a non-empty list.")
    normalized = tuple(
        _require_choice(item, field="export.formats", choices=EXPORT_FORMATS)
        for item in formats
    )
    out_dir = _coerce_optional_string(
        section.get("out_dir"), field="export.out_dir"
    )
    return ExportConfig(
        formats=normalized,
        out_dir=Path(out_dir).expanduser() if out_dir else None,
    )


def _build_logging(section: Mapping[str, Any]) -> LoggingConfig:
    level = _require_choice(
        section.get("level"),
        field="logging.level",
        choices=("debug", "info", "warning", "error", "critical"),
    ).upper()
    verbose = _require_bool(section.get("verbose"), field="logging.verbose")
    return LoggingConfig(level=level, verbose=verbose)


def _build_config(tree: Mapping[str, Any]) -> QuizzrConfig:
    return QuizzrConfig(
        llm=_build_llm(tree["llm"]),
        generation=_build_generation(tree["generation"]),
        export=_build_export(tree["export"]),
        logging=_build_logging(tree["logging"]),
    )


def _load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config TOML: {exc}") from exc


def resolve_config_path(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> Optional[Path]:
    """Return the config file to read, or ``None`` to use defaults.

    An explicit path or ``QUIZZR_CONFIG`` must exist; the workspace copy is
    optional.
    """

    env_map = os.environ if env is None else env
    if explicit_path is not None:
        return explicit_path.expanduser().resolve()
    override = (env_map.get(CONFIG_PATH_ENV) or "").strip()
    if override:
        return Path(override).expanduser().resolve()
    try:
        layout = workspace_mod.ensure_workspace(env=env_map, create=False)
    except workspace_mod.WorkspaceError:
        return None
    candidate = layout.path_for("config") / CONFIG_FILENAME
    return candidate if candidate.exists() else None


def default_config_path(*, env: Mapping[str, str] | None = None) -> Path:
    """Workspace location for ``quizzr.toml``, creating the workspace."""

    try:
        layout = workspace_mod.ensure_workspace(env=env)
    except workspace_mod.WorkspaceError as exc:
        raise ConfigError(str(exc)) from exc
    return layout.path_for("config") / CONFIG_FILENAME


def load_config(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
) -> QuizzrConfig:
    """Load the TOML config, applying defaults and validation."""

    tree = default_tree()
    path = resolve_config_path(explicit_path=explicit_path, env=env)
    if path is not None:
        data = _load_toml(path)
        _merge_dict(tree, data)
    return _build_config(tree)


def config_template() -> str:
    """Return the commented TOML template for new installs."""

    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(
    path: Path, *, overwrite: bool = False, mode: int = 0o600
) -> Path:
    """Write the default template to ``path``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path}")
    with path.open("w", encoding="utf-8") as handle:
        handle.write(config_template())
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


_CONFIG_TEMPLATE = """
# quizzr configuration

[llm]
# Base URL of an OpenAI-compatible completions server (/v1/completions).
base_url = "http://localhost:8005/v1"
model = "local"
# Environment variable holding the API key. Local servers usually accept any
# value, so the key may be left unset when base_url points at one.
api_key_env = "QUIZZR_API_KEY"
max_tokens = 2400
temperature = 0.0
stop = ["###END_JSON###", "```", "END_PREVIOUS", "---\\n\\n"]
# Client-side timeout in seconds; unset waits for the server indefinitely.
# timeout_seconds = 120

[generation]
num_questions = 8
# easy | medium | hard
difficulty = "medium"
# Source text is truncated to this many characters before prompting.
source_max_chars = 18000
# The repair stage re-sends at most this much of the previous reply.
previous_max_chars = 6000
# Characters of raw model output included in failure previews.
preview_max_chars = 1200

[export]
# Any of: json, csv, qti
formats = ["json"]
# Defaults to the workspace exports directory when unset.
# out_dir = "./quizzes"

[logging]
level = "INFO"
verbose = false
"""
