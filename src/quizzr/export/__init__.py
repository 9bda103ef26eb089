"""Quiz exporters and console summaries."""

from __future__ import annotations

from .formats import (
    export_basename,
    quiz_to_csv,
    quiz_to_json,
    quiz_to_qti_zip,
    write_exports,
)

__all__ = [
    "export_basename",
    "quiz_to_csv",
    "quiz_to_json",
    "quiz_to_qti_zip",
    "write_exports",
]
