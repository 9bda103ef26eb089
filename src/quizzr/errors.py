"""Error kinds raised by the quiz generation pipeline."""

from __future__ import annotations

__all__ = [
    "QuizGenerationError",
    "ValidationError",
    "ParseError",
    "NoQuestionsParsedError",
    "UpstreamError",
]


class QuizGenerationError(RuntimeError):
    """Base class for pipeline failures."""


class ValidationError(QuizGenerationError, ValueError):
    """A value does not conform to the quiz or request schema.

    ``path`` names the first offending field, e.g. ``questions[1].choices``.
    """

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.reason = message
        super().__init__(f"{path}: {message}" if path else message)


class ParseError(QuizGenerationError, ValueError):
    """Model text is not valid structured data even after repair."""


class NoQuestionsParsedError(QuizGenerationError, ValueError):
    """The plain-template reply did not contain one complete question."""


class UpstreamError(QuizGenerationError):
    """The completion endpoint was unreachable or returned an error."""
