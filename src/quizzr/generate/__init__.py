"""Quiz generation: prompts, lenient parsing, validation and the pipeline."""

from __future__ import annotations

from .models import (
    Choice,
    GenerationFailure,
    GenerationRequest,
    GenerationResult,
    Question,
    Quiz,
    QuizMetadata,
)
from .pipeline import PipelineSettings, generate_quiz, run_generation
from .schema import validate_quiz, validate_request
from .shuffle import shuffle_choices
from .template import parse_plain_template

__all__ = [
    "Choice",
    "GenerationFailure",
    "GenerationRequest",
    "GenerationResult",
    "PipelineSettings",
    "Question",
    "Quiz",
    "QuizMetadata",
    "generate_quiz",
    "parse_plain_template",
    "run_generation",
    "shuffle_choices",
    "validate_quiz",
    "validate_request",
]
