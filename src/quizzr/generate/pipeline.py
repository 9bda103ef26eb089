"""Three-stage quiz generation with escalating recovery strategies.

Stages run in order and each one is attempted at most once:

``json``
    strict JSON prompt, then extract, repair, parse and validate.
``json-fixed``
    ask the model to turn its previous reply into valid JSON, same recovery.
``plain-template``
    line-oriented prompt parsed by :func:`parse_plain_template`.

Any stage failure (model call, parse or validation) escalates to the next
stage. When all three fail the caller receives a
:class:`~quizzr.generate.models.GenerationFailure` rather than an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Union

from quizzr.core.ai import Completer
from quizzr.core.config import GenerationConfig
from quizzr.core.logging import clip_for_log
from quizzr.errors import QuizGenerationError, UpstreamError

from .extract import (
    extract_payload,
    parse_json_payload,
    repair_template_text,
    unwrap_completion_envelope,
)
from .models import GenerationFailure, GenerationRequest, GenerationResult, Quiz
from .prompts import (
    DEFAULT_PREVIOUS_MAX_CHARS,
    DEFAULT_SOURCE_MAX_CHARS,
    build_json_prompt,
    build_plain_template_prompt,
    build_repair_prompt,
)
from .schema import validate_quiz, validate_request
from .template import parse_plain_template

__all__ = [
    "FAILURE_ERROR",
    "FAILURE_HINT",
    "GenerationOutcome",
    "PipelineSettings",
    "generate_quiz",
    "parse_json_quiz",
    "parse_template_quiz",
    "run_generation",
]

log = logging.getLogger(__name__)

GenerationOutcome = Union[GenerationResult, GenerationFailure]

FAILURE_ERROR = (
    "LLM returned content that could not be parsed as JSON or the plain "
    "template."
)
FAILURE_HINT = (
    "Check the quizzr log for the raw and parsed content. Try fewer "
    "questions, a shorter source, or a different model."
)


@dataclass(frozen=True)
class PipelineSettings:
    """Character budgets applied while prompting and reporting."""

    source_max_chars: int = DEFAULT_SOURCE_MAX_CHARS
    previous_max_chars: int = DEFAULT_PREVIOUS_MAX_CHARS
    preview_max_chars: int = 1200

    @classmethod
    def from_config(cls, generation: GenerationConfig) -> "PipelineSettings":
        return cls(
            source_max_chars=generation.source_max_chars,
            previous_max_chars=generation.previous_max_chars,
            preview_max_chars=generation.preview_max_chars,
        )


def parse_json_quiz(text: str) -> Quiz:
    """Extract, repair, parse and validate a JSON-stage reply."""

    payload = extract_payload(text)
    log.debug(
        "json payload extracted",
        extra={"content_chars": len(text or ""), "payload_chars": len(payload)},
    )
    return validate_quiz(parse_json_payload(payload))


def parse_template_quiz(request: GenerationRequest, text: str) -> Quiz:
    """Recover a quiz from a plain-template reply."""

    cleaned = repair_template_text(unwrap_completion_envelope(text))
    return parse_plain_template(
        request.topic, request.difficulty, request.num_questions, cleaned
    )


def _call_model(complete: Completer, prompt: str) -> str:
    try:
        raw = complete(prompt)
    except UpstreamError:
        raise
    except Exception as exc:
        raise UpstreamError(f"Completion call failed: {exc}") from exc
    return unwrap_completion_envelope(raw)


def _log_stage_failure(mode: str, exc: Exception, text: str) -> None:
    log.warning(
        "stage %s failed: %s",
        mode,
        exc,
        extra={
            "stage": mode,
            "error_kind": type(exc).__name__,
            "content_chars": len(text),
            "content_head": clip_for_log(text),
        },
    )


def _check_question_count(
    mode: str, quiz: Quiz, request: GenerationRequest
) -> None:
    declared = quiz.metadata.num_questions
    actual = len(quiz.questions)
    if declared != actual or actual != request.num_questions:
        log.warning(
            "question count mismatch",
            extra={
                "stage": mode,
                "requested": request.num_questions,
                "declared": declared,
                "actual": actual,
            },
        )


def generate_quiz(
    request: GenerationRequest,
    *,
    complete: Completer,
    settings: Optional[PipelineSettings] = None,
) -> GenerationOutcome:
    """Run the escalation pipeline for one validated request.

    ``complete`` maps a prompt to the raw completion response (envelope or
    plain text). Calls are strictly sequential: at most three of them, each
    issued only after the previous stage failed.
    """

    opts = settings or PipelineSettings()

    def json_prompt(_previous: str) -> str:
        return build_json_prompt(
            request.topic,
            request.difficulty,
            request.num_questions,
            request.source,
            source_max_chars=opts.source_max_chars,
        )

    def repair_prompt(previous: str) -> str:
        return build_repair_prompt(
            previous, previous_max_chars=opts.previous_max_chars
        )

    def template_prompt(_previous: str) -> str:
        return build_plain_template_prompt(
            request.topic,
            request.difficulty,
            request.num_questions,
            request.source,
            source_max_chars=opts.source_max_chars,
        )

    stages: Sequence[
        Tuple[str, Callable[[str], str], Callable[[str], Quiz]]
    ] = (
        ("json", json_prompt, parse_json_quiz),
        ("json-fixed", repair_prompt, parse_json_quiz),
        (
            "plain-template",
            template_prompt,
            lambda text: parse_template_quiz(request, text),
        ),
    )

    previous = ""
    latest_seen = ""
    for mode, build_prompt, parse in stages:
        prompt = build_prompt(previous)
        log.info(
            "stage %s started",
            mode,
            extra={"stage": mode, "prompt_chars": len(prompt)},
        )
        try:
            text = _call_model(complete, prompt)
        except UpstreamError as exc:
            _log_stage_failure(mode, exc, "")
            previous = ""
            continue

        previous = text
        if text:
            latest_seen = text
        try:
            quiz = parse(text)
        except QuizGenerationError as exc:
            _log_stage_failure(mode, exc, text)
            continue

        _check_question_count(mode, quiz, request)
        log.info(
            "quiz generated",
            extra={"stage": mode, "questions": len(quiz.questions)},
        )
        return GenerationResult(mode=mode, quiz=quiz)  # type: ignore[arg-type]

    log.error(
        "all generation stages failed",
        extra={"topic": request.topic, "content_head": clip_for_log(latest_seen)},
    )
    return GenerationFailure(
        error=FAILURE_ERROR,
        hint=FAILURE_HINT,
        preview=latest_seen[: opts.preview_max_chars],
    )


def run_generation(
    payload: Mapping[str, Any],
    *,
    complete: Completer,
    settings: Optional[PipelineSettings] = None,
    default_num_questions: int = 8,
    default_difficulty: str = "medium",
) -> GenerationOutcome:
    """Validate an inbound request payload, then run :func:`generate_quiz`.

    Invalid input raises ``ValidationError`` before any model call.
    """

    request = validate_request(
        payload,
        default_num_questions=default_num_questions,
        default_difficulty=default_difficulty,
    )
    return generate_quiz(request, complete=complete, settings=settings)
