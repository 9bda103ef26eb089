"""Structural validation for quizzes and generation requests.

This module is the trust boundary between text a model produced and data the
rest of quizzr renders or exports. Every check raises
:class:`~quizzr.errors.ValidationError` naming the first offending field.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

from quizzr.core.config import DIFFICULTIES, MAX_QUESTIONS
from quizzr.errors import ValidationError

from .models import (
    LETTERS,
    QUESTION_TYPE,
    Choice,
    GenerationRequest,
    Question,
    Quiz,
    QuizMetadata,
)

__all__ = ["validate_quiz", "validate_request"]

MIN_PROMPT_LENGTH = 3
MIN_TOPIC_LENGTH = 2
MAX_SOURCE_LENGTH = 20000


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _require_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError(path, f"expected object, got {_type_name(value)}")
    return value


def _require_field(data: Mapping[str, Any], key: str, path: str) -> Any:
    if key not in data or data[key] is None:
        raise ValidationError(_join(path, key), "required field is missing")
    return data[key]


def _require_text(
    data: Mapping[str, Any], key: str, path: str, *, min_length: int = 1
) -> str:
    value = _require_field(data, key, path)
    if not isinstance(value, str):
        raise ValidationError(
            _join(path, key), f"expected string, got {_type_name(value)}"
        )
    if len(value.strip()) < min_length:
        raise ValidationError(
            _join(path, key),
            f"must contain at least {min_length} character(s)",
        )
    return value


def _require_enum(
    data: Mapping[str, Any], key: str, path: str, allowed: Sequence[str]
) -> str:
    value = _require_field(data, key, path)
    if not isinstance(value, str) or value not in allowed:
        raise ValidationError(
            _join(path, key),
            f"expected one of {', '.join(allowed)}, got {value!r}",
        )
    return value


def _require_int(
    data: Mapping[str, Any],
    key: str,
    path: str,
    *,
    minimum: int,
    maximum: int,
) -> int:
    value = _require_field(data, key, path)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(
            _join(path, key), f"expected integer, got {_type_name(value)}"
        )
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(_join(path, key), "expected integer")
        value = int(value)
    if not minimum <= value <= maximum:
        raise ValidationError(
            _join(path, key), f"must be between {minimum} and {maximum}"
        )
    return value


def _require_list(
    data: Mapping[str, Any], key: str, path: str
) -> Sequence[Any]:
    value = _require_field(data, key, path)
    if not isinstance(value, (list, tuple)):
        raise ValidationError(
            _join(path, key), f"expected array, got {_type_name(value)}"
        )
    return value


def _validate_choice(value: Any, path: str) -> Choice:
    data = _require_mapping(value, path)
    choice_id = _require_enum(data, "id", path, LETTERS)
    text = _require_text(data, "text", path)
    return Choice(id=choice_id, text=text)


def _validate_question(value: Any, path: str) -> Question:
    data = _require_mapping(value, path)
    question_id = _require_text(data, "id", path)
    _require_enum(data, "type", path, (QUESTION_TYPE,))
    prompt = _require_text(data, "prompt", path, min_length=MIN_PROMPT_LENGTH)

    raw_choices = _require_list(data, "choices", path)
    choices_path = _join(path, "choices")
    if len(raw_choices) != len(LETTERS):
        raise ValidationError(
            choices_path,
            f"expected exactly {len(LETTERS)} choices, got {len(raw_choices)}",
        )
    choices: List[Choice] = []
    for idx, raw in enumerate(raw_choices):
        choice = _validate_choice(raw, f"{choices_path}[{idx}]")
        if any(existing.id == choice.id for existing in choices):
            raise ValidationError(
                f"{choices_path}[{idx}].id",
                f"duplicate choice id '{choice.id}'",
            )
        choices.append(choice)

    correct = _require_enum(data, "correctChoiceId", path, LETTERS)

    explanation = data.get("explanation")
    if explanation is not None and not isinstance(explanation, str):
        raise ValidationError(
            _join(path, "explanation"),
            f"expected string, got {_type_name(explanation)}",
        )

    return Question(
        id=question_id,
        prompt=prompt,
        choices=tuple(choices),
        correct_choice_id=correct,
        explanation=explanation,
    )


def _validate_metadata(value: Any, path: str) -> QuizMetadata:
    data = _require_mapping(value, path)
    return QuizMetadata(
        topic=_require_text(data, "topic", path),
        difficulty=_require_enum(data, "difficulty", path, DIFFICULTIES),
        num_questions=_require_int(
            data, "numQuestions", path, minimum=1, maximum=MAX_QUESTIONS
        ),
    )


def validate_quiz(value: Any) -> Quiz:
    """Return ``value`` as a :class:`Quiz` or raise ``ValidationError``.

    Accepts a parsed mapping or an existing ``Quiz`` (returned as-is once its
    contents check out). Unknown keys are ignored.
    """

    if isinstance(value, Quiz):
        validate_quiz(value.to_dict())
        return value

    data = _require_mapping(value, "")
    title = _require_text(data, "title", "")
    description = _require_text(data, "description", "")
    metadata = _validate_metadata(
        _require_field(data, "metadata", ""), "metadata"
    )

    raw_questions = _require_list(data, "questions", "")
    if not raw_questions:
        raise ValidationError("questions", "at least one question is required")

    questions: List[Question] = []
    seen: set[str] = set()
    for idx, raw in enumerate(raw_questions):
        question = _validate_question(raw, f"questions[{idx}]")
        if question.id in seen:
            raise ValidationError(
                f"questions[{idx}].id",
                f"duplicate question id '{question.id}'",
            )
        seen.add(question.id)
        questions.append(question)

    return Quiz(
        title=title,
        description=description,
        metadata=metadata,
        questions=tuple(questions),
    )


def validate_request(
    value: Any,
    *,
    default_num_questions: int = 8,
    default_difficulty: str = "medium",
) -> GenerationRequest:
    """Validate an inbound ``{topic, numQuestions, difficulty, source}``."""

    data = dict(_require_mapping(value, ""))
    if data.get("numQuestions") is None:
        data["numQuestions"] = default_num_questions
    if data.get("difficulty") is None:
        data["difficulty"] = default_difficulty

    topic = _require_text(data, "topic", "", min_length=MIN_TOPIC_LENGTH)
    num_questions = _require_int(
        data, "numQuestions", "", minimum=1, maximum=MAX_QUESTIONS
    )
    difficulty = _require_enum(data, "difficulty", "", DIFFICULTIES)

    source: Optional[str] = data.get("source")
    if source is not None:
        if not isinstance(source, str):
            raise ValidationError(
                "source", f"expected string, got {_type_name(source)}"
            )
        if len(source) > MAX_SOURCE_LENGTH:
            raise ValidationError(
                "source",
                f"must be at most {MAX_SOURCE_LENGTH} characters",
            )

    return GenerationRequest(
        topic=topic.strip(),
        num_questions=num_questions,
        difficulty=difficulty,
        source=source,
    )
