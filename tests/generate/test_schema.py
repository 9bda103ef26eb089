from __future__ import annotations

import pytest

from fixtures import clone, make_quiz_dict
from quizzr.core import config as config_mod
from quizzr.errors import QuizGenerationError, ValidationError
from quizzr.generate.models import Quiz
from quizzr.generate.schema import validate_quiz, validate_request


def test_validate_quiz_accepts_canonical_payload() -> None:
    data = make_quiz_dict(3)

    quiz = validate_quiz(data)

    assert isinstance(quiz, Quiz)
    assert quiz.metadata.num_questions == 3
    assert quiz.questions[0].correct_choice_id == "B"
    assert [c.id for c in quiz.questions[0].choices] == ["A", "B", "C", "D"]
    assert quiz.to_dict() == data


def test_validate_quiz_is_idempotent_on_quiz_values() -> None:
    quiz = validate_quiz(make_quiz_dict(2))

    assert validate_quiz(quiz) is quiz
    assert validate_quiz(quiz.to_dict()) == quiz


def test_validate_quiz_drops_unknown_keys_and_null_explanation() -> None:
    data = make_quiz_dict(1)
    data["extra"] = "ignored"
    data["questions"][0]["explanation"] = None
    data["questions"][0]["hint"] = "also ignored"

    quiz = validate_quiz(data)

    assert quiz.questions[0].explanation is None
    assert "extra" not in quiz.to_dict()
    assert "explanation" not in quiz.to_dict()["questions"][0]


def test_validate_quiz_accepts_integral_float_count() -> None:
    data = make_quiz_dict(2)
    data["metadata"]["numQuestions"] = 2.0

    assert validate_quiz(data).metadata.num_questions == 2


@pytest.mark.parametrize(
    ("mutate", "path"),
    [
        (lambda d: d.pop("title"), "title"),
        (lambda d: d.__setitem__("description", 5), "description"),
        (lambda d: d["metadata"].__setitem__("difficulty", "expert"),
         "metadata.difficulty"),
        (lambda d: d["metadata"].__setitem__("numQuestions", 0),
         "metadata.numQuestions"),
        (lambda d: d["metadata"].__setitem__("numQuestions", 26),
         "metadata.numQuestions"),
        (lambda d: d["metadata"].__setitem__("numQuestions", True),
         "metadata.numQuestions"),
        (lambda d: d["metadata"].__setitem__("numQuestions", 2.5),
         "metadata.numQuestions"),
        (lambda d: d.__setitem__("questions", []), "questions"),
        (lambda d: d["questions"][1]["choices"].pop(), "questions[1].choices"),
        (lambda d: d["questions"][1]["choices"].append(
            {"id": "E", "text": "Option E"}), "questions[1].choices"),
        (lambda d: d["questions"][0].__setitem__("type", "tf"),
         "questions[0].type"),
        (lambda d: d["questions"][0].__setitem__("prompt", "Hi"),
         "questions[0].prompt"),
        (lambda d: d["questions"][0]["choices"][2].__setitem__("id", "A"),
         "questions[0].choices[2].id"),
        (lambda d: d["questions"][0]["choices"][3].__setitem__("id", "E"),
         "questions[0].choices[3].id"),
        (lambda d: d["questions"][0].__setitem__("correctChoiceId", "E"),
         "questions[0].correctChoiceId"),
        (lambda d: d["questions"][0].__setitem__("explanation", 3),
         "questions[0].explanation"),
        (lambda d: d["questions"][1].__setitem__("id", "q1"),
         "questions[1].id"),
    ],
)
def test_validate_quiz_reports_first_offending_path(mutate, path) -> None:
    data = clone(make_quiz_dict(3))
    mutate(data)

    with pytest.raises(ValidationError) as exc:
        validate_quiz(data)

    assert exc.value.path == path
    assert str(exc.value).startswith(path)


def test_validate_quiz_rejects_non_objects() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_quiz(["not", "a", "quiz"])
    assert "expected object" in str(exc.value)


def test_validation_error_is_a_generation_error() -> None:
    with pytest.raises(QuizGenerationError):
        validate_quiz({})


def test_validate_request_applies_defaults() -> None:
    request = validate_request({"topic": "  Cell biology  "})

    assert request.topic == "Cell biology"
    assert request.num_questions == 8
    assert request.difficulty == "medium"
    assert request.source is None


def test_validate_request_uses_supplied_defaults() -> None:
    request = validate_request(
        {"topic": "Rivers", "numQuestions": None},
        default_num_questions=4,
        default_difficulty="hard",
    )

    assert request.num_questions == 4
    assert request.difficulty == "hard"


@pytest.mark.parametrize(
    ("payload", "path"),
    [
        ({"topic": "x"}, "topic"),
        ({}, "topic"),
        ({"topic": "Rivers", "numQuestions": 30}, "numQuestions"),
        ({"topic": "Rivers", "difficulty": "insane"}, "difficulty"),
        ({"topic": "Rivers", "source": 12}, "source"),
        ({"topic": "Rivers", "source": "s" * 20001}, "source"),
    ],
)
def test_validate_request_rejects_invalid_payloads(payload, path) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_request(payload)
    assert exc.value.path == path


@pytest.mark.parametrize("difficulty", config_mod.DIFFICULTIES)
def test_validate_request_accepts_configurable_difficulties(difficulty) -> None:
    request = validate_request(
        {
            "topic": "Rivers",
            "difficulty": difficulty,
            "numQuestions": config_mod.MAX_QUESTIONS,
        }
    )

    assert request.difficulty == difficulty
    assert request.num_questions == config_mod.MAX_QUESTIONS
