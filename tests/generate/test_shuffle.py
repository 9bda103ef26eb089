from __future__ import annotations

import random

from fixtures import make_quiz_dict
from quizzr.generate.schema import validate_quiz
from quizzr.generate.shuffle import shuffle_choices


def _correct_texts(quiz):
    return [q.correct_choice.text for q in quiz.questions]


def test_shuffle_keeps_correct_answer_text() -> None:
    quiz = validate_quiz(make_quiz_dict(10))

    for seed in range(20):
        shuffled = shuffle_choices(quiz, random.Random(seed))

        assert _correct_texts(shuffled) == _correct_texts(quiz)
        for question in shuffled.questions:
            assert [c.id for c in question.choices] == ["A", "B", "C", "D"]
        validate_quiz(shuffled)


def test_shuffle_returns_new_quiz_and_leaves_input_untouched() -> None:
    quiz = validate_quiz(make_quiz_dict(5))
    before = quiz.to_dict()

    shuffled = shuffle_choices(quiz, random.Random(1))

    assert shuffled is not quiz
    assert quiz.to_dict() == before


def test_shuffle_is_reproducible_with_seed() -> None:
    quiz = validate_quiz(make_quiz_dict(6))

    first = shuffle_choices(quiz, random.Random(42))
    second = shuffle_choices(quiz, random.Random(42))

    assert first == second


def test_shuffle_moves_choices_for_some_seed() -> None:
    quiz = validate_quiz(make_quiz_dict(4))

    orders = {
        tuple(c.text for c in shuffle_choices(quiz, random.Random(s)).questions[0].choices)
        for s in range(10)
    }

    assert len(orders) > 1
