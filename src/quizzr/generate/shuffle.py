"""Presentation transform that reshuffles answer choices."""

from __future__ import annotations

import random
from dataclasses import replace
from typing import Optional

from .models import LETTERS, Choice, Question, Quiz

__all__ = ["shuffle_choices", "shuffle_question"]


def shuffle_question(question: Question, rng: random.Random) -> Question:
    """Return ``question`` with shuffled, re-lettered choices.

    The correct answer follows its text: the new ``correct_choice_id`` is the
    letter now assigned to the originally correct choice.
    """

    order = list(question.choices)
    rng.shuffle(order)
    relettered = tuple(
        Choice(id=letter, text=choice.text)
        for letter, choice in zip(LETTERS, order)
    )
    correct_index = next(
        idx
        for idx, choice in enumerate(order)
        if choice.id == question.correct_choice_id
    )
    return replace(
        question,
        choices=relettered,
        correct_choice_id=LETTERS[correct_index],
    )


def shuffle_choices(quiz: Quiz, rng: Optional[random.Random] = None) -> Quiz:
    """Return a new quiz whose questions have reshuffled choices.

    ``quiz`` itself is left untouched. Pass a seeded ``random.Random`` for a
    reproducible order.
    """

    generator = rng or random.Random()
    return replace(
        quiz,
        questions=tuple(
            shuffle_question(question, generator) for question in quiz.questions
        ),
    )
