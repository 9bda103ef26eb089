from __future__ import annotations

import pytest

from fixtures import plain_template_reply
from quizzr.errors import NoQuestionsParsedError
from quizzr.generate.template import parse_plain_template


def test_parse_complete_template() -> None:
    quiz = parse_plain_template(
        "Photosynthesis", "easy", 3, plain_template_reply(3)
    )

    assert quiz.title == "Photosynthesis Basics"
    assert quiz.description == "Warm-up questions about Photosynthesis."
    assert quiz.metadata.num_questions == 3
    assert [q.id for q in quiz.questions] == ["Q1", "Q2", "Q3"]
    first = quiz.questions[0]
    assert first.prompt == "What is fact number 1?"
    assert [c.text for c in first.choices] == [
        "Option A1",
        "Option B1",
        "Option C1",
        "Option D1",
    ]
    assert first.correct_choice_id == "C"
    assert first.explanation == "Reason 1."


def test_parse_stops_at_first_incomplete_block() -> None:
    text = "\n".join(
        [
            "Q1: First question?",
            "A) one",
            "B) two",
            "C) three",
            "D) four",
            "CORRECT: B",
            "Q2: Second question?",
            "A) one",
            "B) two",
            "C) three",
            "D) four",
            "CORRECT: D",
            "Q3: Third question?",
            "A) one",
            "B) two",
        ]
    )

    quiz = parse_plain_template("Topic", "medium", 3, text)

    assert len(quiz.questions) == 2
    assert quiz.metadata.num_questions == 2
    assert quiz.questions[1].correct_choice_id == "D"


def test_parse_defaults_title_description_and_correct() -> None:
    text = "\n".join(
        [
            "q1: Lowercase marker works?",
            "a. yes",
            "b: no",
            "c) maybe",
            "d) unsure",
            "CORRECT: banana",
        ]
    )

    quiz = parse_plain_template("Topic", "easy", 1, text)

    assert quiz.title == "Topic Quiz"
    assert quiz.description == "A quick quiz on Topic."
    assert quiz.questions[0].correct_choice_id == "A"
    assert quiz.questions[0].explanation is None
    assert [c.id for c in quiz.questions[0].choices] == ["A", "B", "C", "D"]


def test_parse_accepts_explain_before_correct_and_blank_lines() -> None:
    text = (
        "\n\nTITLE: Mixed\n\nQ1: Which one?\n\nA) w\nB) x\nC) y\nD) z\n"
        "EXPLAIN: Because z.\nCORRECT: (D)\n"
    )

    quiz = parse_plain_template("Topic", "hard", 1, text)

    assert quiz.title == "Mixed"
    assert quiz.questions[0].correct_choice_id == "D"
    assert quiz.questions[0].explanation == "Because z."


def test_parse_only_reads_requested_number_of_questions() -> None:
    quiz = parse_plain_template("Topic", "easy", 2, plain_template_reply(4))

    assert len(quiz.questions) == 2


def test_parse_rejects_choices_out_of_order() -> None:
    text = "Q1: Out of order?\nB) x\nA) w\nC) y\nD) z\nCORRECT: A"

    with pytest.raises(NoQuestionsParsedError):
        parse_plain_template("Topic", "easy", 1, text)


def test_parse_without_questions_raises() -> None:
    with pytest.raises(NoQuestionsParsedError) as exc:
        parse_plain_template("Topic", "easy", 3, "I cannot help with that.")
    assert str(exc.value) == "No questions parsed from plain template."
