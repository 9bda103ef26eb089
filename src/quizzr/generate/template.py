"""Parser for the line-oriented plain-template quiz format.

Expected layout (blank lines ignored, markers case-insensitive)::

    TITLE: <short title>
    DESCRIPTION: <overview>
    QUESTION COUNT: <n>
    Q1: <prompt>
    A) <choice>
    B) <choice>
    C) <choice>
    D) <choice>
    CORRECT: <A|B|C|D>
    EXPLAIN: <one-line explanation>

Parsing stops at the first missing or incomplete question block; the
questions before it are kept.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from quizzr.errors import NoQuestionsParsedError

from .models import LETTERS, Quiz
from .schema import validate_quiz

__all__ = ["parse_plain_template"]

TITLE_RE = re.compile(r"^TITLE\s*:\s*(.*)$", re.IGNORECASE)
DESCRIPTION_RE = re.compile(r"^DESCRIPTION\s*:\s*(.*)$", re.IGNORECASE)
QUESTION_RE = re.compile(r"^Q\s*(\d+)\s*:\s*(.*)$", re.IGNORECASE)
CHOICE_RE = re.compile(r"^([A-D])\s*[\)\.:]\s*(.*)$", re.IGNORECASE)
CORRECT_RE = re.compile(
    r"^CORRECT(?:\s+ANSWER)?\s*:\s*\(?(?:([A-D])\b)?", re.IGNORECASE
)
EXPLAIN_RE = re.compile(r"^EXPLAIN(?:ATION)?\s*:\s*(.*)$", re.IGNORECASE)

# CORRECT/EXPLAIN may appear in either order right after the D) line.
_TAIL_LINES = 2


def _header_value(lines: Sequence[str], pattern: "re.Pattern[str]") -> str:
    for line in lines:
        match = pattern.match(line)
        if match:
            return match.group(1).strip()
    return ""


def _find_question(lines: Sequence[str], number: int) -> Optional[int]:
    for idx, line in enumerate(lines):
        match = QUESTION_RE.match(line)
        if match and int(match.group(1)) == number:
            return idx
    return None


def _parse_block(
    lines: Sequence[str], number: int
) -> Optional[Dict[str, object]]:
    idx = _find_question(lines, number)
    if idx is None:
        return None
    prompt = QUESTION_RE.match(lines[idx]).group(2).strip()  # type: ignore[union-attr]
    if not prompt:
        return None

    choices: List[Dict[str, str]] = []
    for offset, letter in enumerate(LETTERS, start=1):
        pos = idx + offset
        if pos >= len(lines):
            return None
        match = CHOICE_RE.match(lines[pos])
        if not match or match.group(1).upper() != letter:
            return None
        text = match.group(2).strip()
        if not text:
            return None
        choices.append({"id": letter, "text": text})

    correct = "A"
    explanation = ""
    tail_start = idx + len(LETTERS) + 1
    for line in lines[tail_start : tail_start + _TAIL_LINES]:
        if QUESTION_RE.match(line):
            break
        correct_match = CORRECT_RE.match(line)
        if correct_match:
            if correct_match.group(1):
                correct = correct_match.group(1).upper()
            continue
        explain_match = EXPLAIN_RE.match(line)
        if explain_match:
            explanation = explain_match.group(1).strip()

    question: Dict[str, object] = {
        "id": f"Q{number}",
        "type": "mcq",
        "prompt": prompt,
        "choices": choices,
        "correctChoiceId": correct,
    }
    if explanation:
        question["explanation"] = explanation
    return question


def parse_plain_template(
    topic: str, difficulty: str, num_questions: int, text: str
) -> Quiz:
    """Build a validated quiz from plain-template text.

    ``metadata.numQuestions`` reports how many questions were actually
    recovered, which may be fewer than ``num_questions``.
    Raises ``NoQuestionsParsedError`` when not a single block is complete.
    """

    lines = [line.strip() for line in (text or "").splitlines()]
    lines = [line for line in lines if line]

    questions: List[Dict[str, object]] = []
    for number in range(1, num_questions + 1):
        block = _parse_block(lines, number)
        if block is None:
            break
        questions.append(block)

    if not questions:
        raise NoQuestionsParsedError("No questions parsed from plain template.")

    return validate_quiz(
        {
            "title": _header_value(lines, TITLE_RE) or f"{topic} Quiz",
            "description": _header_value(lines, DESCRIPTION_RE)
            or f"A quick quiz on {topic}.",
            "metadata": {
                "topic": topic,
                "difficulty": difficulty,
                "numQuestions": len(questions),
            },
            "questions": questions,
        }
    )
