"""Immutable quiz data structures and pipeline result types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Tuple

LETTERS: Tuple[str, ...] = ("A", "B", "C", "D")
QUESTION_TYPE = "mcq"

GenerationMode = Literal["json", "json-fixed", "plain-template"]
GENERATION_MODES: Tuple[str, ...] = ("json", "json-fixed", "plain-template")


@dataclass(frozen=True)
class Choice:
    """One lettered option of a question."""

    id: str
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "text": self.text}


@dataclass(frozen=True)
class Question:
    """A single-answer multiple-choice question with exactly four choices."""

    id: str
    prompt: str
    choices: Tuple[Choice, ...]
    correct_choice_id: str
    explanation: Optional[str] = None
    type: str = QUESTION_TYPE

    def choice_for(self, choice_id: Optional[str]) -> Optional[Choice]:
        if not choice_id:
            return None
        normalized = str(choice_id).strip().upper()[:1]
        for choice in self.choices:
            if choice.id == normalized:
                return choice
        return None

    @property
    def correct_choice(self) -> Optional[Choice]:
        return self.choice_for(self.correct_choice_id)

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "id": self.id,
            "type": self.type,
            "prompt": self.prompt,
            "choices": [choice.to_dict() for choice in self.choices],
            "correctChoiceId": self.correct_choice_id,
        }
        if self.explanation is not None:
            data["explanation"] = self.explanation
        return data


@dataclass(frozen=True)
class QuizMetadata:
    topic: str
    difficulty: str
    num_questions: int

    def to_dict(self) -> dict[str, object]:
        return {
            "topic": self.topic,
            "difficulty": self.difficulty,
            "numQuestions": self.num_questions,
        }


@dataclass(frozen=True)
class Quiz:
    """A validated quiz. Build instances through ``validate_quiz``."""

    title: str
    description: str
    metadata: QuizMetadata
    questions: Tuple[Question, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "title": self.title,
            "description": self.description,
            "metadata": self.metadata.to_dict(),
            "questions": [question.to_dict() for question in self.questions],
        }


@dataclass(frozen=True)
class GenerationRequest:
    """Validated inbound request for one quiz."""

    topic: str
    num_questions: int = 8
    difficulty: str = "medium"
    source: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "topic": self.topic,
            "numQuestions": self.num_questions,
            "difficulty": self.difficulty,
        }
        if self.source is not None:
            data["source"] = self.source
        return data


@dataclass(frozen=True)
class GenerationResult:
    """Successful pipeline outcome tagged with the stage that produced it."""

    mode: GenerationMode
    quiz: Quiz

    ok = True

    def to_dict(self) -> dict[str, object]:
        return {"mode": self.mode, "quiz": self.quiz.to_dict()}


@dataclass(frozen=True)
class GenerationFailure:
    """Terminal, diagnosable failure after every stage was tried."""

    error: str
    hint: str
    preview: str

    ok = False

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "hint": self.hint, "preview": self.preview}
