"""Prompt builders for the three generation stages."""

from __future__ import annotations

from typing import Optional

from .extract import BEGIN_MARKER, END_MARKER

__all__ = [
    "DEFAULT_PREVIOUS_MAX_CHARS",
    "DEFAULT_SOURCE_MAX_CHARS",
    "SYSTEM_PROMPT",
    "build_json_prompt",
    "build_plain_template_prompt",
    "build_repair_prompt",
    "truncate_source",
]

DEFAULT_SOURCE_MAX_CHARS = 18000
DEFAULT_PREVIOUS_MAX_CHARS = 6000

SYSTEM_PROMPT = (
    "You are QUIZZR, a strict JSON generator for multiple-choice quizzes.\n"
    "Return ONLY JSON between markers exactly:\n"
    f"{BEGIN_MARKER}\n"
    "{ ...valid JSON... }\n"
    f"{END_MARKER}\n"
    "Never include markdown, commentary, or extra keys.\n"
    "\n"
    "Types:\n"
    "interface Choice { id: 'A'|'B'|'C'|'D'; text: string; }\n"
    "interface Question { id: string; type: 'mcq'; prompt: string; "
    "choices: Choice[]; correctChoiceId: 'A'|'B'|'C'|'D'; "
    "explanation?: string; }\n"
    "interface Quiz { title: string; description: string; metadata: "
    "{ topic: string; difficulty: 'easy'|'medium'|'hard'; "
    "numQuestions: number; }; questions: Question[]; }"
)


def truncate_source(
    source: Optional[str], max_chars: int = DEFAULT_SOURCE_MAX_CHARS
) -> str:
    """Trim ``source`` and cut it to the model's input budget."""

    if not source:
        return ""
    return source.strip()[:max_chars]


def _json_scope_block(source: str) -> str:
    if source:
        return (
            "Generate questions ONLY from the following source text. "
            "Do NOT invent facts not present in it.\n\n"
            f"SOURCE START\n{source}\nSOURCE END"
        )
    return (
        "If you lack a source, use reliable, widely accepted fundamentals "
        "for the topic."
    )


def build_json_prompt(
    topic: str,
    difficulty: str,
    num_questions: int,
    source: Optional[str] = None,
    *,
    source_max_chars: int = DEFAULT_SOURCE_MAX_CHARS,
) -> str:
    """Strict-JSON prompt asking for a marker-wrapped Quiz object."""

    scope = _json_scope_block(truncate_source(source, source_max_chars))
    user = (
        f'Create a quiz on: "{topic}"\n'
        f"Difficulty: {difficulty}\n"
        f"Number of questions: {num_questions}\n"
        "\n"
        "Rules:\n"
        '- ONLY single-correct MCQs (type="mcq").\n'
        '- Exactly 4 choices with ids "A","B","C","D".\n'
        "- Clear prompts; classroom-appropriate.\n"
        "- Include a short explanation for each.\n"
        "- Output MUST be valid JSON matching Quiz, wrapped in the specified "
        "markers.\n"
        "\n"
        f"{scope}\n"
        "\n"
        "Return:\n"
        f"{BEGIN_MARKER}\n"
        "{...}\n"
        f"{END_MARKER}"
    )
    return f"{SYSTEM_PROMPT}\n\n{user}"


def build_repair_prompt(
    previous: str,
    *,
    previous_max_chars: int = DEFAULT_PREVIOUS_MAX_CHARS,
) -> str:
    """Ask the model to convert its own previous reply into valid JSON."""

    excerpt = (previous or "")[:previous_max_chars]
    return (
        f"{SYSTEM_PROMPT}\n\n"
        "Your previous reply was not valid JSON. Convert it to EXACTLY the "
        "required JSON (no commentary). Keep content; fix structure/keys if "
        "needed.\n"
        "BEGIN_PREVIOUS\n"
        f"{excerpt}\n"
        "END_PREVIOUS\n"
        "\n"
        "Return only between markers."
    )


def build_plain_template_prompt(
    topic: str,
    difficulty: str,
    num_questions: int,
    source: Optional[str] = None,
    *,
    source_max_chars: int = DEFAULT_SOURCE_MAX_CHARS,
) -> str:
    """Line-oriented template prompt; needs no JSON balancing from the model."""

    trimmed = truncate_source(source, source_max_chars)
    if trimmed:
        scope = (
            "Use ONLY this source (no invented facts):\n\n"
            f"SOURCE START\n{trimmed}\nSOURCE END"
        )
    else:
        scope = "If no source is provided, rely on broadly accepted fundamentals."
    return (
        "Produce a quiz in the following PLAIN TEXT TEMPLATE (no JSON):\n"
        "\n"
        "TITLE: <short title>\n"
        "DESCRIPTION: <1-2 sentence overview>\n"
        f"QUESTION COUNT: {num_questions}\n"
        "\n"
        f"For each question i = 1..{num_questions} emit:\n"
        "\n"
        "Q{i}: <prompt>\n"
        "A) <choice>\n"
        "B) <choice>\n"
        "C) <choice>\n"
        "D) <choice>\n"
        "CORRECT: <A|B|C|D>\n"
        "EXPLAIN: <one-line explanation>\n"
        "\n"
        f"Topic: {topic}\n"
        f"Difficulty: {difficulty}\n"
        f"{scope}"
    )
