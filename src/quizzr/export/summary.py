"""Rich console summaries for generated and exported quizzes."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from quizzr.generate.models import GenerationFailure, Quiz

__all__ = ["render_failure", "render_quiz_summary"]

_MODE_STYLES = {
    "json": "green",
    "json-fixed": "yellow",
    "plain-template": "magenta",
}


def render_quiz_summary(
    console: Console,
    quiz: Quiz,
    *,
    mode: Optional[str] = None,
    written: Sequence[Path] = (),
) -> None:
    console.print()
    heading = Text(quiz.title, style="bold")
    if mode:
        heading.append(f"  [{mode}]", style=_MODE_STYLES.get(mode, "cyan"))
    console.rule(heading)
    console.print(Text(quiz.description, style="dim"))

    overview = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD, expand=False)
    overview.add_column("Field", style="bold")
    overview.add_column("Value")
    overview.add_row("Topic", Text(quiz.metadata.topic))
    overview.add_row("Difficulty", Text(quiz.metadata.difficulty))
    overview.add_row("Questions", str(len(quiz.questions)))
    console.print(overview)

    questions = Table(title="Questions", box=box.SIMPLE, expand=True)
    questions.add_column("#", justify="right")
    questions.add_column("Prompt", overflow="fold")
    questions.add_column("Answer", overflow="fold")
    for idx, question in enumerate(quiz.questions, start=1):
        correct = question.correct_choice
        answer = f"{question.correct_choice_id}) {correct.text}" if correct else "-"
        questions.add_row(str(idx), Text(question.prompt), Text(answer))
    console.print(questions)

    for path in written:
        console.print(Text.assemble("Wrote ", (str(path), "bold")))


def render_failure(console: Console, failure: GenerationFailure) -> None:
    body = Text(failure.error, style="bold")
    body.append(f"\n\n{failure.hint}")
    if failure.preview:
        body.append("\n\nPreview:\n", style="bold")
        body.append(failure.preview, style="dim")
    console.print(Panel(body, title="Generation failed", border_style="red"))
