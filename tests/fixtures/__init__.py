"""Shared testing fixtures and doubles for the quizzr test suite."""

from .completion import (  # noqa: F401
    CompletionClientFactory,
    CompletionClientStub,
    ScriptedCompleter,
    envelope,
)
from .quizzes import (  # noqa: F401
    clone,
    make_question,
    make_quiz_dict,
    marked_json,
    plain_template_reply,
)

__all__ = [
    "CompletionClientFactory",
    "CompletionClientStub",
    "ScriptedCompleter",
    "clone",
    "envelope",
    "make_question",
    "make_quiz_dict",
    "marked_json",
    "plain_template_reply",
]
