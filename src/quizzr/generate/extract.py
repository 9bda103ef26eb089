"""Payload extraction and lenient JSON repair for raw model output.

Extraction never raises: the worst case returns the input text and leaves
the failure to structural parsing. Repairs only touch punctuation a strict
JSON parser would reject and never add content.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Optional

from quizzr.errors import ParseError

__all__ = [
    "BEGIN_MARKER",
    "END_MARKER",
    "extract_between_markers",
    "extract_payload",
    "isolate_json_object",
    "parse_json_payload",
    "repair_json",
    "repair_template_text",
    "strip_code_fences",
    "unwrap_completion_envelope",
    "unwrap_string_literal",
]

BEGIN_MARKER = "###BEGIN_JSON###"
END_MARKER = "###END_JSON###"

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)
_SENTINEL_RE = re.compile(r"#{0,3}\b(?:BEGIN|END)_(?:JSON|PREVIOUS)\b#{0,3}")
_CURLY_DOUBLE = "“”„‟"
_CURLY_SINGLE = str.maketrans({"‘": "'", "’": "'", "‚": "'", "‛": "'"})


def unwrap_completion_envelope(raw: Optional[str]) -> str:
    """Return ``choices[0].text`` when ``raw`` is a completion envelope.

    Anything that is not exactly that shape (not JSON, not an object, no
    non-empty ``choices`` list, no string ``text``) is returned unchanged.
    Chat-style envelopes carrying ``choices[0].message.content`` are accepted
    too since OpenAI-compatible servers mix the two.
    """

    text = raw or ""
    try:
        data = json.loads(text)
    except (ValueError, RecursionError):
        return text
    if not isinstance(data, dict):
        return text
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return text
    first = choices[0]
    if not isinstance(first, dict):
        return text
    inner = first.get("text")
    if isinstance(inner, str):
        return inner
    message = first.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    return text


def extract_between_markers(text: str) -> Optional[str]:
    """Return the trimmed text between the sentinel markers, if both exist."""

    start = text.find(BEGIN_MARKER)
    if start == -1:
        return None
    body_start = start + len(BEGIN_MARKER)
    end = text.find(END_MARKER, body_start)
    if end == -1:
        return None
    return text[body_start:end].strip()


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text)


def isolate_json_object(text: str) -> str:
    """Return the span from the first ``{`` to the last ``}``.

    Falls back to the fence-free, trimmed text when no such span exists.
    """

    cleaned = strip_code_fences(text).strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        return cleaned[start : end + 1].strip()
    return cleaned


def extract_payload(raw: Optional[str]) -> str:
    """Best-effort inner payload of a raw completion response."""

    text = unwrap_completion_envelope(raw)
    marked = extract_between_markers(text)
    if marked is not None:
        return marked
    return isolate_json_object(text)


def _strip_sentinels(text: str) -> str:
    return _SENTINEL_RE.sub("", text)


def _drop_trailing_comma(out: List[str]) -> None:
    idx = len(out) - 1
    while idx >= 0 and out[idx].isspace():
        idx -= 1
    if idx >= 0 and out[idx] == ",":
        del out[idx]


def repair_json(candidate: Optional[str]) -> str:
    """Apply conservative syntax fixes to near-JSON text.

    - stray sentinel tokens and code fences are removed
    - curly single quotes become apostrophes; curly double quotes used as
      string delimiters become straight quotes (inside a straight-quoted
      string they are content and left alone)
    - commas directly before ``}`` or ``]`` outside strings are dropped
    - brackets left open at the end (outside a string) are closed
    """

    text = _strip_sentinels(strip_code_fences(candidate or ""))
    text = text.translate(_CURLY_SINGLE)

    out: List[str] = []
    closers: List[str] = []
    in_string = False
    curly_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"' or (curly_string and ch in _CURLY_DOUBLE):
                in_string = False
                ch = '"'
            out.append(ch)
            continue
        if ch == '"' or ch in _CURLY_DOUBLE:
            in_string = True
            curly_string = ch != '"'
            out.append('"')
        elif ch in "{[":
            closers.append("}" if ch == "{" else "]")
            out.append(ch)
        elif ch in "}]":
            _drop_trailing_comma(out)
            if closers and closers[-1] == ch:
                closers.pop()
            out.append(ch)
        else:
            out.append(ch)

    if closers and not in_string:
        _drop_trailing_comma(out)
        while out and out[-1].isspace():
            out.pop()
        out.extend(reversed(closers))
    return "".join(out).strip()


def parse_json_payload(candidate: Optional[str]) -> Any:
    """Repair ``candidate`` and parse it, raising ``ParseError`` on failure."""

    repaired = repair_json(candidate)
    if not repaired:
        raise ParseError("model returned an empty payload")
    try:
        return json.loads(repaired)
    except json.JSONDecodeError as exc:
        raise ParseError(
            f"invalid JSON after repair: {exc.msg} "
            f"(line {exc.lineno}, column {exc.colno})"
        ) from exc
    except (ValueError, RecursionError) as exc:
        # Oversized integer literals and runaway nesting.
        raise ParseError(f"invalid JSON after repair: {exc}") from exc


def unwrap_string_literal(text: str) -> str:
    """Decode ``text`` when the whole reply is one JSON string literal."""

    stripped = text.strip()
    if len(stripped) < 2 or stripped[0] != '"' or stripped[-1] != '"':
        return text
    try:
        decoded = json.loads(stripped)
    except (ValueError, RecursionError):
        return text
    return decoded if isinstance(decoded, str) else text


def repair_template_text(text: Optional[str]) -> str:
    """Clean a plain-template reply before line parsing."""

    cleaned = _strip_sentinels(strip_code_fences(text or "")).strip()
    return unwrap_string_literal(cleaned).strip()
