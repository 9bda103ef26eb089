"""Serialize validated quizzes to JSON, CSV and a QTI 1.2 zip package."""

from __future__ import annotations

import csv
import io
import json
import re
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List

from jinja2 import Environment

from quizzr.generate.models import LETTERS, Quiz

__all__ = [
    "ASSESSMENT_FILENAME",
    "CSV_HEADER",
    "MANIFEST_FILENAME",
    "build_assessment_xml",
    "build_manifest",
    "export_basename",
    "quiz_to_csv",
    "quiz_to_json",
    "quiz_to_qti_zip",
    "write_exports",
]

CSV_HEADER = ("Question", "A", "B", "C", "D", "Correct", "Explanation")
ASSESSMENT_FILENAME = "assessment_qti.xml"
MANIFEST_FILENAME = "imsmanifest.xml"
ITEM_TITLE_CHARS = 96

_ASSESSMENT_TEMPLATE = """\
<?xml version="1.0" encoding="UTF-8"?>
<questestinterop>
  <assessment ident="A1" title="{{ quiz.title }}">
    <section ident="root_section">
{% for question in quiz.questions %}
    <item ident="ITEM-{{ loop.index }}" title="{{ question.prompt[:item_title_chars] }}">
      <presentation>
        <material><mattext texttype="text/plain">{{ question.prompt }}</mattext></material>
        <response_lid ident="response1" rcardinality="Single">
          <render_choice>
{% for choice in question.choices %}
            <response_label ident="{{ choice.id }}"><material><mattext texttype="text/plain">{{ choice.text }}</mattext></material></response_label>
{% endfor %}
          </render_choice>
        </response_lid>
      </presentation>
      <resprocessing>
        <outcomes><decvar maxvalue="1" minvalue="0" varname="SCORE" vartype="Decimal"/></outcomes>
        <respcondition continue="No">
          <conditionvar><varequal respident="response1">{{ question.correct_choice_id }}</varequal></conditionvar>
          <setvar action="Set" varname="SCORE">1</setvar>
          <displayfeedback feedbacktype="Response" linkrefid="correct"/>
        </respcondition>
      </resprocessing>
      <itemfeedback ident="correct"><material><mattext texttype="text/plain">{{ question.explanation or "" }}</mattext></material></itemfeedback>
    </item>
{% endfor %}
    </section>
  </assessment>
</questestinterop>
"""

_MANIFEST = """\
<?xml version="1.0" encoding="UTF-8"?>
<manifest identifier="MANIFEST-QUIZZR" xmlns="http://www.imsglobal.org/xsd/imscp_v1p1" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xsi:schemaLocation="http://www.imsglobal.org/xsd/imscp_v1p1 imscp_rootv1p1p2.xsd">
  <organizations />
  <resources>
    <resource identifier="RES1" type="imsqti_test_xmlv1p2" href="{href}">
      <file href="{href}" />
    </resource>
  </resources>
</manifest>
"""

_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
_assessment_template = _env.from_string(_ASSESSMENT_TEMPLATE)


def quiz_to_json(quiz: Quiz) -> str:
    return json.dumps(quiz.to_dict(), indent=2, ensure_ascii=False)


def quiz_to_csv(quiz: Quiz) -> str:
    """One row per question; every cell is double-quoted."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for question in quiz.questions:
        texts: Dict[str, str] = {c.id: c.text for c in question.choices}
        writer.writerow(
            [
                question.prompt,
                *(texts.get(letter, "") for letter in LETTERS),
                question.correct_choice_id,
                question.explanation or "",
            ]
        )
    return buffer.getvalue().rstrip("\n")


def build_assessment_xml(quiz: Quiz) -> str:
    """QTI 1.2 assessment with one single-response item per question."""

    return _assessment_template.render(
        quiz=quiz, item_title_chars=ITEM_TITLE_CHARS
    )


def build_manifest() -> str:
    return _MANIFEST.format(href=ASSESSMENT_FILENAME)


def quiz_to_qti_zip(quiz: Quiz) -> bytes:
    """Zip the assessment and manifest the way Canvas expects to import."""

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(ASSESSMENT_FILENAME, build_assessment_xml(quiz))
        zf.writestr(MANIFEST_FILENAME, build_manifest())
    return buffer.getvalue()


def export_basename(quiz: Quiz) -> str:
    """File stem derived from the quiz topic, whitespace runs as ``_``."""

    stem = re.sub(r"\s+", "_", quiz.metadata.topic.strip())
    stem = re.sub(r"[\\/:*?\"<>|]", "", stem)
    return stem or "quiz"


def write_exports(
    quiz: Quiz, out_dir: Path, formats: Iterable[str]
) -> List[Path]:
    """Write each requested format into ``out_dir`` and return the paths."""

    out_dir.mkdir(parents=True, exist_ok=True)
    stem = export_basename(quiz)
    written: List[Path] = []
    for fmt in dict.fromkeys(f.lower() for f in formats):
        if fmt == "json":
            path = out_dir / f"{stem}_quiz.json"
            path.write_text(quiz_to_json(quiz) + "\n", encoding="utf-8")
        elif fmt == "csv":
            path = out_dir / f"{stem}_quiz.csv"
            path.write_text(quiz_to_csv(quiz) + "\n", encoding="utf-8")
        elif fmt == "qti":
            path = out_dir / f"{stem}_QTI.zip"
            path.write_bytes(quiz_to_qti_zip(quiz))
        else:
            raise ValueError(f"Unsupported export format '{fmt}'.")
        written.append(path)
    return written
