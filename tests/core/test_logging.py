from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from quizzr.core import logging as core_logging


def _close(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_configure_logger_writes_json(tmp_path):
    log_dir = tmp_path / "logs"
    logger, log_path = core_logging.configure_logger(
        "quizzr.test",
        log_dir=log_dir,
        level="INFO",
        verbose=False,
        filename="test.log",
    )

    logger.info("stage started", extra={"stage": "json", "prompt_chars": 3})

    class _Helper:
        def __repr__(self):  # noqa: D401
            return "helper"

    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception(
            "with error",
            extra={
                "stage": "json-fixed",
                "value": {"items": [Path(log_dir), 1], "mapping": {"k": "v"}},
                "obj": _Helper(),
            },
        )
    logger.debug("filtered out at INFO")
    for handler in logger.handlers:
        handler.flush()

    contents = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(contents) == 2
    first = json.loads(contents[0])
    assert first["message"] == "stage started"
    assert first["level"] == "INFO"
    assert first["extra"] == {"stage": "json", "prompt_chars": 3}

    payload = json.loads(contents[-1])
    assert "ValueError: boom" in payload["exception"]
    assert payload["extra"]["obj"] == "helper"
    assert payload["extra"]["value"]["items"][0] == str(log_dir)

    _close(logger)


def test_child_loggers_reach_configured_file(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "quizzr", log_dir=tmp_path / "logs"
    )

    logging.getLogger("quizzr.generate.pipeline").warning("child record")
    for handler in logger.handlers:
        handler.flush()

    assert log_path.name == "quizzr.log"
    assert "child record" in log_path.read_text(encoding="utf-8")

    _close(logger)


def test_console_handler_toggle(tmp_path):
    log_dir = tmp_path / "logs"
    name = "quizzr.test_toggle"

    def console_handlers(logger):
        return [
            handler
            for handler in logger.handlers
            if getattr(handler, "_quizzr_console", False)
        ]

    logger, _ = core_logging.configure_logger(
        name, log_dir=log_dir, verbose=True, filename="toggle.log"
    )
    assert len(console_handlers(logger)) == 1

    core_logging.configure_logger(
        name, log_dir=log_dir, verbose=True, filename="toggle.log"
    )
    assert len(console_handlers(logger)) == 1
    assert (
        len([h for h in logger.handlers if getattr(h, "_quizzr_file", False)])
        == 1
    )

    core_logging.configure_logger(
        name, log_dir=log_dir, verbose=False, filename="toggle.log"
    )
    assert not console_handlers(logger)

    _close(logger)


def test_configure_logger_fallback_directory(tmp_path, monkeypatch):
    target = tmp_path / "blocked"
    fallback = tmp_path / "fallback"
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):  # noqa: ANN001
        if self == target:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)
    monkeypatch.setattr(core_logging, "_fallback_log_dir", lambda: fallback)

    logger, log_path = core_logging.configure_logger(
        "quizzr.test_blocked", log_dir=target, filename="blocked.log"
    )

    assert log_path == fallback / "blocked.log"
    assert log_path.exists()

    _close(logger)


def test_fallback_log_dir_uses_tempdir(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "gettempdir", lambda: str(tmp_path))

    assert core_logging._fallback_log_dir() == tmp_path / "quizzr-logs"


def test_clip_for_log_flattens_and_truncates():
    assert core_logging.clip_for_log(None) == ""
    assert core_logging.clip_for_log("a\n  b\tc") == "a b c"
    assert core_logging.clip_for_log("x" * 10, limit=4) == "xxxx..."


def test_coerce_level_defaults():
    assert core_logging._coerce_level("bogus") == logging.INFO
    assert core_logging._coerce_level("warning") == logging.WARNING
