from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure project root and src/ are importable without an editable install
ROOT = TESTS_DIR.parent
for extra in (ROOT, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import CompletionClientFactory  # noqa: E402
from quizzr.core import ai  # noqa: E402
from quizzr.core import config as config_mod  # noqa: E402
from quizzr.core import workspace as workspace_mod  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Keep tests away from the real home directory and .env files."""

    monkeypatch.setenv(workspace_mod.WORKSPACE_ENV, str(tmp_path / "data"))
    monkeypatch.delenv(config_mod.CONFIG_PATH_ENV, raising=False)
    monkeypatch.delenv("QUIZZR_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(ai, "load_dotenv", lambda *args, **kwargs: False)
    yield
    logger = logging.getLogger("quizzr")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True


@pytest.fixture
def client_factory(monkeypatch: pytest.MonkeyPatch) -> CompletionClientFactory:
    """Patch ``OpenAI`` in the client module with a recording factory."""

    factory = CompletionClientFactory()
    monkeypatch.setattr(ai, "OpenAI", factory)
    return factory
