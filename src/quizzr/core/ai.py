"""Completion endpoint client helpers."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, Optional, Sequence

from dotenv import load_dotenv

from quizzr.errors import UpstreamError

from .config import LLMConfig

try:  # Allow module import even when the OpenAI dependency is absent.
    from openai import OpenAI  # type: ignore
except Exception:  # pragma: no cover - optional dependency guard
    OpenAI = None  # type: ignore

__all__ = ["Completer", "build_completer", "completer_from_config", "load_client"]

log = logging.getLogger(__name__)

Completer = Callable[[str], str]

PLACEHOLDER_API_KEY = "EMPTY"


def load_client(
    *,
    base_url: Optional[str] = None,
    api_key_env: str = "OPENAI_API_KEY",
    timeout: Optional[float] = None,
) -> Any:
    """Initialize an OpenAI-compatible client for a completions server.

    The key is read from ``api_key_env`` (falling back to ``OPENAI_API_KEY``)
    after loading ``.env``. Self-hosted servers reached through ``base_url``
    rarely check keys, so a placeholder is used there when none is set.
    Retries are disabled: every pipeline stage is a single attempt.
    """
    if OpenAI is None:
        raise RuntimeError(
            "The 'openai' package is required to create a client. "
            "Install it and retry."
        )
    load_dotenv()
    api_key = os.getenv(api_key_env) or os.getenv("OPENAI_API_KEY")
    if not api_key:
        if not base_url:
            raise RuntimeError(
                f"{api_key_env} not found in environment. Set it or add to .env"
            )
        api_key = PLACEHOLDER_API_KEY
    return OpenAI(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
        max_retries=0,
    )


def build_completer(
    client: Any,
    *,
    model: str,
    max_tokens: int,
    temperature: float = 0.0,
    stop: Sequence[str] = (),
) -> Completer:
    """Wrap ``client`` into a ``prompt -> raw response body`` callable.

    The raw HTTP body is returned untouched, so callers see the completion
    envelope (or whatever text a non-conforming server sent back).
    """

    def complete(prompt: str) -> str:
        params: dict[str, Any] = {
            "model": model,
            "prompt": prompt,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if stop:
            params["stop"] = list(stop)
        try:
            response = client.completions.with_raw_response.create(**params)
        except Exception as exc:
            log.warning(
                "completion request failed",
                extra={"model": model, "error": type(exc).__name__},
            )
            raise UpstreamError(f"Completion request failed: {exc}") from exc
        return response.text or ""

    return complete


def completer_from_config(llm: LLMConfig, *, client: Any = None) -> Completer:
    """Build the default completer from the ``[llm]`` config section."""

    resolved = client or load_client(
        base_url=llm.base_url,
        api_key_env=llm.api_key_env,
        timeout=llm.timeout_seconds,
    )
    return build_completer(
        resolved,
        model=llm.model,
        max_tokens=llm.max_tokens,
        temperature=llm.temperature,
        stop=llm.stop,
    )
