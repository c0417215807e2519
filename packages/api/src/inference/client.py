# This project was developed with assistance from AI tools.
"""Thin OpenAI-compatible LLM client used by the admin console planner.

Wraps the openai Python SDK with configurable base_url so it works
against any OpenAI-compatible endpoint (OpenAI, vLLM, LlamaStack, etc.).
"""

import logging
from typing import Any

from openai import AsyncOpenAI

from ..core.config import settings

logger = logging.getLogger(__name__)

_client: AsyncOpenAI | None = None


class LLMNotConfiguredError(RuntimeError):
    """Raised when a completion is requested without an API key."""


def _get_client() -> AsyncOpenAI:
    """Return the cached AsyncOpenAI client (avoids re-creating HTTP connections)."""
    global _client  # noqa: PLW0603
    if not settings.LLM_API_KEY:
        raise LLMNotConfiguredError("LLM_API_KEY is not set")
    if _client is None:
        _client = AsyncOpenAI(
            base_url=settings.LLM_BASE_URL,
            api_key=settings.LLM_API_KEY,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )
    return _client


def clear_client_cache() -> None:
    """Drop the cached client (useful after settings change in tests)."""
    global _client  # noqa: PLW0603
    _client = None


async def get_completion(
    messages: list[dict[str, str]],
    **kwargs: Any,
) -> str:
    """Get a non-streaming completion from the configured model."""
    client = _get_client()
    response = await client.chat.completions.create(
        model=settings.LLM_MODEL,
        messages=messages,
        **kwargs,
    )
    return response.choices[0].message.content or ""
