# This project was developed with assistance from AI tools.
"""Inference module -- OpenAI-compatible LLM client."""

from .client import LLMNotConfiguredError, clear_client_cache, get_completion

__all__ = [
    "LLMNotConfiguredError",
    "clear_client_cache",
    "get_completion",
]
