# This project was developed with assistance from AI tools.
"""Tests for the OpenAI-compatible completion client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.core.config import settings
from src.inference import LLMNotConfiguredError, clear_client_cache, get_completion


@pytest.fixture(autouse=True)
def _fresh_client():
    clear_client_cache()
    yield
    clear_client_cache()


@pytest.mark.asyncio
async def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(settings, "LLM_API_KEY", "")
    with pytest.raises(LLMNotConfiguredError):
        await get_completion([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_completion_uses_configured_model(monkeypatch):
    monkeypatch.setattr(settings, "LLM_API_KEY", "sk-test")
    monkeypatch.setattr(settings, "LLM_MODEL", "gpt-test")

    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = '{"cmd": "db:health"}'
    fake = MagicMock()
    fake.chat.completions.create = AsyncMock(return_value=response)

    with patch("src.inference.client.AsyncOpenAI", return_value=fake) as ctor:
        text = await get_completion([{"role": "user", "content": "health?"}], temperature=0)
        await get_completion([{"role": "user", "content": "again"}])

    assert text == '{"cmd": "db:health"}'
    ctor.assert_called_once()
    kwargs = fake.chat.completions.create.await_args_list[0].kwargs
    assert kwargs["model"] == "gpt-test"
    assert kwargs["temperature"] == 0


@pytest.mark.asyncio
async def test_empty_content_becomes_empty_string(monkeypatch):
    monkeypatch.setattr(settings, "LLM_API_KEY", "sk-test")
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = None
    fake = MagicMock()
    fake.chat.completions.create = AsyncMock(return_value=response)

    with patch("src.inference.client.AsyncOpenAI", return_value=fake):
        assert await get_completion([{"role": "user", "content": "x"}]) == ""
