"""
Tests for the Gemini backend wrapper.

The google-genai client is replaced by a Mock whose
`aio.models.generate_content` is an AsyncMock, so the request configuration
and error mapping can be checked without network access.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest
from google.genai import errors as genai_errors
from google.genai import types

from leadintel.core.exceptions import BackendTimeoutError, ModelInvocationError
from leadintel.services.generative import PERMISSIVE_CATEGORIES, GeminiBackend


pytestmark = pytest.mark.asyncio


def make_client(text="{}", finish_reason="STOP"):
    client = Mock()
    response = Mock()
    response.text = text
    response.candidates = [Mock(finish_reason=finish_reason)]
    client.aio.models.generate_content = AsyncMock(return_value=response)
    client.aio.aclose = AsyncMock(return_value=None)
    return client


async def test_complete_returns_raw_text():
    client = make_client(text='```json\n{"tier1": {}}\n```')
    backend = GeminiBackend(client, model="gemini-1.5-flash")

    raw = await backend.complete("CFO departs Acme Corp")

    assert raw == '```json\n{"tier1": {}}\n```'
    kwargs = client.aio.models.generate_content.await_args.kwargs
    assert kwargs["model"] == "gemini-1.5-flash"
    assert kwargs["contents"].endswith("CFO departs Acme Corp")


async def test_request_config():
    client = make_client()
    backend = GeminiBackend(client, model="gemini-1.5-flash", temperature=0.2)

    await backend.complete("Acme news")

    config = client.aio.models.generate_content.await_args.kwargs["config"]
    assert config.temperature == 0.2
    assert config.response_mime_type == "application/json"
    assert config.response_schema is not None
    assert {s.category for s in config.safety_settings} == set(PERMISSIVE_CATEGORIES)
    assert all(s.threshold == types.HarmBlockThreshold.BLOCK_NONE for s in config.safety_settings)


async def test_empty_completion_passes_through():
    backend = GeminiBackend(make_client(text=None, finish_reason="SAFETY"), model="m")

    assert await backend.complete("Acme news") is None


async def test_api_error_maps_to_invocation_failure():
    client = make_client()
    client.aio.models.generate_content.side_effect = genai_errors.ClientError(
        429,
        {"error": {"code": 429, "message": "Resource exhausted", "status": "RESOURCE_EXHAUSTED"}},
    )
    backend = GeminiBackend(client, model="m")

    with pytest.raises(ModelInvocationError) as exc_info:
        await backend.complete("Acme news")

    assert exc_info.value.message.startswith("Google API Error: 429")
    assert exc_info.value.public_message == "Failed to analyze content. Please try again."


async def test_timeout():
    async def slow(**kwargs):
        await asyncio.sleep(5)

    client = make_client()
    client.aio.models.generate_content.side_effect = slow
    backend = GeminiBackend(client, model="m", timeout_seconds=0.01)

    with pytest.raises(BackendTimeoutError):
        await backend.complete("Acme news")


async def test_aclose_closes_async_client():
    client = make_client()

    await GeminiBackend(client, model="m").aclose()

    client.aio.aclose.assert_awaited_once()
