"""LLM client tests."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from litellm.exceptions import APIConnectionError, AuthenticationError, RateLimitError

from morpheus.llm import (
    LLMAuthenticationError,
    LLMClient,
    LLMConnectionError,
    LLMRateLimitError,
)


@pytest.fixture
def mock_completion():
    """Mock litellm completion response."""
    with patch("morpheus.llm.client.acompletion") as mock:
        mock.return_value = AsyncMock(
            choices=[
                AsyncMock(
                    message=AsyncMock(content="Test response")
                )
            ]
        )
        yield mock


async def test_llm_client_generates_response(mock_completion):
    """LLM client generates response from prompt."""
    client = LLMClient(provider="openai", model="gpt-4o")

    response = await client.generate("Test prompt")

    assert response == "Test response"
    mock_completion.assert_called_once()


async def test_llm_client_uses_configured_model(mock_completion):
    """LLM client uses configured provider and model."""
    client = LLMClient(provider="anthropic", model="claude-3-sonnet")

    await client.generate("Test")

    call_args = mock_completion.call_args
    assert call_args.kwargs["model"] == "anthropic/claude-3-sonnet"


async def test_llm_client_passes_system_prompt(mock_completion):
    """LLM client includes system prompt in messages."""
    client = LLMClient(provider="openai", model="gpt-4o")

    await client.generate(
        "User message",
        system_prompt="You are a tag extraction system",
    )

    messages = mock_completion.call_args.kwargs["messages"]
    assert messages[0] == {"role": "system", "content": "You are a tag extraction system"}
    assert messages[1] == {"role": "user", "content": "User message"}


async def test_llm_client_uses_constructor_defaults(mock_completion):
    """Temperature and token cap fall back to the values given at construction."""
    client = LLMClient(provider="openai", model="gpt-4o", default_temperature=0.2, max_tokens=99)

    await client.generate("Test")

    call_args = mock_completion.call_args
    assert call_args.kwargs["temperature"] == 0.2
    assert call_args.kwargs["max_tokens"] == 99


async def test_llm_client_ollama_uses_endpoint(mock_completion):
    """Ollama calls are prefixed and routed to the configured endpoint."""
    client = LLMClient(provider="ollama", model="llama3", endpoint="http://gpu-box:11434")

    await client.generate("Test")

    call_args = mock_completion.call_args
    assert call_args.kwargs["model"] == "ollama/llama3"
    assert call_args.kwargs["api_base"] == "http://gpu-box:11434"


async def test_llm_client_raises_authentication_error():
    """LLM client raises LLMAuthenticationError on auth failure."""
    with patch("morpheus.llm.client.acompletion") as mock:
        mock.side_effect = AuthenticationError(
            message="Invalid API key",
            llm_provider="openai",
            model="gpt-4o",
        )
        client = LLMClient(provider="openai", model="gpt-4o")

        with pytest.raises(LLMAuthenticationError) as exc_info:
            await client.generate("Test")

        assert "Authentication failed" in str(exc_info.value)


async def test_llm_client_raises_rate_limit_error():
    """LLM client raises LLMRateLimitError on rate limit."""
    with patch("morpheus.llm.client.acompletion") as mock:
        mock.side_effect = RateLimitError(
            message="Rate limit exceeded",
            llm_provider="openai",
            model="gpt-4o",
        )
        client = LLMClient(provider="openai", model="gpt-4o")

        with pytest.raises(LLMRateLimitError):
            await client.generate("Test")


async def test_llm_client_raises_connection_error():
    """LLM client raises LLMConnectionError when the provider is unreachable."""
    with patch("morpheus.llm.client.acompletion") as mock:
        mock.side_effect = APIConnectionError(
            message="Connection refused",
            llm_provider="ollama",
            model="llama3",
        )
        client = LLMClient(provider="ollama", model="llama3")

        with pytest.raises(LLMConnectionError):
            await client.generate("Test")


async def test_llm_client_logs_queries(mock_completion, tmp_path):
    """Each call is appended to the JSONL query log."""
    log_path = tmp_path / "logs" / "llm-queries.jsonl"
    client = LLMClient(provider="openai", model="gpt-4o", log_path=log_path)

    await client.generate("First")
    await client.generate("Second")

    entries = [json.loads(line) for line in log_path.read_text().splitlines()]
    assert len(entries) == 2
    assert entries[0]["request"]["messages"][-1]["content"] == "First"
    assert entries[1]["response"] == "Test response"
    assert entries[1]["error"] is None


async def test_llm_client_logs_failures(tmp_path):
    log_path = tmp_path / "llm.jsonl"
    with patch("morpheus.llm.client.acompletion") as mock:
        mock.side_effect = RateLimitError(
            message="slow down", llm_provider="openai", model="gpt-4o"
        )
        client = LLMClient(provider="openai", model="gpt-4o", log_path=log_path)

        with pytest.raises(LLMRateLimitError):
            await client.generate("Test")

    [entry] = [json.loads(line) for line in log_path.read_text().splitlines()]
    assert entry["response"] is None
    assert "slow down" in entry["error"]
