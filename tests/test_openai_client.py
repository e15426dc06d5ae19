"""
Tests for chorebot/ai/openai_client.py.

httpx.AsyncClient is patched; no network calls are made.
"""

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from chorebot.ai.openai_client import Completion, CompletionClient, ToolCall, parse_completion
from chorebot.exceptions import ProviderError


def make_response(status_code: int = 200, data: dict | None = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = "error body"
    response.json.return_value = data or {}
    return response


TOOL_RESPONSE = {
    "choices": [{
        "finish_reason": "tool_calls",
        "message": {
            "role": "assistant",
            "content": None,
            "tool_calls": [{
                "id": "call_abc",
                "type": "function",
                "function": {"name": "updateState", "arguments": '{"description": "x"}'},
            }],
        },
    }],
}


# --------------------------------------------------------------------------- #
# parse_completion                                                             #
# --------------------------------------------------------------------------- #

def test_parse_stop():
    completion = parse_completion({
        "choices": [{"finish_reason": "stop", "message": {"content": "hello"}}],
    })
    assert completion.finish_reason == "stop"
    assert completion.content == "hello"
    assert completion.tool_calls == []


def test_parse_tool_calls():
    completion = parse_completion(TOOL_RESPONSE)
    assert completion.finish_reason == "tool_calls"
    assert completion.tool_calls == [
        ToolCall(id="call_abc", name="updateState", arguments='{"description": "x"}'),
    ]


@pytest.mark.parametrize("body", [
    {},
    {"choices": []},
    {"choices": None},
    {"choices": [None]},
    {"choices": [{"finish_reason": "stop", "message": "hi"}]},
    {"choices": [{"finish_reason": "tool_calls", "message": {"tool_calls": ["x"]}}]},
    {"choices": [{"finish_reason": "tool_calls", "message": {"tool_calls": {"id": "c1"}}}]},
    [],
])
def test_parse_malformed(body):
    with pytest.raises(ProviderError):
        parse_completion(body)


def test_assistant_message_carries_tool_calls():
    completion = Completion(
        finish_reason="tool_calls",
        tool_calls=[ToolCall(id="c1", name="readState")],
    )
    message = completion.assistant_message()
    assert message["role"] == "assistant"
    assert message["tool_calls"] == [{
        "id": "c1",
        "type": "function",
        "function": {"name": "readState", "arguments": "{}"},
    }]


def test_assistant_message_without_tool_calls():
    message = Completion(finish_reason="stop", content="hi").assistant_message()
    assert message == {"role": "assistant", "content": "hi"}


# --------------------------------------------------------------------------- #
# CompletionClient.complete                                                    #
# --------------------------------------------------------------------------- #

@pytest.mark.asyncio
async def test_complete_posts_tools_with_auto_choice():
    client = CompletionClient(api_key="sk-test", base_url="https://llm.example/v1/", model="m1")
    tools = [{"type": "function", "function": {"name": "readState"}}]

    with patch("httpx.AsyncClient") as mock_client:
        post = AsyncMock(return_value=make_response(200, TOOL_RESPONSE))
        mock_client.return_value.__aenter__.return_value.post = post

        completion = await client.complete([{"role": "user", "content": "hi"}], tools)

    assert completion.finish_reason == "tool_calls"
    url = post.await_args.args[0]
    assert url == "https://llm.example/v1/chat/completions"
    payload = post.await_args.kwargs["json"]
    assert payload["model"] == "m1"
    assert payload["tools"] == tools
    assert payload["tool_choice"] == "auto"
    assert post.await_args.kwargs["headers"]["Authorization"] == "Bearer sk-test"


@pytest.mark.asyncio
async def test_complete_without_key_raises():
    client = CompletionClient(api_key=" ")
    with pytest.raises(ProviderError):
        await client.complete([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_complete_http_error_status():
    client = CompletionClient(api_key="sk-test")
    with patch("httpx.AsyncClient") as mock_client:
        mock_client.return_value.__aenter__.return_value.post = AsyncMock(
            return_value=make_response(429)
        )
        with pytest.raises(ProviderError) as exc_info:
            await client.complete([{"role": "user", "content": "hi"}])
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_complete_transport_error():
    client = CompletionClient(api_key="sk-test")
    with patch("httpx.AsyncClient") as mock_client:
        mock_client.return_value.__aenter__.return_value.post = AsyncMock(
            side_effect=httpx.ConnectError("refused")
        )
        with pytest.raises(ProviderError):
            await client.complete([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_complete_malformed_body_raises_provider_error():
    client = CompletionClient(api_key="sk-test")
    with patch("httpx.AsyncClient") as mock_client:
        mock_client.return_value.__aenter__.return_value.post = AsyncMock(
            return_value=make_response(200, {"choices": [{"message": "not an object"}]})
        )
        with pytest.raises(ProviderError):
            await client.complete([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_ping():
    client = CompletionClient(api_key="sk-test")
    with patch("httpx.AsyncClient") as mock_client:
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(
            return_value=make_response(200)
        )
        assert await client.ping() is True
