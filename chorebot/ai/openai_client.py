"""
OpenAI-compatible chat completions client for chorebot.

Talks to any endpoint that speaks the /chat/completions protocol with
function tools (OpenAI itself by default). One request per call; there is
no retry here, a failed call surfaces as ProviderError.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

import httpx

from ..config import settings
from ..exceptions import ProviderError

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    """A tool call exactly as the provider sent it (arguments still a JSON string)."""
    id: str
    name: str
    arguments: str = "{}"

    def to_message(self) -> dict:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class Completion:
    """First choice of a chat completion response."""
    finish_reason: str | None
    content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)

    def assistant_message(self) -> dict:
        """The assistant turn to append to the conversation before tool results."""
        message: dict = {"role": "assistant", "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = [tc.to_message() for tc in self.tool_calls]
        return message


def _malformed(detail: str) -> ProviderError:
    return ProviderError(f"Malformed completion response: {detail}")


def parse_completion(data: dict) -> Completion:
    """Decode a /chat/completions JSON body into a Completion."""
    try:
        choice = data["choices"][0]
    except (KeyError, IndexError, TypeError) as e:
        raise _malformed(repr(e)) from e
    if not isinstance(choice, dict):
        raise _malformed("choice is not an object")

    message = choice.get("message") or {}
    if not isinstance(message, dict):
        raise _malformed("message is not an object")

    raw_calls = message.get("tool_calls") or []
    if not isinstance(raw_calls, list):
        raise _malformed("tool_calls is not a list")

    tool_calls: list[ToolCall] = []
    for raw in raw_calls:
        function = raw.get("function") if isinstance(raw, dict) else None
        if not isinstance(function, dict):
            raise _malformed("tool call without a function object")
        tool_calls.append(
            ToolCall(
                id=raw.get("id", ""),
                name=function.get("name", ""),
                arguments=function.get("arguments") or "{}",
            )
        )
    return Completion(
        finish_reason=choice.get("finish_reason"),
        content=message.get("content"),
        tool_calls=tool_calls,
    )


class CompletionClient:
    """Client for an OpenAI-compatible chat completions API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._api_key = (api_key or settings.openai_api_key).strip()
        self._base_url = (base_url or settings.openai_base_url).rstrip("/")
        self._model = model or settings.openai_model
        self._timeout = timeout or settings.openai_timeout

    @property
    def model(self) -> str:
        return self._model

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def complete(self, messages: list[dict], tools: list[dict] | None = None) -> Completion:
        """
        Run one chat completion round trip.

        Tools are offered with tool_choice="auto" so the model decides whether
        to answer directly or ask for tool calls.
        """
        if not self._api_key:
            raise ProviderError("OpenAI API key not configured")

        payload: dict = {"model": self._model, "messages": messages}
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(
                    f"{self._base_url}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                )
            except httpx.HTTPError as e:
                logger.error("Completion request failed: %s", e)
                raise ProviderError(f"Completion request failed: {e}") from e

        if response.status_code != 200:
            logger.error("Completion API error (%d): %s", response.status_code, response.text)
            raise ProviderError(
                f"Completion API error ({response.status_code})",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise ProviderError(f"Completion response was not JSON: {e}") from e

        completion = parse_completion(data)
        logger.debug(
            "Completion finish_reason=%s tool_calls=%d",
            completion.finish_reason, len(completion.tool_calls),
        )
        return completion

    async def ping(self) -> bool:
        """Lightweight availability check using the models list endpoint."""
        if not self._api_key:
            return False
        async with httpx.AsyncClient(timeout=5.0) as client:
            try:
                response = await client.get(f"{self._base_url}/models", headers=self._headers())
                return response.status_code == 200
            except httpx.HTTPError as e:
                logger.warning("Completion API availability check failed: %s", e)
                return False
