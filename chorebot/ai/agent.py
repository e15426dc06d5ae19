"""
Chore agent: the bounded tool-calling loop.

An instruction (slash command, mention, scheduled reminder) goes in, text
comes out. In between the agent asks the completion provider what to do,
runs any requested tools through the ToolRegistry and feeds the results
back, until the provider stops, runs out of length, or the iteration cap
is reached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..config import settings
from ..constants import (
    EMPTY_REPLY_FALLBACK,
    LENGTH_LIMIT_REPLY,
    MULTI_STEP_FALLBACK,
    PROVIDER_FAILURE_REPLY,
)
from ..exceptions import ProviderError
from .prompts import REMINDER_INSTRUCTION, build_system_prompt

if TYPE_CHECKING:
    from .openai_client import CompletionClient
    from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class LoopOutcome(Enum):
    STOP = "stop"
    LENGTH_LIMIT = "length_limit"
    ITERATION_EXCEEDED = "iteration_exceeded"
    UNEXPECTED_FINISH = "unexpected_finish"
    PROVIDER_FAILURE = "provider_failure"


@dataclass
class LoopResult:
    text: str
    outcome: LoopOutcome
    rounds: int = 0       # completion round trips made
    tool_calls: int = 0   # tool invocations dispatched


class ChoreAgent:
    """
    Drives the conversation with the completion provider.

    Usage:
        agent = ChoreAgent(completion_client, tool_registry)
        reply = await agent.process_command("swap Alice and Bob this week")
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        tool_registry: ToolRegistry,
        max_iterations: int | None = None,
        command_name: str | None = None,
    ) -> None:
        self._client = completion_client
        self._tools = tool_registry
        self._max_iterations = max_iterations or settings.max_tool_iterations
        self._command_name = command_name or settings.slack_command

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    async def process_command(self, text: str) -> str:
        result = await self.run(f"Slash command: {self._command_name} {text}".rstrip())
        return result.text

    async def process_message(self, text: str, user_id: str | None = None) -> str:
        result = await self.run(f"Message from user {user_id or 'unknown'}: {text}")
        return result.text

    async def generate_reminder(self) -> LoopResult:
        """Run the reminder instruction. The outcome tells callers whether the text is usable."""
        return await self.run(REMINDER_INSTRUCTION)

    async def run(self, user_message: str) -> LoopResult:
        """
        Run the loop for one instruction.

        Terminal outcomes:
          stop                → the model's text (or a fallback when empty)
          length              → ask the caller to restate
          anything else / cap → generic multi-step fallback
          ProviderError       → technical-difficulties message
        """
        messages: list[dict] = [
            {"role": "system", "content": build_system_prompt()},
            {"role": "user", "content": user_message},
        ]
        tools = self._tools.schemas
        rounds = 0
        tool_calls = 0

        while rounds < self._max_iterations:
            rounds += 1
            logger.debug(
                "Agent iteration %d/%d, messages=%d",
                rounds, self._max_iterations, len(messages),
            )

            try:
                completion = await self._client.complete(messages, tools)
            except ProviderError as e:
                logger.error("Agent loop aborted after %d round(s): %s", rounds, e)
                return LoopResult(PROVIDER_FAILURE_REPLY, LoopOutcome.PROVIDER_FAILURE, rounds, tool_calls)

            finish_reason = completion.finish_reason

            if finish_reason == "stop":
                text = completion.content or EMPTY_REPLY_FALLBACK
                return LoopResult(text, LoopOutcome.STOP, rounds, tool_calls)

            if finish_reason == "tool_calls" and completion.tool_calls:
                messages.append(completion.assistant_message())
                for call in completion.tool_calls:
                    logger.info("Executing tool %s (id=%s)", call.name, call.id)
                    output = await self._tools.dispatch(call)
                    tool_calls += 1
                    messages.append({
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": output,
                    })
                continue

            if finish_reason == "length":
                return LoopResult(LENGTH_LIMIT_REPLY, LoopOutcome.LENGTH_LIMIT, rounds, tool_calls)

            logger.warning("Unexpected finish_reason %r, ending loop", finish_reason)
            return LoopResult(MULTI_STEP_FALLBACK, LoopOutcome.UNEXPECTED_FINISH, rounds, tool_calls)

        logger.warning("Agent loop hit max iterations (%d)", self._max_iterations)
        return LoopResult(MULTI_STEP_FALLBACK, LoopOutcome.ITERATION_EXCEEDED, rounds, tool_calls)
