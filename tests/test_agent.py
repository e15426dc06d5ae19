"""
Tests for chorebot/ai/agent.py: the bounded tool-calling loop.

The completion client is a scripted fake; the tool registry is real and
backed by a temp-file store so state mutations can be checked.
"""

from __future__ import annotations

import json
from datetime import datetime

import pytest
from unittest.mock import AsyncMock, MagicMock

from chorebot.ai.agent import ChoreAgent, LoopOutcome
from chorebot.ai.openai_client import Completion, ToolCall
from chorebot.ai.tools import ToolRegistry
from chorebot.constants import (
    EMPTY_REPLY_FALLBACK,
    LENGTH_LIMIT_REPLY,
    MULTI_STEP_FALLBACK,
    PROVIDER_FAILURE_REPLY,
)
from chorebot.exceptions import CalendarError, ProviderError


# --------------------------------------------------------------------------- #
# Helpers                                                                      #
# --------------------------------------------------------------------------- #

def stop(text: str | None) -> Completion:
    return Completion(finish_reason="stop", content=text)


def tools(*calls: ToolCall) -> Completion:
    return Completion(finish_reason="tool_calls", content=None, tool_calls=list(calls))


def tool_call(name: str, arguments: dict | None = None, call_id: str = "call_1") -> ToolCall:
    return ToolCall(id=call_id, name=name, arguments=json.dumps(arguments or {}))


def scripted_client(*responses) -> MagicMock:
    client = MagicMock()
    client.complete = AsyncMock(side_effect=list(responses))
    return client


def make_agent(client, store, calendar=None) -> ChoreAgent:
    registry = ToolRegistry(store=store, calendar_client=calendar)
    return ChoreAgent(client, registry, max_iterations=5, command_name="/chores")


# --------------------------------------------------------------------------- #
# Terminal outcomes                                                            #
# --------------------------------------------------------------------------- #

@pytest.mark.asyncio
async def test_direct_answer_makes_no_tool_calls_or_writes(store):
    before = await store.read()
    client = scripted_client(stop("Alice is on bins this week."))
    agent = make_agent(client, store)

    result = await agent.run("who is on bins?")

    assert result.outcome is LoopOutcome.STOP
    assert result.text == "Alice is on bins this week."
    assert result.rounds == 1
    assert result.tool_calls == 0
    assert await store.read() == before


@pytest.mark.asyncio
async def test_empty_stop_uses_fallback(store):
    agent = make_agent(scripted_client(stop("")), store)
    result = await agent.run("thanks")
    assert result.text == EMPTY_REPLY_FALLBACK


@pytest.mark.asyncio
async def test_length_finish(store):
    agent = make_agent(scripted_client(Completion(finish_reason="length")), store)
    result = await agent.run("a very long story")
    assert result.outcome is LoopOutcome.LENGTH_LIMIT
    assert result.text == LENGTH_LIMIT_REPLY


@pytest.mark.asyncio
async def test_unexpected_finish_reason(store):
    agent = make_agent(scripted_client(Completion(finish_reason="content_filter")), store)
    result = await agent.run("hmm")
    assert result.outcome is LoopOutcome.UNEXPECTED_FINISH
    assert result.text == MULTI_STEP_FALLBACK


@pytest.mark.asyncio
async def test_tool_calls_without_calls_is_unexpected(store):
    agent = make_agent(scripted_client(Completion(finish_reason="tool_calls")), store)
    result = await agent.run("hmm")
    assert result.outcome is LoopOutcome.UNEXPECTED_FINISH


@pytest.mark.asyncio
async def test_provider_failure(store):
    client = scripted_client(ProviderError("Completion API error (500)", status_code=500))
    agent = make_agent(client, store)
    result = await agent.run("who is on bins?")
    assert result.outcome is LoopOutcome.PROVIDER_FAILURE
    assert result.text == PROVIDER_FAILURE_REPLY


@pytest.mark.asyncio
async def test_malformed_completion_ends_as_provider_failure(store):
    from chorebot.ai.openai_client import parse_completion

    def complete(*_args, **_kwargs):
        return parse_completion({"choices": [{"finish_reason": "tool_calls", "message": {"tool_calls": [None]}}]})

    client = MagicMock()
    client.complete = AsyncMock(side_effect=complete)
    agent = make_agent(client, store)

    result = await agent.run("who is on bins?")
    assert result.outcome is LoopOutcome.PROVIDER_FAILURE
    assert result.text == PROVIDER_FAILURE_REPLY


@pytest.mark.asyncio
async def test_iteration_cap(store):
    client = MagicMock()
    client.complete = AsyncMock(return_value=tools(tool_call("readState")))
    agent = make_agent(client, store)

    result = await agent.run("loop forever")

    assert client.complete.await_count == 5
    assert result.outcome is LoopOutcome.ITERATION_EXCEEDED
    assert result.text == MULTI_STEP_FALLBACK
    assert result.tool_calls == 5


# --------------------------------------------------------------------------- #
# Tool rounds                                                                  #
# --------------------------------------------------------------------------- #

@pytest.mark.asyncio
async def test_update_then_answer(store):
    before = await store.read()
    client = scripted_client(
        tools(tool_call("readState", call_id="a")),
        tools(tool_call("updateState", {"description": "Alice: trash, Bob: dishes"}, call_id="b")),
        stop("Done, Bob has dishes now."),
    )
    agent = make_agent(client, store)

    result = await agent.run("give Bob the dishes")

    assert result.outcome is LoopOutcome.STOP
    assert result.rounds == 3
    assert result.tool_calls == 2
    after = await store.read()
    assert after.description == "Alice: trash, Bob: dishes"
    assert datetime.fromisoformat(after.last_updated) > datetime.fromisoformat(before.last_updated)


@pytest.mark.asyncio
async def test_tool_results_are_fed_back_in_order(store):
    client = scripted_client(
        tools(tool_call("readState", call_id="a"), tool_call("nope", call_id="b")),
        stop("ok"),
    )
    agent = make_agent(client, store)

    await agent.run("status")

    messages = client.complete.await_args_list[1].args[0]
    assert messages[0]["role"] == "system"
    assert messages[1] == {"role": "user", "content": "status"}
    assistant = messages[2]
    assert assistant["role"] == "assistant"
    assert [tc["id"] for tc in assistant["tool_calls"]] == ["a", "b"]
    assert messages[3]["role"] == "tool" and messages[3]["tool_call_id"] == "a"
    assert messages[3]["content"].startswith("Current chore state")
    assert messages[4]["tool_call_id"] == "b"
    assert messages[4]["content"] == "Error executing nope: Unknown function: nope"


@pytest.mark.asyncio
async def test_calendar_failure_still_reaches_terminal_answer(store):
    calendar = MagicMock()
    calendar.timezone = "America/New_York"
    calendar.create_event = AsyncMock(side_effect=CalendarError("Calendar API error (500): boom"))
    client = scripted_client(
        tools(tool_call("createCalendarEvent", {
            "summary": "Bins",
            "startDateTime": "2026-10-19T19:00:00",
            "endDateTime": "2026-10-19T19:15:00",
        })),
        stop("I couldn't add that to the calendar."),
    )
    agent = make_agent(client, store, calendar=calendar)

    result = await agent.run("remind us about bins")

    assert result.outcome is LoopOutcome.STOP
    tool_message = client.complete.await_args_list[1].args[0][-1]
    assert tool_message["content"].startswith("❌ Failed to create calendar event")


# --------------------------------------------------------------------------- #
# Entry points                                                                 #
# --------------------------------------------------------------------------- #

@pytest.mark.asyncio
async def test_process_command_prefixes_instruction(store):
    client = scripted_client(stop("ok"))
    agent = make_agent(client, store)

    reply = await agent.process_command("swap Alice and Bob")

    assert reply == "ok"
    user = client.complete.await_args.args[0][1]["content"]
    assert user == "Slash command: /chores swap Alice and Bob"


@pytest.mark.asyncio
async def test_process_message_names_user(store):
    client = scripted_client(stop("ok"), stop("ok"))
    agent = make_agent(client, store)

    await agent.process_message("who has bins?", "U123")
    assert client.complete.await_args.args[0][1]["content"] == "Message from user U123: who has bins?"

    await agent.process_message("and dishes?")
    assert client.complete.await_args.args[0][1]["content"] == "Message from user unknown: and dishes?"


@pytest.mark.asyncio
async def test_generate_reminder_uses_reminder_instruction(store):
    from chorebot.ai.prompts import REMINDER_INSTRUCTION

    client = scripted_client(stop("Alice: bins today"))
    agent = make_agent(client, store)

    result = await agent.generate_reminder()
    assert result.text == "Alice: bins today"
    assert result.outcome is LoopOutcome.STOP
    assert client.complete.await_args.args[0][1]["content"] == REMINDER_INSTRUCTION


@pytest.mark.asyncio
async def test_tools_are_offered_every_round(store):
    client = scripted_client(tools(tool_call("readState")), stop("ok"))
    agent = make_agent(client, store)
    await agent.run("status")
    for awaited in client.complete.await_args_list:
        assert len(awaited.args[1]) == 3
