"""
Tool registry class and dispatch logic.

This module contains the ToolRegistry class which holds references to the
collaborators the tools need (state store, calendar client), validates tool
calls coming back from the completion provider and dispatches them.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from ...exceptions import ToolValidationError, UnknownOperationError
from ...models import TOOL_ARGUMENTS, ToolInvocation
from .schemas import TOOL_SCHEMAS

if TYPE_CHECKING:
    from ...google.calendar import CalendarClient
    from ...state.store import ChoreStateStore
    from ..openai_client import ToolCall

logger = logging.getLogger(__name__)


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
    return f"{loc}: {err.get('msg', 'invalid value')}"


class ToolRegistry:
    """
    Validates and dispatches tool calls from the completion provider.

    Dependencies are injected at construction time so tool executors have
    access to the correct instances.
    """

    def __init__(
        self,
        *,
        store: ChoreStateStore,
        calendar_client: CalendarClient | None = None,
        display_timezone: str = "UTC",
    ) -> None:
        self._store = store
        self._calendar = calendar_client
        self._display_timezone = display_timezone

    @property
    def schemas(self) -> list[dict]:
        """Return the list of OpenAI tool schemas."""
        return TOOL_SCHEMAS

    def parse_invocation(self, call: ToolCall) -> ToolInvocation:
        """
        Decode a raw provider tool call into a typed ToolInvocation.

        Raises UnknownOperationError for unregistered names and
        ToolValidationError for arguments that don't fit the tool's schema.
        """
        model = TOOL_ARGUMENTS.get(call.name)
        if model is None:
            raise UnknownOperationError(call.name)

        try:
            raw = json.loads(call.arguments or "{}")
        except json.JSONDecodeError as e:
            raise ToolValidationError(call.name, f"arguments are not valid JSON ({e.msg})") from e
        if not isinstance(raw, dict):
            raise ToolValidationError(call.name, "arguments must be a JSON object")

        try:
            arguments = model.model_validate(raw)
        except ValidationError as e:
            raise ToolValidationError(call.name, _first_error(e)) from e

        return ToolInvocation(id=call.id, name=call.name, arguments=arguments)

    async def execute(self, invocation: ToolInvocation) -> str:
        """Run one validated invocation. Exceptions from the tool propagate."""
        match invocation.name:
            case "readState":
                from .state import exec_read_state
                return await exec_read_state(self)
            case "updateState":
                from .state import exec_update_state
                return await exec_update_state(self, invocation.arguments)
            case "createCalendarEvent":
                from .calendar import exec_create_calendar_event
                return await exec_create_calendar_event(self, invocation.arguments)
            case _:
                raise UnknownOperationError(invocation.name)

    async def dispatch(self, call: ToolCall) -> str:
        """
        Parse and execute a tool call.
        Returns a string result suitable for feeding back as a tool message;
        failures come back as text, never as exceptions.
        """
        try:
            invocation = self.parse_invocation(call)
            return await self.execute(invocation)
        except UnknownOperationError as exc:
            logger.warning("Model requested unknown tool %r (id=%s)", call.name, call.id)
            return f"Error executing {call.name}: {exc}"
        except ToolValidationError as exc:
            logger.warning("Rejected arguments for %s (id=%s): %s", call.name, call.id, exc.detail)
            return f"Error executing {call.name}: {exc}"
        except Exception as exc:
            logger.error("Tool %s failed: %s", call.name, exc, exc_info=True)
            return f"Tool {call.name} encountered an error: {exc}"
