"""
Tool registry package for OpenAI function calling.

- schemas.py: Tool schema definitions (OpenAI function format)
- registry.py: ToolRegistry class, argument validation and dispatch
- state.py: readState / updateState executors
- calendar.py: createCalendarEvent executor

Re-exports:
    ToolRegistry: Main class for dispatching tool calls
    TOOL_SCHEMAS: List of OpenAI tool schemas
"""

from .registry import ToolRegistry
from .schemas import TOOL_NAMES, TOOL_SCHEMAS

__all__ = ["ToolRegistry", "TOOL_SCHEMAS", "TOOL_NAMES"]
