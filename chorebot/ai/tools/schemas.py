"""
Tool schema definitions for OpenAI function calling.

Each tool must have:
- type: "function"
- function.name: unique identifier matching the ToolRegistry dispatch
- function.description: explanation for the model of when to use this tool
- function.parameters: JSON Schema object describing the arguments

The list is static; it is sent unchanged with every completion request.
"""

from __future__ import annotations

TOOL_SCHEMAS: list[dict] = [
    {
        "type": "function",
        "function": {
            "name": "readState",
            "description": (
                "Read the current chore state description - a comprehensive text "
                "description of the household chore situation."
            ),
            "parameters": {
                "type": "object",
                "properties": {},
                "required": [],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "updateState",
            "description": (
                "Update the chore state with a new comprehensive description of the "
                "household chore situation. Replaces the previous description entirely."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "description": {
                        "type": "string",
                        "description": (
                            "A detailed text description of the current chore state including "
                            "who is responsible, rotation order, specific chores, schedules, "
                            "temporary arrangements, etc."
                        ),
                    },
                },
                "required": ["description"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "createCalendarEvent",
            "description": "Create a calendar event for chore reminders or scheduling.",
            "parameters": {
                "type": "object",
                "properties": {
                    "summary": {
                        "type": "string",
                        "description": "Event title/summary",
                    },
                    "description": {
                        "type": "string",
                        "description": "Event description with chore details",
                    },
                    "startDateTime": {
                        "type": "string",
                        "description": "ISO 8601 datetime string for event start",
                    },
                    "endDateTime": {
                        "type": "string",
                        "description": "ISO 8601 datetime string for event end",
                    },
                },
                "required": ["summary", "startDateTime", "endDateTime"],
            },
        },
    },
]

TOOL_NAMES: frozenset[str] = frozenset(s["function"]["name"] for s in TOOL_SCHEMAS)
