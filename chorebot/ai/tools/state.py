"""Chore state tool executors."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...utils.timefmt import format_timestamp

if TYPE_CHECKING:
    from ...models import UpdateStateArgs
    from .registry import ToolRegistry

logger = logging.getLogger(__name__)


async def exec_read_state(registry: ToolRegistry) -> str:
    """Return the current description with its last-updated time."""
    state = await registry._store.read()
    when = format_timestamp(state.last_updated, registry._display_timezone)
    return (
        f"Current chore state (last updated: {when}; {state.last_updated}):\n\n"
        f"{state.description}"
    )


async def exec_update_state(registry: ToolRegistry, args: UpdateStateArgs) -> str:
    """Replace the stored description."""
    state = await registry._store.update_description(args.description)
    when = format_timestamp(state.last_updated, registry._display_timezone)
    logger.info("Chore state updated via tool call (%d chars)", len(args.description))
    return f"✅ Chore state updated successfully at {when}"
