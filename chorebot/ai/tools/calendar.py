"""Calendar tool executors."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...exceptions import CalendarError

if TYPE_CHECKING:
    from ...models import CreateCalendarEventArgs
    from .registry import ToolRegistry

logger = logging.getLogger(__name__)


async def exec_create_calendar_event(registry: ToolRegistry, args: CreateCalendarEventArgs) -> str:
    """Create a new event on Google Calendar."""
    if registry._calendar is None:
        return (
            "Google Calendar not configured. "
            "Set GCP_SERVICE_ACCOUNT to a service account key to enable events."
        )

    try:
        event = await registry._calendar.create_event(
            summary=args.summary,
            start_date_time=args.start_date_time,
            end_date_time=args.end_date_time,
            description=args.description,
        )
    except CalendarError as e:
        logger.warning("Calendar rejected event %r: %s", args.summary, e)
        return f"❌ Failed to create calendar event: {e}"
    except Exception as e:
        logger.error("Calendar creation error: %s", e, exc_info=True)
        return f"❌ Failed to create calendar event: {e}"

    link = event.get("htmlLink", "")
    reply = (
        f"📅 Calendar event created: \"{args.summary}\" "
        f"scheduled for {args.start_date_time} ({registry._calendar.timezone})"
    )
    if link:
        reply += f"\nLink: {link}"
    return reply
