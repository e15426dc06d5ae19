"""
Fire the chore reminder once, outside the cron schedule.

Honours the once-a-day guard: if a reminder already went out today this
prints "skipped" and exits.

Usage:
    python3 scripts/send_reminder.py
"""

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chorebot.ai.agent import ChoreAgent  # noqa: E402
from chorebot.ai.openai_client import CompletionClient  # noqa: E402
from chorebot.ai.tools import ToolRegistry  # noqa: E402
from chorebot.config import settings  # noqa: E402
from chorebot.logging_config import setup_logging  # noqa: E402
from chorebot.main import build_calendar_client  # noqa: E402
from chorebot.scheduler.reminders import ReminderScheduler  # noqa: E402
from chorebot.slack.client import SlackClient  # noqa: E402
from chorebot.state.database import DatabaseManager  # noqa: E402
from chorebot.state.store import ChoreStateStore  # noqa: E402


async def main() -> None:
    db = DatabaseManager()
    await db.init()
    try:
        store = ChoreStateStore(db, name=settings.state_name)
        registry = ToolRegistry(
            store=store,
            calendar_client=build_calendar_client(),
            display_timezone=settings.scheduler_timezone,
        )
        agent = ChoreAgent(CompletionClient(), registry)
        scheduler = ReminderScheduler(agent, store, SlackClient())
        sent = await scheduler.send_reminder_now()
    finally:
        await db.close()
    print("sent" if sent else "skipped")


if __name__ == "__main__":
    setup_logging(settings.log_level, settings.logs_dir, settings.json_logs)
    asyncio.run(main())
