"""
chorebot entry point.
Initialises all components and serves the Slack webhook until stopped.
"""

import asyncio
import logging
import os
import signal

from aiohttp import web

from .ai.agent import ChoreAgent
from .ai.openai_client import CompletionClient
from .ai.tools import ToolRegistry
from .config import settings
from .health import set_ready
from .logging_config import setup_logging
from .scheduler.reminders import ReminderScheduler
from .slack.client import SlackClient
from .slack.handlers import SlackWebhookHandler
from .state.database import DatabaseManager
from .state.store import ChoreStateStore
from .web import build_app

logger = logging.getLogger(__name__)


async def check_completion_provider(client: CompletionClient, consecutive_failures: int = 0) -> int:
    """Ping the provider once. Returns the updated consecutive failure count."""
    if await client.ping():
        if consecutive_failures:
            logger.info("Completion provider reachable again")
        return 0
    consecutive_failures += 1
    logger.warning("Completion provider health check failed (consecutive: %d)", consecutive_failures)
    return consecutive_failures


async def health_monitor(client: CompletionClient, interval: float = 300.0) -> None:
    """Periodic provider availability check every 5 minutes."""
    failures = 0
    while True:
        await asyncio.sleep(interval)
        failures = await check_completion_provider(client, failures)


def build_calendar_client():
    """Return a CalendarClient, or None when no service account is configured."""
    if not settings.calendar_enabled:
        logger.info("Google Calendar not configured; createCalendarEvent will report that")
        return None
    try:
        info = settings.gcp_service_account_info
    except (OSError, ValueError) as e:
        logger.warning("Could not load service account key, calendar disabled: %s", e)
        return None
    from .google.calendar import CalendarClient
    logger.info("Google Calendar integration enabled (calendar: %s)", settings.calendar_id)
    return CalendarClient(
        info,
        calendar_id=settings.calendar_id,
        timezone=settings.calendar_timezone,
    )


async def run() -> None:
    db = DatabaseManager()
    await db.init()
    store = ChoreStateStore(db, name=settings.state_name)

    completion_client = CompletionClient()
    tool_registry = ToolRegistry(
        store=store,
        calendar_client=build_calendar_client(),
        display_timezone=settings.scheduler_timezone,
    )
    agent = ChoreAgent(completion_client, tool_registry)
    slack_client = SlackClient()
    slack_handler = SlackWebhookHandler(agent, slack_client)

    if not settings.slack_signing_secret:
        logger.warning("SLACK_SIGNING_SECRET is empty; every Slack request will be rejected")
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is empty; the agent will answer with a failure message")

    app = build_app(store, slack_handler, api_token=settings.state_api_token)
    runner = web.AppRunner(app, access_log=None)
    await runner.setup()
    site = web.TCPSite(runner, settings.host, settings.port)
    await site.start()
    logger.info("Listening on http://%s:%d", settings.host, settings.port)

    scheduler = ReminderScheduler(agent, store, slack_client)
    scheduler.start()

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            pass  # Windows

    if not await completion_client.ping():
        logger.warning("Completion provider unreachable at startup; replies will fall back until it recovers")
    monitor = asyncio.create_task(health_monitor(completion_client))

    set_ready()
    logger.info("chorebot ready")

    try:
        await stop.wait()
    finally:
        logger.info("Shutting down")
        monitor.cancel()
        scheduler.stop()
        await slack_handler.drain()
        await runner.cleanup()
        await db.close()


def main() -> None:
    os.makedirs(settings.data_dir, exist_ok=True)
    setup_logging(settings.log_level, settings.logs_dir, settings.json_logs)
    logger.info("Starting chorebot (data_dir=%s)", settings.data_dir)
    asyncio.run(run())


if __name__ == "__main__":
    main()
