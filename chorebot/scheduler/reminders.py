"""
Reminder scheduler: posts the chore reminder on a cron.

One built-in job, by default twice a day (08:00 and 18:00 in
SCHEDULER_TIMEZONE). Each firing:
  1. reads the chore state; if lastSent is already today, does nothing
  2. asks the agent for a reminder (a normal instruction through the loop)
  3. posts it to SLACK_REMINDER_CHANNEL, when one is configured
  4. stamps lastSent and writes the state back

lastSent is only stamped once Slack has accepted the message. If the
provider or the delivery fails the next firing tries again. Without a
reminder channel the reminder is only generated and logged, and is stamped
straight away.

Uses APScheduler AsyncIOScheduler so it runs inside the existing asyncio event
loop without spawning threads.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ..ai.agent import LoopOutcome
from ..config import settings
from ..exceptions import SlackDeliveryError
from ..utils.timefmt import same_local_date

if TYPE_CHECKING:
    from ..ai.agent import ChoreAgent
    from ..slack.client import SlackClient
    from ..state.store import ChoreStateStore

logger = logging.getLogger(__name__)


def _parse_cron(cron_str: str, tz: str | None = None) -> CronTrigger:
    """Parse a 5-field cron string into an APScheduler CronTrigger."""
    parts = cron_str.split()
    if len(parts) != 5:
        raise ValueError(f"Invalid cron string (expected 5 fields): {cron_str!r}")
    minute, hour, day, month, day_of_week = parts
    return CronTrigger(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=day_of_week,
        timezone=tz or settings.scheduler_timezone,
    )


class ReminderScheduler:
    """
    Wraps APScheduler and schedules the chore reminder.

    Usage:
        scheduler = ReminderScheduler(agent, store, slack_client)
        scheduler.start()
        # ... app runs ...
        scheduler.stop()
    """

    def __init__(
        self,
        agent: ChoreAgent,
        store: ChoreStateStore,
        slack_client: SlackClient | None = None,
        channel: str | None = None,
        cron: str | None = None,
        tz: str | None = None,
    ) -> None:
        self._agent = agent
        self._store = store
        self._slack = slack_client
        self._channel = channel if channel is not None else settings.slack_reminder_channel
        self._cron = cron or settings.reminder_cron
        self._tz = tz or settings.scheduler_timezone
        self._scheduler = AsyncIOScheduler()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        """Register the reminder job and start the scheduler."""
        try:
            trigger = _parse_cron(self._cron, self._tz)
        except ValueError as e:
            logger.error("Invalid cron config, scheduler not started: %s", e)
            return

        self._scheduler.add_job(
            self._reminder_job,
            trigger=trigger,
            id="chore_reminder",
            replace_existing=True,
            misfire_grace_time=3600,
        )
        self._scheduler.start()
        logger.info(
            "Reminder scheduler started, cron: %s (tz: %s), channel: %s",
            self._cron, self._tz, self._channel or "(none, generate only)",
        )

    def stop(self) -> None:
        """Gracefully shut down the scheduler."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler stopped")

    async def send_reminder_now(self) -> bool:
        """Fire the reminder immediately, subject to the once-a-day guard."""
        return await self.send_reminder()

    async def _reminder_job(self) -> None:
        try:
            await self.send_reminder()
        except Exception as e:
            logger.error("Scheduled reminder failed: %s", e, exc_info=True)

    def _sent_today(self, last_sent: str | None, now: datetime) -> bool:
        if not last_sent:
            return False
        try:
            return same_local_date(last_sent, now, self._tz)
        except ValueError:
            logger.warning("Unreadable lastSent %r, treating reminder as not sent", last_sent)
            return False

    async def send_reminder(self, now: datetime | None = None) -> bool:
        """
        Run one reminder cycle. Returns True when a reminder went out and
        lastSent was stamped, False when skipped or not delivered.
        """
        now = now or datetime.now(timezone.utc)
        state = await self._store.read()

        if self._sent_today(state.last_sent, now):
            logger.info("Reminder already sent today (%s), skipping", state.last_sent)
            return False

        result = await self._agent.generate_reminder()
        if result.outcome is not LoopOutcome.STOP:
            logger.warning("Reminder not generated (%s), will retry next run", result.outcome.value)
            return False
        text = result.text

        if self._channel:
            if self._slack is None:
                logger.warning("Reminder channel set but no Slack client; not stamping lastSent")
                return False
            try:
                await self._slack.post_message(self._channel, text)
            except SlackDeliveryError as e:
                logger.warning("Reminder delivery to %s failed, will retry next run: %s", self._channel, e)
                return False
        else:
            logger.info("Reminder generated (no channel configured): %s", text[:200])

        await self._store.mark_sent(now)
        logger.info("Reminder sent and lastSent stamped at %s", now.isoformat())
        return True
