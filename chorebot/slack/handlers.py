"""
Slack webhook handling.

A single POST endpoint receives everything Slack sends us:
  - Events API callbacks (JSON): url_verification, mentions and DMs
  - Slash commands (form-encoded): /chores <instruction>

Every request is signature-checked before its body is even parsed. Work that
talks to the completion provider runs in a background task so Slack gets its
acknowledgement within the three-second window.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Coroutine
from urllib.parse import parse_qsl

from aiohttp import web

from ..config import settings
from ..constants import COMMAND_ACK, COMMAND_ERROR
from ..exceptions import AuthenticationError, SlackDeliveryError
from .formatting import parse_slack_text
from .signature import verify_slack_signature

if TYPE_CHECKING:
    from ..ai.agent import ChoreAgent
    from .client import SlackClient

logger = logging.getLogger(__name__)

# Slack redelivers an event if we don't ack quickly; remember what we've seen
_EVENT_TTL_S = 300


def decode_payload(body: bytes, content_type: str) -> dict[str, Any]:
    """Decode a Slack request body. Raises ValueError on anything that isn't an object."""
    text = body.decode("utf-8")
    if content_type == "application/x-www-form-urlencoded":
        return dict(parse_qsl(text, keep_blank_values=True))
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Slack payload must be a JSON object")
    return data


def is_bot_event(event: dict) -> bool:
    return bool(event.get("bot_id")) or event.get("subtype") == "bot_message"


def should_answer(event: dict) -> bool:
    """Mentions and direct messages get an answer; other channel chatter doesn't."""
    if event.get("subtype"):
        return False
    event_type = event.get("type")
    if event_type == "app_mention":
        return True
    if event_type == "message":
        text = event.get("text") or ""
        return "<@" in text or event.get("channel_type") == "im"
    return False


class SlackWebhookHandler:
    """
    aiohttp handler for the /slack endpoint.

    Usage:
        handler = SlackWebhookHandler(agent, slack_client)
        app.router.add_post("/slack", handler.handle)
    """

    def __init__(
        self,
        agent: ChoreAgent,
        slack_client: SlackClient,
        signing_secret: str | None = None,
        command: str | None = None,
        defer_commands: bool | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._agent = agent
        self._slack = slack_client
        self._signing_secret = signing_secret if signing_secret is not None else settings.slack_signing_secret
        self._command = command or settings.slack_command
        self._defer_commands = settings.slack_defer_commands if defer_commands is None else defer_commands
        self._clock = clock
        self._seen: dict[str, float] = {}
        self._tasks: set[asyncio.Task] = set()

    async def handle(self, request: web.Request) -> web.Response:
        body = await request.read()
        try:
            verify_slack_signature(
                body,
                request.headers.get("X-Slack-Request-Timestamp"),
                request.headers.get("X-Slack-Signature"),
                self._signing_secret,
            )
        except AuthenticationError as e:
            logger.warning("Rejected Slack request: %s", e)
            return web.Response(status=401, text="Unauthorized")

        try:
            payload = decode_payload(body, request.content_type)
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning("Undecodable Slack payload: %s", e)
            return web.Response(status=400, text="Bad Request")

        if payload.get("type") == "url_verification":
            logger.info("Answering Slack URL verification challenge")
            return web.Response(text=str(payload.get("challenge", "")), content_type="text/plain")

        if "command" in payload:
            if payload["command"] != self._command:
                logger.info("Ignoring unknown slash command %s", payload["command"])
                return web.Response(text="OK")
            return await self._handle_command(payload)

        if payload.get("type") == "event_callback":
            return self._handle_event(payload)

        logger.debug("Unhandled Slack payload type %r", payload.get("type"))
        return web.Response(text="OK")

    async def drain(self) -> None:
        """Wait for in-flight background work (used at shutdown and in tests)."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------ #
    # Slash commands                                                      #
    # ------------------------------------------------------------------ #

    async def _handle_command(self, payload: dict) -> web.Response:
        text = (payload.get("text") or "").strip()
        response_url = payload.get("response_url") or ""
        logger.info(
            "Slash command from %s in %s: %r",
            payload.get("user_name", "?"), payload.get("channel_name", "?"), text[:100],
        )

        if self._defer_commands and response_url:
            self._spawn(self._run_deferred_command(text, response_url))
            return web.json_response({"response_type": "ephemeral", "text": COMMAND_ACK})

        try:
            reply = await self._agent.process_command(text)
        except Exception as e:
            logger.error("Error processing slash command: %s", e, exc_info=True)
            return web.json_response({"response_type": "ephemeral", "text": COMMAND_ERROR})
        return web.json_response({"response_type": "in_channel", "text": reply})

    async def _run_deferred_command(self, text: str, response_url: str) -> None:
        try:
            reply = await self._agent.process_command(text)
            await self._slack.respond(response_url, reply, "in_channel")
        except Exception as e:
            logger.error("Deferred slash command failed: %s", e, exc_info=True)
            try:
                await self._slack.respond(response_url, COMMAND_ERROR, "ephemeral")
            except SlackDeliveryError as delivery_error:
                logger.warning("Could not report command failure: %s", delivery_error)

    # ------------------------------------------------------------------ #
    # Events API                                                          #
    # ------------------------------------------------------------------ #

    def _handle_event(self, payload: dict) -> web.Response:
        event = payload.get("event") or {}

        if is_bot_event(event):
            logger.debug("Ignoring bot message")
            return web.Response(text="OK")
        if not should_answer(event):
            logger.debug("Event %s not addressed to the bot", event.get("type"))
            return web.Response(text="OK")

        # app_mention and message both fire for one mention; they share channel+ts
        keys = [k for k in (payload.get("event_id"), f"{event.get('channel')}:{event.get('ts')}") if k]
        if self._already_seen(keys):
            logger.info("Skipping duplicate Slack event %s", payload.get("event_id"))
            return web.Response(text="OK")

        channel = event.get("channel")
        if not channel:
            return web.Response(text="OK")

        self._spawn(self._answer_event(event.get("text") or "", event.get("user"), channel))
        return web.Response(text="OK")

    async def _answer_event(self, raw_text: str, user: str | None, channel: str) -> None:
        text, _ = parse_slack_text(raw_text)
        try:
            reply = await self._agent.process_message(text, user)
            await self._slack.post_message(channel, reply)
        except Exception as e:
            logger.error("Error handling Slack event in %s: %s", channel, e, exc_info=True)

    def _already_seen(self, keys: list[str]) -> bool:
        now = self._clock()
        for key, seen_at in list(self._seen.items()):
            if now - seen_at > _EVENT_TTL_S:
                del self._seen[key]
        duplicate = any(key in self._seen for key in keys)
        for key in keys:
            self._seen[key] = now
        return duplicate

    def _spawn(self, coro: Coroutine) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
