"""
Outbound Slack delivery.

Two ways back to Slack:
  - chat.postMessage with the bot token (mentions, DMs, reminders)
  - the per-command response_url (deferred slash command replies)
"""

import logging

import httpx

from ..config import settings
from ..exceptions import SlackDeliveryError
from .formatting import build_blocks

logger = logging.getLogger(__name__)


class SlackClient:
    """Client for the Slack Web API endpoints chorebot needs."""

    def __init__(
        self,
        token: str | None = None,
        api_base: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._token = (token or settings.slack_bot_token).strip()
        self._api_base = (api_base or settings.slack_api_base).rstrip("/")
        self._timeout = timeout or settings.slack_timeout

    async def post_message(self, channel: str, text: str, blocks: list[dict] | None = None) -> dict:
        """Post a message to a channel or DM. Raises SlackDeliveryError on failure."""
        if not self._token:
            raise SlackDeliveryError("Slack bot token not configured")

        payload: dict = {"channel": channel, "text": text}
        blocks = blocks if blocks is not None else build_blocks(text)
        if blocks:
            payload["blocks"] = blocks

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(
                    f"{self._api_base}/chat.postMessage",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self._token}",
                        "Content-Type": "application/json; charset=utf-8",
                    },
                )
            except httpx.HTTPError as e:
                raise SlackDeliveryError(f"chat.postMessage request failed: {e}") from e

        if response.status_code != 200:
            raise SlackDeliveryError(
                f"chat.postMessage HTTP {response.status_code}: {response.text}"
            )
        # Slack reports most failures as 200 with ok=false
        try:
            data = response.json()
        except ValueError as e:
            raise SlackDeliveryError(f"chat.postMessage returned a non-JSON body: {e}") from e
        if not isinstance(data, dict):
            raise SlackDeliveryError("chat.postMessage returned an unexpected body")
        if not data.get("ok"):
            raise SlackDeliveryError(f"chat.postMessage failed: {data.get('error', 'unknown_error')}")

        logger.info("Posted message to %s (%d chars)", channel, len(text))
        return data

    async def respond(self, response_url: str, text: str, response_type: str = "in_channel") -> None:
        """Deliver a deferred slash command reply to its response_url."""
        payload: dict = {"response_type": response_type, "text": text}
        blocks = build_blocks(text)
        if blocks:
            payload["blocks"] = blocks
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            try:
                response = await client.post(response_url, json=payload)
            except httpx.HTTPError as e:
                raise SlackDeliveryError(f"response_url request failed: {e}") from e

        if response.status_code != 200:
            raise SlackDeliveryError(
                f"response_url HTTP {response.status_code}: {response.text}"
            )
        logger.info("Delivered deferred command reply (%d chars)", len(text))
