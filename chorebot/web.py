"""
aiohttp application: Slack webhook, health probes and the chore state API.

Routes:
  POST    /slack              Slack Events API + slash commands
  GET     /health, /ready, /  health probes
  GET     /api/state          current chore state (read by the dashboard)
  POST    /api/state          replace the state (bearer token)
  POST    /api/state/backup   manual snapshot (bearer token)
  OPTIONS /api/state          CORS preflight
"""

from __future__ import annotations

import hmac
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from aiohttp import web

from .constants import MANUAL_BACKUP_PREFIX, UNAVAILABLE_DESCRIPTION
from .exceptions import AuthenticationError, StateValidationError
from .health import add_health_routes
from .models import ChoreState

if TYPE_CHECKING:
    from .slack.handlers import SlackWebhookHandler
    from .state.store import ChoreStateStore

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


class StateAPI:
    """HTTP face of the chore state store."""

    def __init__(self, store: ChoreStateStore, api_token: str = "") -> None:
        self._store = store
        self._api_token = api_token

    def _check_token(self, request: web.Request) -> None:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not hmac.compare_digest(
            token.strip().encode("utf-8"), self._api_token.encode("utf-8"),
        ):
            raise AuthenticationError("Invalid or missing API token")

    def _guard(self, request: web.Request) -> web.Response | None:
        if not self._api_token:
            return web.json_response(
                {"error": "state writes are disabled"}, status=403, headers=CORS_HEADERS,
            )
        try:
            self._check_token(request)
        except AuthenticationError as e:
            logger.warning("Rejected state API request from %s: %s", request.remote, e)
            return web.json_response({"error": "unauthorized"}, status=401, headers=CORS_HEADERS)
        return None

    async def get_state(self, request: web.Request) -> web.Response:
        try:
            state = await self._store.read()
        except Exception as e:
            logger.error("Error fetching chore state: %s", e, exc_info=True)
            fallback = ChoreState(
                description=UNAVAILABLE_DESCRIPTION,
                last_updated=datetime.now(timezone.utc).isoformat(),
            )
            return web.json_response(fallback.to_wire(), status=500, headers=CORS_HEADERS)
        return web.json_response(state.to_wire(), headers=CORS_HEADERS)

    async def post_state(self, request: web.Request) -> web.Response:
        if (denied := self._guard(request)) is not None:
            return denied
        try:
            payload = await request.json()
        except ValueError:
            return web.json_response({"error": "body must be JSON"}, status=400, headers=CORS_HEADERS)
        try:
            state = await self._store.write(payload)
        except StateValidationError as e:
            logger.info("Rejected state write: %s", e)
            return web.json_response(
                {"error": "Invalid state structure"}, status=400, headers=CORS_HEADERS,
            )
        return web.json_response(state.to_wire(), headers=CORS_HEADERS)

    async def post_backup(self, request: web.Request) -> web.Response:
        if (denied := self._guard(request)) is not None:
            return denied
        key = await self._store.backup()
        return web.json_response(
            {
                "success": True,
                "backupKey": key,
                "timestamp": key.removeprefix(MANUAL_BACKUP_PREFIX),
            },
            headers=CORS_HEADERS,
        )

    async def preflight(self, request: web.Request) -> web.Response:
        return web.Response(status=204, headers=CORS_HEADERS)


def build_app(
    store: ChoreStateStore,
    slack_handler: SlackWebhookHandler | None = None,
    api_token: str = "",
) -> web.Application:
    """Assemble the aiohttp application."""
    app = web.Application()
    add_health_routes(app)

    state_api = StateAPI(store, api_token)
    app.router.add_get("/api/state", state_api.get_state)
    app.router.add_post("/api/state", state_api.post_state)
    app.router.add_post("/api/state/backup", state_api.post_backup)
    app.router.add_route("OPTIONS", "/api/state", state_api.preflight)

    if slack_handler is not None:
        app.router.add_post("/slack", slack_handler.handle)
    return app
