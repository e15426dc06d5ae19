"""
Lightweight HTTP health endpoints.

Mounted on the main aiohttp app alongside the Slack webhook. Used by
container liveness/readiness probes.

Endpoints:
  GET /            → 200 {"service": "chorebot", "version": "..."}
  GET /health      → 200 {"status": "ok", "uptime_s": N}
  GET /ready       → 200 {"status": "ready"} or 503 {"status": "starting"}
"""

import logging
import time

from aiohttp import web

from . import __version__

logger = logging.getLogger(__name__)

_START_TIME = time.monotonic()
_READY = False  # flipped to True once the database and scheduler are up


def set_ready() -> None:
    """Call this once the database and scheduler are initialised."""
    global _READY
    _READY = True
    logger.info("Health server: marked ready")


async def _handle_health(request: web.Request) -> web.Response:
    uptime = int(time.monotonic() - _START_TIME)
    return web.json_response({"status": "ok", "uptime_s": uptime})


async def _handle_ready(request: web.Request) -> web.Response:
    if _READY:
        return web.json_response({"status": "ready"})
    return web.json_response({"status": "starting"}, status=503)


async def _handle_root(request: web.Request) -> web.Response:
    return web.json_response({"service": "chorebot", "version": __version__})


def add_health_routes(app: web.Application) -> None:
    app.router.add_get("/", _handle_root)
    app.router.add_get("/health", _handle_health)
    app.router.add_get("/ready", _handle_ready)
