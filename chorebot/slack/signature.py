"""
Slack request signing (v0).

Slack signs every webhook with HMAC-SHA256 over "v0:<timestamp>:<raw body>"
using the app's signing secret. Requests older than five minutes are refused
to stop replays.
"""

import hashlib
import hmac
import time

from ..exceptions import AuthenticationError

SIGNATURE_VERSION = "v0"
MAX_REQUEST_AGE_S = 300


def compute_signature(secret: str, timestamp: str, body: bytes) -> str:
    basestring = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + body
    digest = hmac.new(secret.encode("utf-8"), basestring, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_slack_signature(
    body: bytes,
    timestamp: str | None,
    signature: str | None,
    secret: str,
    now: float | None = None,
) -> None:
    """Raise AuthenticationError unless the request carries a fresh, valid signature."""
    if not secret:
        raise AuthenticationError("Slack signing secret not configured")
    if not timestamp or not signature:
        raise AuthenticationError("Missing Slack signature headers")

    try:
        ts = int(timestamp)
    except ValueError:
        raise AuthenticationError(f"Malformed Slack timestamp: {timestamp!r}")

    current = int(now if now is not None else time.time())
    if abs(current - ts) > MAX_REQUEST_AGE_S:
        raise AuthenticationError("Slack request timestamp outside the replay window")

    expected = compute_signature(secret, timestamp, body)
    if not hmac.compare_digest(expected, signature):
        raise AuthenticationError("Slack signature mismatch")
