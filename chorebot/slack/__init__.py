"""
Slack integration: request signing, webhook handling and outbound delivery.
"""

from .client import SlackClient
from .formatting import build_blocks, parse_slack_text
from .handlers import SlackWebhookHandler
from .signature import compute_signature, verify_slack_signature

__all__ = [
    "SlackClient",
    "SlackWebhookHandler",
    "build_blocks",
    "compute_signature",
    "parse_slack_text",
    "verify_slack_signature",
]
