"""
Shared constants for chorebot.

Centralises user-facing strings that are used across multiple modules.
"""

# ── Chore state ─────────────────────────────────────────────────────────────────
STATE_KEY = "choreState"
DAILY_BACKUP_PREFIX = "backup_"
MANUAL_BACKUP_PREFIX = "manual_backup_"

DEFAULT_DESCRIPTION = (
    "No chore arrangement has been recorded yet. "
    "Tell me who is responsible for which chores to get started."
)

UNAVAILABLE_DESCRIPTION = (
    "Unable to load chore information at this time. Please try again later."
)


# ── Agent loop replies ──────────────────────────────────────────────────────────
EMPTY_REPLY_FALLBACK = (
    "I've completed your request. Is there anything else you'd like me to help with?"
)
LENGTH_LIMIT_REPLY = (
    "I need to continue this conversation, but I've reached the length limit. "
    "Could you please restate your request?"
)
MULTI_STEP_FALLBACK = (
    "I've processed your request with multiple steps. The chore state has been "
    "updated as needed. Is there anything specific you'd like me to clarify?"
)
PROVIDER_FAILURE_REPLY = (
    "I'm experiencing some technical difficulties. Please try your request again."
)


# ── Slack replies ───────────────────────────────────────────────────────────────
COMMAND_ACK = "On it… one moment while I check the chore chart."
COMMAND_ERROR = "Sorry, I encountered an error processing your request. Please try again."
