"""chorebot: a Slack bot that keeps track of who does which household chores."""

__version__ = "1.0.0"
