"""
Google Calendar integration package.
Requires a service account key; see auth.py for setup.
"""

from .auth import CALENDAR_SCOPE, get_credentials
from .calendar import CalendarClient

__all__ = ["CALENDAR_SCOPE", "CalendarClient", "get_credentials"]
