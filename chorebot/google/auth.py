"""
Google credential management.

chorebot authenticates to Google Calendar as a service account:

  1. Go to https://console.cloud.google.com/
  2. Create/select a project and enable the Google Calendar API
  3. IAM → Service Accounts → Create → Keys → Add key → JSON
  4. Share the target calendar with the service account's client_email
     ("Make changes to events")
  5. Put the key JSON in GCP_SERVICE_ACCOUNT, or its path in
     GCP_SERVICE_ACCOUNT_FILE

The API client refreshes the short-lived access token itself.
"""

import logging

from google.auth.exceptions import GoogleAuthError

from ..exceptions import CalendarError

logger = logging.getLogger(__name__)

CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar"


def get_credentials(service_account_info: dict, scopes: list[str] | None = None):
    """
    Build service account credentials scoped for the Calendar API.

    Raises CalendarError if the key is malformed.
    """
    from google.oauth2 import service_account

    try:
        return service_account.Credentials.from_service_account_info(
            service_account_info, scopes=scopes or [CALENDAR_SCOPE],
        )
    except (GoogleAuthError, ValueError, KeyError) as e:
        logger.error("Invalid service account key: %s", e)
        raise CalendarError(f"Could not load Google credentials: {e}") from e
