"""
Google Calendar API client.
Async wrapper around the Calendar v3 discovery client for inserting events.
"""

import asyncio
import logging

from google.auth.exceptions import GoogleAuthError

from ..exceptions import CalendarError
from ..models import CalendarEvent, EventTime
from .auth import get_credentials

logger = logging.getLogger(__name__)


class CalendarClient:
    """Creates events on one calendar using service account credentials."""

    def __init__(
        self,
        service_account_info: dict,
        calendar_id: str = "primary",
        timezone: str = "America/New_York",
    ) -> None:
        self._service_account_info = service_account_info
        self._calendar_id = calendar_id
        self._timezone = timezone
        self._credentials = None

    @property
    def timezone(self) -> str:
        return self._timezone

    @property
    def calendar_id(self) -> str:
        return self._calendar_id

    def _service(self):
        from googleapiclient.discovery import build

        if self._credentials is None:
            self._credentials = get_credentials(self._service_account_info)
        return build("calendar", "v3", credentials=self._credentials, cache_discovery=False)

    def build_event(
        self,
        summary: str,
        start_date_time: str,
        end_date_time: str,
        description: str | None = None,
    ) -> CalendarEvent:
        return CalendarEvent(
            summary=summary,
            description=description,
            start=EventTime(date_time=start_date_time, time_zone=self._timezone),
            end=EventTime(date_time=end_date_time, time_zone=self._timezone),
        )

    async def create_event(
        self,
        summary: str,
        start_date_time: str,
        end_date_time: str,
        description: str | None = None,
    ) -> dict:
        """
        Create a calendar event and return the created event dict from the API.
        Raises CalendarError on a credential failure or an API error response.
        """
        from googleapiclient.errors import HttpError

        body = self.build_event(summary, start_date_time, end_date_time, description).to_wire()

        def _sync():
            return self._service().events().insert(
                calendarId=self._calendar_id, body=body
            ).execute()

        try:
            created = await asyncio.to_thread(_sync)
        except HttpError as e:
            status = e.resp.status
            raise CalendarError(f"Calendar API error ({status}): {e}", status_code=status) from e
        except GoogleAuthError as e:
            raise CalendarError(f"Google rejected the service account: {e}") from e
        except OSError as e:
            raise CalendarError(f"Calendar request failed: {e}") from e

        logger.info("Created calendar event %r (%s)", summary, created.get("id", "?"))
        return created
