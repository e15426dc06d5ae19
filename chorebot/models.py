"""
Pydantic v2 data models for chorebot.

Wire names are camelCase (``lastUpdated``, ``startDateTime``); Python
attribute names are snake_case. Dump with ``by_alias=True`` when the
payload leaves the process.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


class ChoreState(BaseModel):
    """The single persisted chore record."""

    model_config = ConfigDict(populate_by_name=True)

    description: StrictStr
    last_updated: StrictStr = Field(alias="lastUpdated")
    last_sent: Optional[StrictStr] = Field(default=None, alias="lastSent")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# --------------------------------------------------------------------------- #
# Tool arguments (one model per registered tool)                              #
# --------------------------------------------------------------------------- #

class ReadStateArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")


class UpdateStateArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    description: StrictStr = Field(min_length=1)


class CreateCalendarEventArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    summary: StrictStr = Field(min_length=1)
    start_date_time: StrictStr = Field(alias="startDateTime")
    end_date_time: StrictStr = Field(alias="endDateTime")
    description: Optional[StrictStr] = None

    @field_validator("start_date_time", "end_date_time")
    @classmethod
    def _iso_datetime(cls, v: str) -> str:
        try:
            datetime.fromisoformat(v)
        except ValueError:
            raise ValueError(f"not an ISO 8601 datetime: {v!r}")
        return v


TOOL_ARGUMENTS: dict[str, type[BaseModel]] = {
    "readState": ReadStateArgs,
    "updateState": UpdateStateArgs,
    "createCalendarEvent": CreateCalendarEventArgs,
}


@dataclass(frozen=True)
class ToolInvocation:
    """A validated tool call: the provider's call id, tool name and typed arguments."""
    id: str
    name: str
    arguments: BaseModel


# --------------------------------------------------------------------------- #
# Calendar                                                                    #
# --------------------------------------------------------------------------- #

class EventTime(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date_time: str = Field(alias="dateTime")
    time_zone: str = Field(alias="timeZone")


class CalendarEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    description: Optional[str] = None
    start: EventTime
    end: EventTime

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
