"""Response model for invitee availability.

This module defines the Response model: one invitee's answer to a poll,
recorded as a yes/no per candidate date of the parent event.
"""

from datetime import datetime

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from datepoll.core.types import UTCDateTime
from datepoll.models.event import utc_now


class Response(SQLModel, table=True):
    """An invitee's availability for one event.

    Responses are owned by their event and deleted with it by the expiry
    sweep. Names are not unique: the same person may answer twice and both
    records are kept.

    Attributes:
        id: Store-assigned identifier.
        event_id: Foreign key to the parent Event.
        name: Respondent's display name (non-empty).
        availability: ``availability[i]`` answers ``event.dates[i]``; always
            the same length as the event's dates.
        created_at: When the response was first submitted.
        updated_at: When the response was last edited, if ever.
    """
    id: int | None = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    name: str
    availability: list[bool] = Field(sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(UTCDateTime, nullable=False)
    )
    updated_at: datetime | None = Field(
        default=None, sa_column=Column(UTCDateTime, nullable=True)
    )
