"""Event model for scheduling polls.

An event is a poll created by an organizer: a title, a set of candidate
start times, and a deadline after which invitees can no longer answer. The
public lookup key is the slug; the numeric id is internal.
"""

from datetime import UTC, datetime

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from datepoll.core.types import UTCDateTime, UTCDateTimeList


def utc_now() -> datetime:
    return datetime.now(UTC)


class Event(SQLModel, table=True):
    """A scheduling poll.

    Attributes:
        id: Store-assigned identifier, stable for the record's lifetime.
        slug: Short random public key, unique, never changes once set.
        title: Event title (non-empty).
        description: Optional free text shown to invitees.
        organizer: Name of the person running the poll (non-empty).
        dates: Candidate start times in chronological order. Set at
            creation and never modified afterwards; every response's
            availability vector is aligned to this list by position.
        deadline: Responses are rejected once the current time is past it.
        created_at: When the event was created.
    """
    id: int | None = Field(default=None, primary_key=True)
    slug: str = Field(index=True, unique=True)
    title: str
    description: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    organizer: str
    dates: list[datetime] = Field(sa_column=Column(UTCDateTimeList, nullable=False))
    deadline: datetime = Field(sa_column=Column(UTCDateTime, nullable=False))
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(UTCDateTime, nullable=False)
    )

    def last_date(self) -> datetime:
        """Latest candidate date."""
        return max(self.dates)
