"""Column types that keep timestamps timezone-aware across backends.

SQLite has no native timezone support and returns naive datetimes even for
``DateTime(timezone=True)`` columns. These decorators normalize everything to
UTC on the way in and reattach UTC on the way out.
"""

from datetime import UTC, datetime

from sqlalchemy import JSON, DateTime
from sqlalchemy.types import TypeDecorator


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class UTCDateTime(TypeDecorator):
    """A DateTime column that always round-trips aware UTC values."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)


class UTCDateTimeList(TypeDecorator):
    """An ordered list of UTC datetimes stored as a JSON array of ISO strings."""

    impl = JSON
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return [as_utc(d).isoformat() for d in value]

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return [as_utc(datetime.fromisoformat(d)) for d in value]
