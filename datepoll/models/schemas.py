"""Request and response schemas for the HTTP API.

Field names are snake_case in Python and camelCase on the wire
(``createdAt``, ``eventId``, ``supportCount``). Requests accept either form.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class EventCreate(_Schema):
    title: str
    description: str | None = None
    organizer: str
    dates: list[datetime]
    deadline: datetime


class EventUpdate(_Schema):
    """Partial update. Only the fields the client actually sends are applied."""

    title: str | None = None
    description: str | None = None
    deadline: datetime | None = None


class ResponseCreate(_Schema):
    name: str
    availability: list[bool]


class ResponseUpdate(_Schema):
    name: str | None = None
    availability: list[bool] | None = None


class EventRead(_Schema):
    id: int
    slug: str
    title: str
    description: str | None = None
    organizer: str
    dates: list[datetime]
    deadline: datetime
    created_at: datetime


class ResponseRead(_Schema):
    id: int
    event_id: int
    name: str
    availability: list[bool]
    created_at: datetime
    updated_at: datetime | None = None


class Aggregation(_Schema):
    """Per-date support for an event.

    ``is_best`` marks every date that ties for ``max_support``. With no
    responses all counts are zero and every date is marked best; clients
    should check ``total_responses`` before highlighting anything.
    """

    support_count: list[int]
    max_support: int
    is_best: list[bool]
    best_indices: list[int]
    total_responses: int


class EventView(_Schema):
    event: EventRead
    responses: list[ResponseRead]
    aggregation: Aggregation


class SweepReport(_Schema):
    """Outcome of one expiry sweep."""

    ran_at: datetime
    expired_event_ids: list[int] = []
    deleted_events: int = 0
    deleted_responses: int = 0
    failed_event_ids: list[int] = []
