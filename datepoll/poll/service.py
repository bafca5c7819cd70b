"""Event service: every business rule of the poll lives here.

The service depends only on the store interfaces, validates input, enforces
the response deadline, and maps missing records to ``NotFoundError``. It is
transport-agnostic; the HTTP routes are a thin layer over it.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from datepoll.core.errors import DeadlinePassedError, NotFoundError, ValidationError
from datepoll.core.types import as_utc
from datepoll.models import Event, EventRead, EventView, Response, ResponseRead
from datepoll.poll.aggregator import aggregate
from datepoll.poll.export import render_csv
from datepoll.storage.base import EVENT_UPDATE_FIELDS, RESPONSE_UPDATE_FIELDS, EventStore, ResponseStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


def _clean_text(value: str | None) -> str | None:
    """Strip surrounding whitespace; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must not be empty", field=field)
    return value.strip()


def _require_datetime(value: Any, field: str) -> datetime:
    if not isinstance(value, datetime):
        raise ValidationError(f"{field} must be a timestamp", field=field)
    return as_utc(value)


class EventService:
    """Create, view and update polls and collect responses."""

    def __init__(
        self,
        events: EventStore,
        responses: ResponseStore,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.events = events
        self.responses = responses
        self._clock = clock

    # Events

    def create_event(
        self,
        *,
        title: str,
        organizer: str,
        dates: list[datetime],
        deadline: datetime,
        description: str | None = None,
    ) -> Event:
        """Validate and store a new event.

        Candidate dates are stored in chronological order so the grid, the
        stored dates and every availability vector share one ordering.

        Raises:
            ValidationError: On a blank title or organizer, no dates, or a
                date/deadline that is not a timestamp.
        """
        title = _require_text(title, "title")
        organizer = _require_text(organizer, "organizer")
        if not dates:
            raise ValidationError("at least one date is required", field="dates")
        dates = sorted(_require_datetime(d, "dates") for d in dates)
        deadline = _require_datetime(deadline, "deadline")

        event = self.events.create_event(
            title=title,
            organizer=organizer,
            dates=dates,
            deadline=deadline,
            description=_clean_text(description),
        )
        logger.info(f"Created event {event.slug} with {len(event.dates)} dates")
        return event

    def get_event(self, slug: str) -> Event:
        """Raises NotFoundError if the slug is unknown."""
        event = self.events.get_event_by_slug(slug)
        if event is None:
            raise NotFoundError("Event not found", slug=slug)
        return event

    def get_event_view(self, slug: str) -> EventView:
        """Event, all of its responses, and the aggregated grid."""
        event = self.get_event(slug)
        responses = self.responses.get_responses_by_event_id(event.id)
        return EventView(
            event=EventRead.model_validate(event),
            responses=[ResponseRead.model_validate(r) for r in responses],
            aggregation=aggregate(event.dates, responses),
        )

    def update_event(self, slug: str, changes: dict[str, Any]) -> Event:
        """
        Apply a partial update of title, description and/or deadline.

        Any other keys (dates, slug, organizer, ...) are ignored.
        """
        event = self.get_event(slug)

        update = {k: v for k, v in changes.items() if k in EVENT_UPDATE_FIELDS}
        if "title" in update:
            update["title"] = _require_text(update["title"], "title")
        if "description" in update:
            update["description"] = _clean_text(update["description"])
        if "deadline" in update:
            update["deadline"] = _require_datetime(update["deadline"], "deadline")

        if not update:
            return event

        updated = self.events.update_event(event.id, update)
        logger.info(f"Updated event {slug}: {sorted(update)}")
        return updated

    # Responses

    def submit_response(self, slug: str, name: str, availability: list[bool]) -> Response:
        """
        Record a new response. Never replaces an earlier one, even under the
        same name.

        Raises:
            NotFoundError: Unknown slug.
            DeadlinePassedError: The event's deadline has passed.
            ValidationError: Blank name or availability of the wrong length.
        """
        event = self.get_event(slug)
        self._check_deadline(event)
        name = _require_text(name, "name")
        self._check_availability(event, availability)

        response = self.responses.create_response(event.id, name, list(availability))
        logger.info(f"Recorded response {response.id} for event {slug}")
        return response

    def update_response(self, slug: str, response_id: int, changes: dict[str, Any]) -> Response:
        """
        Edit a response in place (name and/or availability).

        Raises:
            NotFoundError: Unknown slug, or the response is not part of this event.
            DeadlinePassedError: The event's deadline has passed.
            ValidationError: Blank name or availability of the wrong length.
        """
        event = self.get_event(slug)
        existing = self.responses.get_response(response_id)
        if existing is None or existing.event_id != event.id:
            raise NotFoundError("Response not found", slug=slug, response_id=response_id)
        self._check_deadline(event)

        update = {k: v for k, v in changes.items() if k in RESPONSE_UPDATE_FIELDS}
        if "name" in update:
            update["name"] = _require_text(update["name"], "name")
        if "availability" in update:
            self._check_availability(event, update["availability"])
            update["availability"] = list(update["availability"])

        if not update:
            return existing

        updated = self.responses.update_response(response_id, update)
        logger.info(f"Edited response {response_id} for event {slug}")
        return updated

    # Export

    def export_csv(self, slug: str) -> str:
        event = self.get_event(slug)
        return render_csv(event, self.responses.get_responses_by_event_id(event.id))

    def _check_deadline(self, event: Event) -> None:
        if self._clock() > event.deadline:
            raise DeadlinePassedError(slug=event.slug, deadline=event.deadline.isoformat())

    def _check_availability(self, event: Event, availability: Any) -> None:
        if availability is None or len(availability) != len(event.dates):
            raise ValidationError(
                f"availability must have exactly {len(event.dates)} entries",
                field="availability",
            )
        if not all(isinstance(a, bool) for a in availability):
            raise ValidationError("availability entries must be true or false", field="availability")
