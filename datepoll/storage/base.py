"""Storage contract shared by every backend.

The service layer only talks to these interfaces. Backends own persistence
and nothing else: business rules such as the deadline check and the
availability-length check live in ``datepoll.poll.service``.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from datepoll.core.errors import SlugCollisionError, StorageError, ValidationError
from datepoll.models import Event, Response
from datepoll.poll.slug import generate_slug

logger = logging.getLogger(__name__)

# The only event fields update_event will touch. Anything else a caller
# passes (dates, slug, organizer, ...) is dropped.
EVENT_UPDATE_FIELDS = frozenset({"title", "description", "deadline"})
RESPONSE_UPDATE_FIELDS = frozenset({"name", "availability"})


def pick_fields(changes: dict[str, Any], allowed: Iterable[str]) -> dict[str, Any]:
    """Return only the entries of ``changes`` whose key is in ``allowed``."""
    allowed = set(allowed)
    return {key: value for key, value in changes.items() if key in allowed}


class EventStore(ABC):
    """Interface for event persistence.

    Slug generation and the retry-on-collision loop are shared here; a
    backend only has to insert a row and raise ``SlugCollisionError`` when
    the slug it was handed is already taken.
    """

    def __init__(
        self,
        slug_factory: Callable[[], str] = generate_slug,
        max_slug_attempts: int = 5,
    ) -> None:
        self._slug_factory = slug_factory
        self._max_slug_attempts = max_slug_attempts

    def create_event(
        self,
        *,
        title: str,
        organizer: str,
        dates: list[datetime],
        deadline: datetime,
        description: str | None = None,
    ) -> Event:
        """Store a new event under a freshly generated slug.

        Raises:
            ValidationError: If title, organizer or dates are missing/empty.
            StorageError: If no free slug was found or the backend failed.
        """
        if not title or not organizer or not dates:
            raise ValidationError("title, organizer and dates are required")

        for attempt in range(1, self._max_slug_attempts + 1):
            slug = self._slug_factory()
            event = Event(
                slug=slug,
                title=title,
                description=description,
                organizer=organizer,
                dates=list(dates),
                deadline=deadline,
            )
            try:
                return self._insert_event(event)
            except SlugCollisionError:
                logger.warning(f"Slug collision on '{slug}' (attempt {attempt})")

        raise StorageError(
            f"Failed to generate a unique slug after {self._max_slug_attempts} attempts"
        )

    @abstractmethod
    def _insert_event(self, event: Event) -> Event:
        """Persist ``event``, assigning its id.

        Raises:
            SlugCollisionError: If ``event.slug`` is already taken.
        """
        ...

    @abstractmethod
    def get_event(self, event_id: int) -> Event | None:
        """Return an event by id, or None if not found."""
        ...

    @abstractmethod
    def get_event_by_slug(self, slug: str) -> Event | None:
        """Return the event with exactly this slug, or None."""
        ...

    @abstractmethod
    def list_events(self) -> list[Event]:
        """Return every stored event."""
        ...

    @abstractmethod
    def update_event(self, event_id: int, changes: dict[str, Any]) -> Event:
        """Merge the title/description/deadline entries of ``changes``.

        Raises:
            NotFoundError: If no event has this id.
        """
        ...

    @abstractmethod
    def delete_event(self, event_id: int) -> None:
        """Delete an event. Deleting a missing id is not an error."""
        ...

    def open(self) -> None:
        """Prepare the store for use."""

    def close(self) -> None:
        """Release resources held by the store."""


class ResponseStore(ABC):
    """Interface for response persistence.

    The store does not know the shape of the parent event; callers check
    that ``availability`` lines up with the event's dates before calling.
    """

    @abstractmethod
    def create_response(
        self, event_id: int, name: str, availability: list[bool]
    ) -> Response:
        """Insert a new response. Never updates an existing one."""
        ...

    @abstractmethod
    def get_response(self, response_id: int) -> Response | None:
        """Return a response by id, or None if not found."""
        ...

    @abstractmethod
    def get_responses_by_event_id(self, event_id: int) -> list[Response]:
        """Return all responses for an event in insertion order."""
        ...

    @abstractmethod
    def update_response(self, response_id: int, changes: dict[str, Any]) -> Response:
        """Apply the name/availability entries of ``changes`` in place.

        Raises:
            NotFoundError: If no response has this id.
        """
        ...

    @abstractmethod
    def delete_responses_by_event_id(self, event_id: int) -> int:
        """Delete every response for an event. Returns how many were removed."""
        ...

    def open(self) -> None:
        """Prepare the store for use."""

    def close(self) -> None:
        """Release resources held by the store."""
