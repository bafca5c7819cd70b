"""In-process storage backend.

Keeps events and responses in dicts guarded by a lock. Records handed out
are copies, so a caller changing a returned object never changes what is
stored. Everything is lost when the process exits; use it for tests and
local development.
"""

import threading
from collections.abc import Callable
from datetime import UTC, datetime
from itertools import count
from typing import Any

from datepoll.core.errors import NotFoundError, SlugCollisionError
from datepoll.models import Event, Response
from datepoll.poll.slug import generate_slug
from datepoll.storage.base import (
    EVENT_UPDATE_FIELDS,
    RESPONSE_UPDATE_FIELDS,
    EventStore,
    ResponseStore,
    pick_fields,
)


def _copy(record):
    return type(record).model_validate(record.model_dump())


class MemoryEventStore(EventStore):
    """Dict-backed EventStore."""

    def __init__(
        self,
        slug_factory: Callable[[], str] = generate_slug,
        max_slug_attempts: int = 5,
    ) -> None:
        super().__init__(slug_factory, max_slug_attempts)
        self._lock = threading.Lock()
        self._reset()

    def _reset(self) -> None:
        self._events: dict[int, Event] = {}
        self._ids_by_slug: dict[str, int] = {}
        self._next_id = count(1)

    def open(self) -> None:
        with self._lock:
            self._reset()

    def close(self) -> None:
        with self._lock:
            self._reset()

    def _insert_event(self, event: Event) -> Event:
        with self._lock:
            if event.slug in self._ids_by_slug:
                raise SlugCollisionError(slug=event.slug)
            event.id = next(self._next_id)
            stored = _copy(event)
            self._events[stored.id] = stored
            self._ids_by_slug[stored.slug] = stored.id
            return _copy(stored)

    def get_event(self, event_id: int) -> Event | None:
        with self._lock:
            event = self._events.get(event_id)
            return _copy(event) if event else None

    def get_event_by_slug(self, slug: str) -> Event | None:
        with self._lock:
            event_id = self._ids_by_slug.get(slug)
            if event_id is None:
                return None
            return _copy(self._events[event_id])

    def list_events(self) -> list[Event]:
        with self._lock:
            return [_copy(event) for event in self._events.values()]

    def update_event(self, event_id: int, changes: dict[str, Any]) -> Event:
        with self._lock:
            event = self._events.get(event_id)
            if event is None:
                raise NotFoundError("Event not found", event_id=event_id)
            updated = event.model_dump()
            updated.update(pick_fields(changes, EVENT_UPDATE_FIELDS))
            self._events[event_id] = Event.model_validate(updated)
            return _copy(self._events[event_id])

    def delete_event(self, event_id: int) -> None:
        with self._lock:
            event = self._events.pop(event_id, None)
            if event is not None:
                self._ids_by_slug.pop(event.slug, None)


class MemoryResponseStore(ResponseStore):
    """Dict-backed ResponseStore."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reset()

    def _reset(self) -> None:
        self._responses: dict[int, Response] = {}
        self._next_id = count(1)

    def open(self) -> None:
        with self._lock:
            self._reset()

    def close(self) -> None:
        with self._lock:
            self._reset()

    def create_response(
        self, event_id: int, name: str, availability: list[bool]
    ) -> Response:
        with self._lock:
            response = Response(
                id=next(self._next_id),
                event_id=event_id,
                name=name,
                availability=list(availability),
            )
            self._responses[response.id] = response
            return _copy(response)

    def get_response(self, response_id: int) -> Response | None:
        with self._lock:
            response = self._responses.get(response_id)
            return _copy(response) if response else None

    def get_responses_by_event_id(self, event_id: int) -> list[Response]:
        with self._lock:
            return [
                _copy(r) for r in self._responses.values() if r.event_id == event_id
            ]

    def update_response(self, response_id: int, changes: dict[str, Any]) -> Response:
        with self._lock:
            response = self._responses.get(response_id)
            if response is None:
                raise NotFoundError("Response not found", response_id=response_id)
            updated = response.model_dump()
            updated.update(pick_fields(changes, RESPONSE_UPDATE_FIELDS))
            updated["updated_at"] = datetime.now(UTC)
            self._responses[response_id] = Response.model_validate(updated)
            return _copy(self._responses[response_id])

    def delete_responses_by_event_id(self, event_id: int) -> int:
        with self._lock:
            doomed = [rid for rid, r in self._responses.items() if r.event_id == event_id]
            for rid in doomed:
                del self._responses[rid]
            return len(doomed)
