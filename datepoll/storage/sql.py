"""SQL storage backend built on SQLModel.

Each operation opens its own short-lived session and commits once, so every
store call is a single atomic insert, keyed update or keyed delete. Sessions
are created with ``expire_on_commit=False`` so the returned records stay
readable after the session closes.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from datepoll.core.database import create_db_and_tables
from datepoll.core.errors import NotFoundError, SlugCollisionError, StorageError
from datepoll.models import Event, Response
from datepoll.poll.slug import generate_slug
from datepoll.storage.base import (
    EVENT_UPDATE_FIELDS,
    RESPONSE_UPDATE_FIELDS,
    EventStore,
    ResponseStore,
    pick_fields,
)

logger = logging.getLogger(__name__)


class _SqlStore:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _session(self) -> Session:
        return Session(self._engine, expire_on_commit=False)

    def open(self) -> None:
        try:
            create_db_and_tables(self._engine)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to initialize database: {e}") from e

    def close(self) -> None:
        self._engine.dispose()


class SqlEventStore(_SqlStore, EventStore):
    """EventStore backed by the ``event`` table."""

    def __init__(
        self,
        engine: Engine,
        slug_factory: Callable[[], str] = generate_slug,
        max_slug_attempts: int = 5,
    ) -> None:
        _SqlStore.__init__(self, engine)
        EventStore.__init__(self, slug_factory, max_slug_attempts)

    def _insert_event(self, event: Event) -> Event:
        with self._session() as session:
            session.add(event)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                taken = session.exec(
                    select(Event.id).where(Event.slug == event.slug)
                ).first()
                if taken is not None:
                    raise SlugCollisionError(slug=event.slug) from e
                raise StorageError(f"Failed to create event: {e}") from e
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageError(f"Failed to create event: {e}") from e
            session.refresh(event)
            return event

    def get_event(self, event_id: int) -> Event | None:
        try:
            with self._session() as session:
                return session.get(Event, event_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load event: {e}") from e

    def get_event_by_slug(self, slug: str) -> Event | None:
        try:
            with self._session() as session:
                return session.exec(select(Event).where(Event.slug == slug)).first()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load event: {e}") from e

    def list_events(self) -> list[Event]:
        try:
            with self._session() as session:
                return list(session.exec(select(Event).order_by(Event.id)).all())
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list events: {e}") from e

    def update_event(self, event_id: int, changes: dict[str, Any]) -> Event:
        try:
            with self._session() as session:
                event = session.get(Event, event_id)
                if event is None:
                    raise NotFoundError("Event not found", event_id=event_id)
                for key, value in pick_fields(changes, EVENT_UPDATE_FIELDS).items():
                    setattr(event, key, value)
                session.add(event)
                session.commit()
                session.refresh(event)
                return event
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to update event: {e}") from e

    def delete_event(self, event_id: int) -> None:
        try:
            with self._session() as session:
                event = session.get(Event, event_id)
                if event is None:
                    return
                session.delete(event)
                session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete event {event_id}: {e}") from e


class SqlResponseStore(_SqlStore, ResponseStore):
    """ResponseStore backed by the ``response`` table."""

    def create_response(
        self, event_id: int, name: str, availability: list[bool]
    ) -> Response:
        response = Response(event_id=event_id, name=name, availability=list(availability))
        try:
            with self._session() as session:
                session.add(response)
                session.commit()
                session.refresh(response)
                return response
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to create response: {e}") from e

    def get_response(self, response_id: int) -> Response | None:
        try:
            with self._session() as session:
                return session.get(Response, response_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load response: {e}") from e

    def get_responses_by_event_id(self, event_id: int) -> list[Response]:
        statement = (
            select(Response).where(Response.event_id == event_id).order_by(Response.id)
        )
        try:
            with self._session() as session:
                return list(session.exec(statement).all())
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to load responses: {e}") from e

    def update_response(self, response_id: int, changes: dict[str, Any]) -> Response:
        try:
            with self._session() as session:
                response = session.get(Response, response_id)
                if response is None:
                    raise NotFoundError("Response not found", response_id=response_id)
                for key, value in pick_fields(changes, RESPONSE_UPDATE_FIELDS).items():
                    setattr(response, key, value)
                response.updated_at = datetime.now(UTC)
                session.add(response)
                session.commit()
                session.refresh(response)
                return response
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to update response: {e}") from e

    def delete_responses_by_event_id(self, event_id: int) -> int:
        try:
            with self._session() as session:
                responses = session.exec(
                    select(Response).where(Response.event_id == event_id)
                ).all()
                for response in responses:
                    session.delete(response)
                session.commit()
                return len(responses)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete responses for event {event_id}: {e}") from e
