"""Build the configured storage backend."""

import logging
from dataclasses import dataclass
from functools import partial

from datepoll.core.config import Settings
from datepoll.core.database import build_engine
from datepoll.poll.slug import generate_slug
from datepoll.storage.base import EventStore, ResponseStore
from datepoll.storage.memory import MemoryEventStore, MemoryResponseStore
from datepoll.storage.sql import SqlEventStore, SqlResponseStore

logger = logging.getLogger(__name__)


@dataclass
class Storage:
    """The event and response stores of one backend, opened and closed together."""

    events: EventStore
    responses: ResponseStore

    def open(self) -> None:
        self.events.open()
        self.responses.open()

    def close(self) -> None:
        # Both stores of the SQL backend share an engine; disposing twice is harmless.
        self.responses.close()
        self.events.close()


def build_storage(settings: Settings, **engine_kwargs) -> Storage:
    """Construct (but do not open) the backend named by ``settings.storage_backend``."""
    backend = settings.storage_backend.lower()
    slug_factory = partial(generate_slug, settings.slug_length)

    if backend == "memory":
        logger.info("Using in-memory storage")
        return Storage(
            events=MemoryEventStore(slug_factory, settings.slug_max_attempts),
            responses=MemoryResponseStore(),
        )

    if backend == "sql":
        logger.info(f"Using SQL storage at {settings.database_url}")
        engine = build_engine(settings.database_url, echo=settings.debug, **engine_kwargs)
        return Storage(
            events=SqlEventStore(engine, slug_factory, settings.slug_max_attempts),
            responses=SqlResponseStore(engine),
        )

    raise ValueError(f"Unknown storage backend: {settings.storage_backend!r}")
