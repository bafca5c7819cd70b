from datepoll.storage.base import EventStore, ResponseStore
from datepoll.storage.factory import Storage, build_storage
from datepoll.storage.memory import MemoryEventStore, MemoryResponseStore
from datepoll.storage.sql import SqlEventStore, SqlResponseStore

__all__ = [
    "EventStore",
    "ResponseStore",
    "Storage",
    "build_storage",
    "MemoryEventStore",
    "MemoryResponseStore",
    "SqlEventStore",
    "SqlResponseStore",
]
