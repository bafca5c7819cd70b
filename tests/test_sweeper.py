"""Tests for the expiry sweep."""

from datetime import UTC, datetime, timedelta

import pytest

from datepoll.core.errors import StorageError
from datepoll.poll.sweeper import ExpirySweeper, is_expired
from datepoll.storage import MemoryEventStore, MemoryResponseStore, Storage

JAN_10 = datetime(2024, 1, 10, tzinfo=UTC)
WEEK = timedelta(days=7)


def make_event(storage: Storage, dates, title="Poll"):
    return storage.events.create_event(
        title=title,
        organizer="Alice",
        dates=dates,
        deadline=min(dates) - timedelta(days=1),
    )


class FlakyEventStore(MemoryEventStore):
    """Fails the first ``failures`` deletes."""

    def __init__(self, failures: int = 1):
        super().__init__()
        self.failures = failures

    def delete_event(self, event_id: int) -> None:
        if self.failures:
            self.failures -= 1
            raise StorageError("disk on fire")
        super().delete_event(event_id)


class BrokenEventStore(MemoryEventStore):
    broken = True

    def list_events(self):
        if self.broken:
            raise StorageError("database unreachable")
        return super().list_events()


class TestIsExpired:
    def test_uses_last_date(self, memory_storage: Storage):
        event = make_event(memory_storage, [JAN_10, JAN_10 - timedelta(days=5)])
        assert not is_expired(event, datetime(2024, 1, 16, tzinfo=UTC), WEEK)
        assert is_expired(event, datetime(2024, 1, 18, tzinfo=UTC), WEEK)

    def test_threshold_is_exclusive(self, memory_storage: Storage):
        event = make_event(memory_storage, [JAN_10])
        assert not is_expired(event, JAN_10 + WEEK, WEEK)
        assert is_expired(event, JAN_10 + WEEK + timedelta(seconds=1), WEEK)


class TestSweep:
    def test_deletes_after_retention_window(self, storage: Storage):
        event = make_event(storage, [JAN_10])
        sweeper = ExpirySweeper(storage.events, storage.responses, retention=WEEK)

        report = sweeper.sweep(now=datetime(2024, 1, 16, tzinfo=UTC))
        assert report.expired_event_ids == []
        assert storage.events.get_event(event.id) is not None

        report = sweeper.sweep(now=datetime(2024, 1, 18, tzinfo=UTC))
        assert report.expired_event_ids == [event.id]
        assert report.deleted_events == 1
        assert storage.events.get_event(event.id) is None

    def test_cascades_to_responses(self, storage: Storage):
        expired = make_event(storage, [JAN_10], title="old")
        live = make_event(storage, [JAN_10 + timedelta(days=30)], title="new")
        storage.responses.create_response(expired.id, "Bob", [True])
        storage.responses.create_response(expired.id, "Carol", [False])
        storage.responses.create_response(live.id, "Dan", [True])
        sweeper = ExpirySweeper(storage.events, storage.responses, retention=WEEK)

        report = sweeper.sweep(now=datetime(2024, 1, 20, tzinfo=UTC))

        assert report.deleted_events == 1
        assert report.deleted_responses == 2
        assert storage.responses.get_responses_by_event_id(expired.id) == []
        assert len(storage.responses.get_responses_by_event_id(live.id)) == 1
        assert storage.events.get_event(live.id) is not None

    def test_repeat_sweep_is_noop(self, storage: Storage):
        make_event(storage, [JAN_10])
        sweeper = ExpirySweeper(storage.events, storage.responses, retention=WEEK)
        now = datetime(2024, 2, 1, tzinfo=UTC)

        assert sweeper.sweep(now=now).deleted_events == 1
        second = sweeper.sweep(now=now)
        assert second.deleted_events == 0
        assert second.failed_event_ids == []

    def test_uses_clock_by_default(self, storage: Storage, clock):
        make_event(storage, [JAN_10])
        sweeper = ExpirySweeper(storage.events, storage.responses, retention=WEEK, clock=clock)
        assert sweeper.sweep().deleted_events == 0
        clock.now = datetime(2024, 1, 18, tzinfo=UTC)
        assert sweeper.sweep().deleted_events == 1

    def test_partial_failure_is_retried(self):
        storage = Storage(events=FlakyEventStore(failures=1), responses=MemoryResponseStore())
        event = make_event(storage, [JAN_10])
        storage.responses.create_response(event.id, "Bob", [True])
        sweeper = ExpirySweeper(storage.events, storage.responses, retention=WEEK)
        now = datetime(2024, 2, 1, tzinfo=UTC)

        first = sweeper.sweep(now=now)
        assert first.failed_event_ids == [event.id]
        assert first.deleted_responses == 1
        assert storage.events.get_event(event.id) is not None

        second = sweeper.sweep(now=now)
        assert second.failed_event_ids == []
        assert second.deleted_events == 1
        assert storage.events.get_event(event.id) is None

    def test_one_failure_does_not_stop_the_rest(self):
        storage = Storage(events=FlakyEventStore(failures=1), responses=MemoryResponseStore())
        first = make_event(storage, [JAN_10])
        second = make_event(storage, [JAN_10 + timedelta(days=1)])
        sweeper = ExpirySweeper(storage.events, storage.responses, retention=WEEK)

        report = sweeper.sweep(now=datetime(2024, 3, 1, tzinfo=UTC))

        assert report.failed_event_ids == [first.id]
        assert report.deleted_events == 1
        assert storage.events.get_event(second.id) is None


class TestRun:
    def test_run_records_success(self, memory_storage: Storage, clock):
        clock.now = datetime(2024, 3, 1, tzinfo=UTC)
        make_event(memory_storage, [JAN_10])
        sweeper = ExpirySweeper(memory_storage.events, memory_storage.responses, clock=clock)

        report = sweeper.run()

        assert report.deleted_events == 1
        status = sweeper.status()
        assert status["last_success"] is True
        assert status["last_error"] is None
        assert status["last_deleted_events"] == 1
        assert status["retention_days"] == 7

    def test_run_never_raises(self, clock):
        sweeper = ExpirySweeper(BrokenEventStore(), MemoryResponseStore(), clock=clock)

        assert sweeper.run() is None

        status = sweeper.status()
        assert status["last_success"] is False
        assert "database unreachable" in status["last_error"]

    def test_sweep_propagates_listing_failure(self, clock):
        sweeper = ExpirySweeper(BrokenEventStore(), MemoryResponseStore(), clock=clock)
        with pytest.raises(StorageError):
            sweeper.sweep()

    def test_failed_sweep_recorded_in_status(self, clock):
        events = BrokenEventStore()
        events.broken = False
        sweeper = ExpirySweeper(events, MemoryResponseStore(), clock=clock)
        sweeper.sweep()
        assert sweeper.status()["last_success"] is True

        events.broken = True
        clock.advance(hours=1)
        with pytest.raises(StorageError):
            sweeper.sweep()

        status = sweeper.status()
        assert status["last_success"] is False
        assert "database unreachable" in status["last_error"]
        assert status["last_run_at"] == clock.now.isoformat()

    def test_status_before_first_run(self, memory_storage: Storage):
        status = ExpirySweeper(memory_storage.events, memory_storage.responses).status()
        assert status["last_run_at"] is None
        assert status["last_success"] is None
