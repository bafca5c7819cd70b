"""Periodic deletion of events whose candidate dates are long past.

An event expires once the current time is later than its last candidate
date plus the retention window. Expired events are deleted together with
their responses, responses first so a database with foreign keys enforced
never sees an orphan.

A sweep that fails partway leaves the store in a state the next sweep can
finish: deleting responses that are already gone and events that are
already gone are both no-ops.
"""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from datepoll.core.config import RETENTION_DAYS
from datepoll.core.errors import StorageError
from datepoll.models import Event, SweepReport
from datepoll.storage.base import EventStore, ResponseStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


def is_expired(event: Event, now: datetime, retention: timedelta) -> bool:
    """True once ``now`` is past the event's last date plus ``retention``."""
    return now > event.last_date() + retention


class ExpirySweeper:
    """Deletes expired events and their responses.

    The scheduler calls ``run`` on every tick; ``sweep`` does the work and is
    also used by the manual trigger endpoint. Sweeps are serialized so a
    manual sweep never overlaps a scheduled one.
    """

    def __init__(
        self,
        events: EventStore,
        responses: ResponseStore,
        retention: timedelta = timedelta(days=RETENTION_DAYS),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.events = events
        self.responses = responses
        self.retention = retention
        self._clock = clock
        self._lock = threading.Lock()

        self.last_report: SweepReport | None = None
        self.last_error: str | None = None
        self.last_run_at: datetime | None = None

    def find_expired(self, now: datetime | None = None) -> list[Event]:
        """Return the events a sweep at ``now`` would delete."""
        now = now or self._clock()
        return [e for e in self.events.list_events() if is_expired(e, now, self.retention)]

    def sweep(self, now: datetime | None = None) -> SweepReport:
        """
        Delete every expired event and its responses.

        An event whose deletion fails is reported in ``failed_event_ids`` and
        left for the next sweep; the remaining events are still processed.

        A sweep that raises is still recorded in ``status()`` before the
        exception propagates.

        Raises:
            StorageError: If the events could not be listed at all.
        """
        with self._lock:
            now = now or self._clock()
            self.last_run_at = now
            try:
                report = self._delete_expired(now)
            except Exception as e:
                self.last_error = str(e)
                raise
            self.last_report = report
            self.last_error = None
            return report

    def _delete_expired(self, now: datetime) -> SweepReport:
        expired = self.find_expired(now)
        report = SweepReport(ran_at=now, expired_event_ids=[e.id for e in expired])

        for event in expired:
            try:
                report.deleted_responses += self.responses.delete_responses_by_event_id(event.id)
                self.events.delete_event(event.id)
                report.deleted_events += 1
                logger.info(f"Deleted expired event {event.slug} (last date {event.last_date().isoformat()})")
            except StorageError as e:
                report.failed_event_ids.append(event.id)
                logger.error(f"Failed to delete expired event {event.slug}: {e}")

        return report

    def run(self) -> SweepReport | None:
        """Scheduler entry point. Never raises; failures are retried next tick."""
        try:
            report = self.sweep()
            logger.info(
                f"Expiry sweep completed: {report.deleted_events} events, "
                f"{report.deleted_responses} responses deleted, "
                f"{len(report.failed_event_ids)} failed"
            )
            return report
        except Exception as e:
            logger.error(f"Expiry sweep failed: {e}")
            return None

    def status(self) -> dict:
        """Outcome of the most recent sweep."""
        return {
            "retention_days": self.retention.days,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "last_success": None if self.last_run_at is None else self.last_error is None,
            "last_error": self.last_error,
            "last_deleted_events": self.last_report.deleted_events if self.last_report else 0,
        }
