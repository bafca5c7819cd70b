#!/usr/bin/env python3
"""
One-off script to delete expired events outside the running app.

Lists every event whose last candidate date is older than the retention
window and deletes it together with its responses.

Usage:
    python scripts/sweep_expired.py [--dry-run]

Options:
    --dry-run    Show what would be deleted without making changes
"""
import sys
from datetime import timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from datepoll.core.config import settings
from datepoll.poll.sweeper import ExpirySweeper
from datepoll.storage import build_storage


def main(dry_run: bool = False):
    """Find expired events and delete them."""
    if settings.storage_backend == "memory":
        print("Error: the in-memory backend is only reachable from the running app.")
        sys.exit(1)

    storage = build_storage(settings)
    storage.open()
    try:
        sweeper = ExpirySweeper(
            storage.events,
            storage.responses,
            retention=timedelta(days=settings.retention_days),
        )

        expired = sweeper.find_expired()
        if not expired:
            print("No expired events found.")
            return

        print(f"Found {len(expired)} expired event(s) (retention {settings.retention_days} days):\n")
        for event in expired:
            print(f"  {event.slug}  {event.title!r}  last date {event.last_date():%Y-%m-%d %H:%M}")
        print()

        if dry_run:
            print("--- DRY RUN: No changes made ---")
            return

        report = sweeper.sweep()
        print(
            f"Complete: {report.deleted_events} events and "
            f"{report.deleted_responses} responses deleted, "
            f"{len(report.failed_event_ids)} failed"
        )
    finally:
        storage.close()


if __name__ == "__main__":
    dry_run = "--dry-run" in sys.argv
    main(dry_run=dry_run)
