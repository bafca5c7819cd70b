"""Background job scheduler for the expiry sweep."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from datepoll.poll.sweeper import ExpirySweeper

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "expiry_sweep"


def start_scheduler(sweeper: ExpirySweeper, interval_minutes: int) -> AsyncIOScheduler:
    """Start a scheduler that runs ``sweeper`` every ``interval_minutes``.

    The sweep is a plain function, so APScheduler runs it on its thread pool
    and request handling is never blocked. ``max_instances=1`` keeps ticks
    from overlapping; ``coalesce`` folds missed ticks into one run.
    """
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        sweeper.run,
        trigger=IntervalTrigger(minutes=interval_minutes),
        id=SWEEP_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(f"Scheduler started, sweeping expired events every {interval_minutes} minutes")
    return scheduler


def shutdown_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Graceful shutdown."""
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")
