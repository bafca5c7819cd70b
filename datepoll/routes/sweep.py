"""Sweep routes for triggering and monitoring the expiry sweep."""
from fastapi import APIRouter, Depends

from datepoll.core.config import settings
from datepoll.core.dependencies import get_sweeper
from datepoll.models import SweepReport
from datepoll.poll.sweeper import ExpirySweeper

router = APIRouter(prefix="/sweep", tags=["sweep"])


@router.post("/now", response_model=SweepReport)
def trigger_sweep(sweeper: ExpirySweeper = Depends(get_sweeper)):
    """
    Run an expiry sweep immediately.

    Deletes every event whose last date is older than the retention window,
    along with its responses, and returns what was removed. Declared sync so
    FastAPI runs it on the thread pool: waiting for a scheduled sweep to
    release the sweep lock must not hold up the event loop.
    """
    return sweeper.sweep()


@router.get("/status")
async def sweep_status(sweeper: ExpirySweeper = Depends(get_sweeper)):
    """
    Get the outcome of the last sweep and the sweep schedule.
    """
    return {
        "sweep_interval_minutes": settings.sweep_interval_minutes,
        **sweeper.status(),
    }
