"""Event routes: create, view, update and export polls."""
from fastapi import APIRouter, Depends
from fastapi import Response as HTTPResponse

from datepoll.core.dependencies import get_event_service
from datepoll.models import EventCreate, EventRead, EventUpdate, EventView
from datepoll.poll.service import EventService

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("", status_code=201, response_model=EventRead)
async def create_event(body: EventCreate, service: EventService = Depends(get_event_service)):
    """
    Create a new poll.

    Returns the stored event including its id and public slug. Candidate
    dates come back in chronological order.
    """
    return service.create_event(
        title=body.title,
        organizer=body.organizer,
        dates=body.dates,
        deadline=body.deadline,
        description=body.description,
    )


@router.get("/{slug}", response_model=EventView)
async def get_event(slug: str, service: EventService = Depends(get_event_service)):
    """
    Get an event with all of its responses and the aggregated grid.

    ``aggregation.supportCount[i]`` is the number of respondents available
    at ``event.dates[i]``; ``aggregation.isBest`` marks every date tied for
    the most support.
    """
    return service.get_event_view(slug)


@router.patch("/{slug}", response_model=EventRead)
async def update_event(
    slug: str, body: EventUpdate, service: EventService = Depends(get_event_service)
):
    """
    Update an event's title, description or deadline.

    Only the fields present in the request body are changed. Dates, slug
    and organizer cannot be changed.
    """
    return service.update_event(slug, body.model_dump(exclude_unset=True))


@router.get("/{slug}/export.csv")
async def export_event(slug: str, service: EventService = Depends(get_event_service)):
    """Download the availability grid as CSV (UTF-8 with BOM for spreadsheet apps)."""
    content = service.export_csv(slug)
    return HTTPResponse(
        content="\ufeff" + content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{slug}.csv"'},
    )
