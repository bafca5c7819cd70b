"""Response routes for submitting and editing availability."""
from fastapi import APIRouter, Depends

from datepoll.core.dependencies import get_event_service
from datepoll.models import ResponseCreate, ResponseRead, ResponseUpdate
from datepoll.poll.service import EventService

router = APIRouter(prefix="/api/events/{slug}/responses", tags=["responses"])


@router.post("", status_code=201, response_model=ResponseRead)
async def submit_response(
    slug: str, body: ResponseCreate, service: EventService = Depends(get_event_service)
):
    """
    Submit availability for an event.

    ``availability`` needs one boolean per event date, in the same order as
    ``event.dates``. Returns 400 once the deadline has passed or when the
    length does not match.
    """
    return service.submit_response(slug, body.name, body.availability)


@router.put("/{response_id}", response_model=ResponseRead)
async def update_response(
    slug: str,
    response_id: int,
    body: ResponseUpdate,
    service: EventService = Depends(get_event_service),
):
    """
    Edit an existing response in place.

    Only the fields present in the body are changed. Subject to the same
    deadline and length rules as a new submission.
    """
    return service.update_response(slug, response_id, body.model_dump(exclude_unset=True))
