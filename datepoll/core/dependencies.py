"""FastAPI dependencies for the objects wired up at startup."""

from fastapi import Request

from datepoll.poll.service import EventService
from datepoll.poll.sweeper import ExpirySweeper


def get_event_service(request: Request) -> EventService:
    """The EventService built in the application lifespan."""
    return request.app.state.event_service


def get_sweeper(request: Request) -> ExpirySweeper:
    """The ExpirySweeper built in the application lifespan."""
    return request.app.state.sweeper
