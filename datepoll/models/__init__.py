from datepoll.models.event import Event
from datepoll.models.response import Response
from datepoll.models.schemas import (
    Aggregation,
    EventCreate,
    EventRead,
    EventUpdate,
    EventView,
    ResponseCreate,
    ResponseRead,
    ResponseUpdate,
    SweepReport,
)

__all__ = [
    "Event",
    "Response",
    "Aggregation",
    "EventCreate",
    "EventRead",
    "EventUpdate",
    "EventView",
    "ResponseCreate",
    "ResponseRead",
    "ResponseUpdate",
    "SweepReport",
]
