"""CSV export of an event's availability grid."""

import csv
import io
from collections.abc import Sequence

from datepoll.models import Event, Response
from datepoll.poll.aggregator import aggregate

AVAILABLE_MARK = "○"
UNAVAILABLE_MARK = "×"


def render_csv(event: Event, responses: Sequence[Response]) -> str:
    """
    Render the grid as CSV text.

    Layout:
        Event: <title>
        Organizer: <organizer>
        Deadline: <YYYY-MM-DD>
        Description: <description>      (only when there is one)
        <blank line>
        Name,<MM/DD HH:MM>,...
        <name>,○,×,...                  (one row per response)
        Available,<count>/<total>,...
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow([f"Event: {event.title}"])
    writer.writerow([f"Organizer: {event.organizer}"])
    writer.writerow([f"Deadline: {event.deadline.strftime('%Y-%m-%d')}"])
    if event.description:
        writer.writerow([f"Description: {event.description}"])
    writer.writerow([])

    writer.writerow(["Name", *(d.strftime("%m/%d %H:%M") for d in event.dates)])
    for response in responses:
        marks = [
            AVAILABLE_MARK if i < len(response.availability) and response.availability[i] else UNAVAILABLE_MARK
            for i in range(len(event.dates))
        ]
        writer.writerow([response.name, *marks])

    aggregation = aggregate(event.dates, responses)
    total = aggregation.total_responses
    writer.writerow(["Available", *(f"{count}/{total}" for count in aggregation.support_count)])

    return buffer.getvalue()
