"""Availability aggregation for the event grid."""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from datepoll.models import Aggregation


class HasAvailability(Protocol):
    availability: list[bool]


def aggregate(
    dates: Sequence[datetime], responses: Sequence[HasAvailability]
) -> Aggregation:
    """
    Count support for each candidate date and mark the best ones.

    Position ``i`` of every output list refers to ``dates[i]``; dates are
    not reordered. Every response must have exactly one entry per date.
    Every date tied for the highest count is marked best, so with no
    responses at all every date is best with a count of zero.
    """
    support_count = [0] * len(dates)
    for response in responses:
        for i, available in enumerate(response.availability):
            if available:
                support_count[i] += 1

    max_support = max(support_count, default=0)
    is_best = [count == max_support for count in support_count]

    return Aggregation(
        support_count=support_count,
        max_support=max_support,
        is_best=is_best,
        best_indices=[i for i, best in enumerate(is_best) if best],
        total_responses=len(responses),
    )
