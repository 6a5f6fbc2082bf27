# itinerary_studio/logic/status.py

from enum import Enum
from typing import Dict

from itinerary_studio.core.errors import InvalidTransitionError
from itinerary_studio.models.itinerary import ItineraryStatus


class StatusEvent(str, Enum):
    SHARE = "share"        # owner sends the share link
    COMMENT = "comment"    # client feedback or owner reply appended
    APPROVE = "approve"    # client approves the itinerary
    COMPLETE = "complete"  # administrative close-out


S = ItineraryStatus

# event -> {current status: next status}; a missing entry means the move is rejected
TRANSITIONS: Dict[StatusEvent, Dict[ItineraryStatus, ItineraryStatus]] = {
    StatusEvent.SHARE: {
        S.DRAFT: S.SHARED,
        S.SHARED: S.SHARED,
        # re-sharing never moves an itinerary backwards
        S.FEEDBACK: S.FEEDBACK,
        S.APPROVED: S.APPROVED,
    },
    StatusEvent.COMMENT: {
        S.DRAFT: S.FEEDBACK,
        S.SHARED: S.FEEDBACK,
        S.FEEDBACK: S.FEEDBACK,
    },
    StatusEvent.APPROVE: {
        S.DRAFT: S.APPROVED,
        S.SHARED: S.APPROVED,
        S.FEEDBACK: S.APPROVED,
        S.APPROVED: S.APPROVED,
    },
    StatusEvent.COMPLETE: {
        S.APPROVED: S.COMPLETED,
        S.COMPLETED: S.COMPLETED,
    },
}


def transition(current: ItineraryStatus, event: StatusEvent) -> ItineraryStatus:
    """
    Returns the status an itinerary moves to when `event` happens in `current`.
    Raises InvalidTransitionError for moves the lifecycle does not allow.
    """
    current = ItineraryStatus(current)
    try:
        return TRANSITIONS[StatusEvent(event)][current]
    except KeyError:
        raise InvalidTransitionError(
            f"Cannot {StatusEvent(event).value} an itinerary in status '{current.value}'"
        ) from None


def can_transition(current: ItineraryStatus, event: StatusEvent) -> bool:
    return ItineraryStatus(current) in TRANSITIONS[StatusEvent(event)]
