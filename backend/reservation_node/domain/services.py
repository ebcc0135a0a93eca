import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from ..models import EventType, event_date_code
from ..utils.time import parse_event_date
from .errors import AlreadyBookedError, SameDayConflictError, SlotFullError, WeeklyLimitError

logger = logging.getLogger(__name__)

WEEKLY_WINDOWS = 8
WEEKLY_LIMIT = 3


@dataclass(frozen=True)
class ReservationRequest:
    participant_id: str
    event_id: str
    event_type: EventType


@dataclass(frozen=True)
class SlotSnapshot:
    capacity: int
    booked: int
    participant_has_booking: bool


@dataclass(frozen=True)
class Booking:
    event_id: str
    event_type: EventType


def validate_reservation(snapshot: SlotSnapshot, request: ReservationRequest) -> int:
    """
    Pure validation: ensures the participant is not already in the slot and a seat is left.
    Returns remaining capacity after booking if OK. Raises domain errors otherwise.
    """
    if snapshot.participant_has_booking:
        raise AlreadyBookedError(
            f"User {request.participant_id} was not added to event {request.event_id} "
            "because user is already in the event"
        )
    remaining = snapshot.capacity - snapshot.booked
    if remaining <= 0:
        raise SlotFullError(f"Event with ID {request.event_id} is full")
    return remaining - 1


def ensure_not_same_day(request: ReservationRequest, booked_event_ids: Iterable[str]) -> None:
    """Reject a second booking on a day the participant is already booked, whatever the event type."""
    day = event_date_code(request.event_id)
    if any(event_date_code(booked) == day for booked in booked_event_ids):
        raise SameDayConflictError(
            f"Can't reserve user {request.participant_id} to event {request.event_id} "
            "because user is already reserved to another event on the same day"
        )


def ensure_within_weekly_limit(request: ReservationRequest, history: Iterable[Booking]) -> None:
    """
    Sliding-window cap for participants from another city.

    Eight windows of eight days are anchored at offsets -7..0 around the candidate
    date D; window k covers gaps ``[k - 7, k]`` where ``gap = E - D`` for every
    existing booking date E. The candidate itself sits at gap 0 and so counts in
    every window. Reaching WEEKLY_LIMIT in any window rejects the booking.
    """
    candidate = _event_date(request.event_id)
    if candidate is None:
        return

    dated: list[tuple[Booking, date]] = []
    for booking in history:
        booked_on = _event_date(booking.event_id)
        if booked_on is not None:
            dated.append((booking, booked_on))

    # Reached after ensure_not_same_day only when two date codes name the same
    # day, e.g. 300222 and 020322.
    for booking, booked_on in dated:
        if booking.event_type == request.event_type and booked_on == candidate:
            raise SameDayConflictError(
                f"Can't reserve user {request.participant_id} to event {request.event_id} "
                f"because user already has a {request.event_type} event on that day"
            )

    counters = [1] * WEEKLY_WINDOWS
    for _, booked_on in dated:
        gap = (booked_on - candidate).days
        for k in range(WEEKLY_WINDOWS):
            if k - 7 <= gap <= k:
                counters[k] += 1
    if max(counters) >= WEEKLY_LIMIT:
        raise WeeklyLimitError(
            f"Can't reserve user {request.participant_id} to event {request.event_id}: weekly limit exceeded"
        )


def _event_date(event_id: str) -> date | None:
    try:
        return parse_event_date(event_date_code(event_id))
    except ValueError:
        logger.warning("skipping weekly-limit comparison for unparseable event id %s", event_id)
        return None
