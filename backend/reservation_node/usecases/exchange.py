"""
Moving one participant's booking from a slot on this node to another slot.

Same-node moves happen inside one partition transaction. A move to a slot owned
by another city is a probe, a local release, and a remote commit. The commit is
sent outside the partition lock; if it is refused or goes unanswered, the remote
booking is revoked (best effort) and the released booking is put back.
"""

import logging

from ..domain.errors import (
    AlreadyBookedError,
    ExchangeError,
    NotBookedError,
    PeerError,
    SlotFullError,
    SlotNotFoundError,
)
from ..domain.repositories import PartitionRepository, PeerGateway
from ..domain.services import ReservationRequest, ensure_not_same_day, ensure_within_weekly_limit
from ..domain.validators import validate_event_id, validate_event_type
from ..models import City, EventType, Slot, event_city
from ..utils.auth import is_local_participant
from .reservations import RESERVED_MESSAGE

logger = logging.getLogger(__name__)


def exchange_tickets(
    repo: PartitionRepository,
    peers: PeerGateway,
    *,
    participant_id: str,
    event_id: str,
    new_event_id: str,
    new_event_type: str,
) -> str:
    validate_event_id(event_id)
    new_kind = validate_event_type(new_event_type)
    validate_event_id(new_event_id)

    target_city = City(event_city(new_event_id))
    if target_city == repo.city:
        _exchange_locally(repo, participant_id, event_id, new_event_id, new_kind)
    else:
        _exchange_remotely(repo, peers, participant_id, event_id, new_event_id, new_kind, target_city)
    logger.info("exchanged %s for %s (%s)", event_id, new_event_id, participant_id)
    return (
        f"Exchange between event {event_id} and event {new_event_id} "
        f"for user {participant_id} was successful"
    )


def _ensure_holds_booking(
    repo: PartitionRepository, participant_id: str, event_id: str
) -> tuple[EventType, Slot]:
    found = repo.find(event_id)
    if found is None:
        raise SlotNotFoundError(f"Event {event_id} can't be cancelled because it does not exist")
    _, slot = found
    if not slot.has_booking(participant_id):
        raise NotBookedError(f"User is not reserved in the to-be-cancelled event {event_id}")
    return found


def _exchange_locally(
    repo: PartitionRepository,
    participant_id: str,
    event_id: str,
    new_event_id: str,
    new_kind: EventType,
) -> None:
    with repo.transaction():
        _, old_slot = _ensure_holds_booking(repo, participant_id, event_id)
        new_slot = repo.get(new_event_id, new_kind)
        if new_slot is None:
            raise SlotNotFoundError(f"Event {new_event_id} can't be exchanged because it does not exist")
        if new_slot.has_booking(participant_id):
            raise AlreadyBookedError(f"User is already reserved to the to-be-added event {new_event_id}")
        if new_slot.is_full:
            raise SlotFullError(f"Event {new_event_id} can't be exchanged because it is full")
        _ensure_booking_rules(repo, participant_id, event_id, new_event_id, new_kind)
        old_slot.remove_booking(participant_id)
        new_slot.add_booking(participant_id)


def _exchange_remotely(
    repo: PartitionRepository,
    peers: PeerGateway,
    participant_id: str,
    event_id: str,
    new_event_id: str,
    new_kind: EventType,
    target_city: City,
) -> None:
    _ensure_holds_booking(repo, participant_id, event_id)
    try:
        probe = peers.probe(target_city, participant_id, new_event_id, new_kind)
    except PeerError as exc:
        raise ExchangeError(f"Exchange to event {new_event_id} failed because {target_city} did not answer") from exc
    if not probe.exists:
        raise SlotNotFoundError(f"Event {new_event_id} can't be exchanged because it does not exist")
    if probe.booked:
        raise AlreadyBookedError(f"User is already reserved to the to-be-added event {new_event_id}")

    with repo.transaction():
        old_kind, old_slot = _ensure_holds_booking(repo, participant_id, event_id)
        old_slot.remove_booking(participant_id)

    expected = RESERVED_MESSAGE.format(participant_id=participant_id, event_id=new_event_id)
    try:
        reply = peers.commit(target_city, participant_id, new_event_id, new_kind)
    except PeerError as exc:
        logger.error("commit of %s to %s unconfirmed: %s", new_event_id, target_city, exc)
        _revoke(peers, target_city, participant_id, new_event_id)
        reason = f"{target_city} did not confirm the reservation"
    else:
        if reply == expected:
            return
        reason = f"{target_city} refused the reservation: {reply}"

    restored = _restore(repo, participant_id, event_id, old_kind)
    outcome = (
        f"booking in event {event_id} was restored"
        if restored
        else f"booking in event {event_id} could not be restored"
    )
    raise ExchangeError(f"Exchange to event {new_event_id} failed because {reason}; {outcome}")


def _revoke(peers: PeerGateway, city: City, participant_id: str, event_id: str) -> None:
    try:
        reply = peers.revoke(city, participant_id, event_id)
    except PeerError as exc:
        logger.error("could not revoke %s on %s for %s: %s", event_id, city, participant_id, exc)
    else:
        logger.info("revoke of %s on %s: %s", event_id, city, reply)


def _restore(repo: PartitionRepository, participant_id: str, event_id: str, kind: EventType) -> bool:
    with repo.transaction():
        slot = repo.get(event_id, kind)
        restored = slot is not None and slot.add_booking(participant_id)
    if not restored:
        logger.error("participant %s lost booking %s during a failed exchange", participant_id, event_id)
    return restored


def _ensure_booking_rules(
    repo: PartitionRepository,
    participant_id: str,
    event_id: str,
    new_event_id: str,
    new_kind: EventType,
) -> None:
    """Apply the reserve-time day rules to the new booking as if the old one were already released."""
    request = ReservationRequest(participant_id=participant_id, event_id=new_event_id, event_type=new_kind)
    history = [booking for booking in repo.bookings_of(participant_id) if booking.event_id != event_id]
    ensure_not_same_day(request, [booking.event_id for booking in history])
    if not is_local_participant(participant_id, repo.city):
        ensure_within_weekly_limit(request, history)
