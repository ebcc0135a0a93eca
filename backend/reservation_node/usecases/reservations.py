import logging

from ..domain.errors import NotBookedError, PeerError, SlotNotFoundError
from ..domain.repositories import PartitionRepository, PeerGateway, ProbeResult
from ..domain.services import (
    ReservationRequest,
    SlotSnapshot,
    ensure_not_same_day,
    ensure_within_weekly_limit,
    validate_reservation,
)
from ..domain.validators import validate_event, validate_event_id
from ..models import EventType, peer_cities
from ..utils.auth import is_local_participant
from .slots import as_block

logger = logging.getLogger(__name__)

RESERVED_MESSAGE = "User {participant_id} was successfully added to event {event_id}"


def reserve_ticket(
    repo: PartitionRepository,
    *,
    participant_id: str,
    event_id: str,
    event_type: str,
) -> str:
    kind = validate_event(event_id, event_type)
    request = ReservationRequest(participant_id=participant_id, event_id=event_id, event_type=kind)
    with repo.transaction():
        slot = repo.get(event_id, kind)
        if slot is None:
            raise SlotNotFoundError(f"Event with ID {event_id} does not exist")
        snapshot = SlotSnapshot(
            capacity=slot.capacity,
            booked=slot.booked,
            participant_has_booking=slot.has_booking(participant_id),
        )
        validate_reservation(snapshot, request)

        history = repo.bookings_of(participant_id)
        ensure_not_same_day(request, [booking.event_id for booking in history])
        if not is_local_participant(participant_id, repo.city):
            ensure_within_weekly_limit(request, history)

        slot.add_booking(participant_id)
    logger.info("reserved %s for %s", event_id, participant_id)
    return RESERVED_MESSAGE.format(participant_id=participant_id, event_id=event_id)


def cancel_ticket(repo: PartitionRepository, *, participant_id: str, event_id: str) -> str:
    validate_event_id(event_id)
    with repo.transaction():
        found = repo.find(event_id)
        if found is None:
            raise SlotNotFoundError(f"Event with ID {event_id} does not exist")
        _, slot = found
        if not slot.remove_booking(participant_id):
            raise NotBookedError(
                f"User {participant_id} was not removed because user is not in event {event_id}"
            )
    logger.info("cancelled %s for %s", event_id, participant_id)
    return f"User {participant_id} was successfully removed from event {event_id}"


def local_schedule(repo: PartitionRepository, participant_id: str) -> str:
    return "".join(f"\t{booking.event_id}\n" for booking in repo.bookings_of(participant_id))


def event_schedule(repo: PartitionRepository, peers: PeerGateway, *, participant_id: str) -> str:
    schedule = local_schedule(repo, participant_id)
    for peer in peer_cities(repo.city):
        try:
            schedule += as_block(peers.query_schedule(peer, participant_id))
        except PeerError as exc:
            logger.warning("schedule from %s omitted: %s", peer, exc)
    return schedule


def probe_slot(repo: PartitionRepository, *, participant_id: str, event_id: str, event_type: EventType) -> ProbeResult:
    slot = repo.get(event_id, event_type)
    if slot is None:
        return ProbeResult(exists=False, booked=False)
    return ProbeResult(exists=True, booked=slot.has_booking(participant_id))
