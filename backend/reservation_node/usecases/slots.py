import logging

from ..domain.errors import (
    ForeignEventError,
    InvalidRequestError,
    PeerError,
    SlotBookedError,
    SlotExistsError,
    SlotNotFoundError,
)
from ..domain.repositories import PartitionRepository, PeerGateway
from ..domain.validators import validate_event, validate_event_type
from ..models import EventType, event_city, peer_cities

logger = logging.getLogger(__name__)


def add_slot(
    repo: PartitionRepository,
    *,
    event_id: str,
    event_type: str,
    capacity: int,
) -> str:
    kind = validate_event(event_id, event_type)
    if event_city(event_id) != repo.city:
        raise ForeignEventError(f"Event ID {event_id} does not belong to {repo.city}")
    if capacity < 1:
        raise InvalidRequestError("Invalid capacity")
    with repo.transaction():
        if repo.find(event_id) is not None:
            raise SlotExistsError(f"Adding reservation slot {event_id} to database rejected")
        repo.create(event_id, kind, capacity)
    return f"Added reservation slot {event_id} to database successfully"


def remove_slot(repo: PartitionRepository, *, event_id: str, event_type: str) -> str:
    kind = validate_event(event_id, event_type)
    with repo.transaction():
        slot = repo.get(event_id, kind)
        if slot is None:
            raise SlotNotFoundError(
                f"Removing reservation slot {event_id} from database failed because it does not exist"
            )
        if slot.booked > 0:
            raise SlotBookedError(
                f"Removing reservation slot {event_id} failed because event is booked by one or more users"
            )
        repo.delete(event_id, kind)
    return f"Removed reservation slot {event_id} from database successfully"


def list_local_availability(repo: PartitionRepository, event_type: EventType) -> str:
    return "".join(f"\t{event_id} {slot.remaining}\n" for event_id, slot in repo.list_by_type(event_type))


def list_availability(repo: PartitionRepository, peers: PeerGateway, *, event_type: str) -> str:
    """Local availability followed by what each peer reports; silent peers are left out."""
    kind = validate_event_type(event_type)
    listing = list_local_availability(repo, kind)
    for peer in peer_cities(repo.city):
        try:
            listing += as_block(peers.query_availability(peer, kind))
        except PeerError as exc:
            logger.warning("availability of %s omitted: %s", peer, exc)
    return listing


def as_block(reply: str) -> str:
    """Normalise a peer listing so that concatenated listings stay one entry per line."""
    reply = reply.rstrip()
    return f"{reply}\n" if reply else ""
