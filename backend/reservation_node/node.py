from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from .config import Settings
from .domain.errors import PeerProtocolError, ReservationError
from .domain.repositories import PartitionRepository, PeerGateway
from .domain.validators import is_known_city
from .infrastructure.messenger import UdpPeerGateway
from .infrastructure.protocol import Opcode, PeerRequest, encode_probe_reply
from .infrastructure.repositories import InMemoryPartitionRepository
from .models import City, EventType
from .seed import seed_sample_slots
from .usecases import exchange as exchange_usecase
from .usecases import reservations as reservation_usecase
from .usecases import slots as slot_usecase
from .utils import auth
from .utils.audit_log import AuditOperation, AuditSink, emit_audit_log, get_audit_logger
from .utils.time import audit_timestamp

logger = logging.getLogger(__name__)

ADMIN_OPTIONS = (
    "\t1. Add reservation slot\n"
    "\t2. Remove reservation slot\n"
    "\t3. List reservation slot available\n"
    "\t4. Reserve ticket\n"
    "\t5. Get event schedule\n"
    "\t6. Cancel ticket\n"
    "\t7. Exchange ticket\n"
    "\tEnter 0 to exit."
)
PARTICIPANT_OPTIONS = (
    "\t1. Reserve ticket\n"
    "\t2. Get event schedule\n"
    "\t3. Cancel ticket\n"
    "\t4. Exchange ticket\n"
    "\tEnter 0 to exit."
)


@dataclass(frozen=True)
class OperationResult:
    success: bool
    message: str


class ReservationNode:
    """
    One city's reservation service: the seven client operations plus the
    answers it gives to peer requests. Every client operation is audited.
    """

    def __init__(self, repo: PartitionRepository, peers: PeerGateway, audit: AuditSink) -> None:
        self.repo = repo
        self.peers = peers
        self.audit = audit

    @property
    def city(self) -> City:
        return self.repo.city

    def add_reservation_slot(self, event_id: str, event_type: str, capacity: int) -> OperationResult:
        return self._perform(
            "addReservationSlot",
            ("eventID", "eventType", "capacity"),
            lambda: slot_usecase.add_slot(self.repo, event_id=event_id, event_type=event_type, capacity=capacity),
        )

    def remove_reservation_slot(self, event_id: str, event_type: str) -> OperationResult:
        return self._perform(
            "removeReservationSlot",
            ("eventID", "eventType"),
            lambda: slot_usecase.remove_slot(self.repo, event_id=event_id, event_type=event_type),
        )

    def list_reservation_slot_available(self, event_type: str) -> OperationResult:
        return self._perform(
            "listReservationSlotAvailable",
            ("eventType",),
            lambda: slot_usecase.list_availability(self.repo, self.peers, event_type=event_type),
            summary="Listed all available reservation slots",
        )

    def reserve_ticket(self, participant_id: str, event_id: str, event_type: str) -> OperationResult:
        return self._perform(
            "reserveTicket",
            ("participantID", "eventID", "eventType"),
            lambda: reservation_usecase.reserve_ticket(
                self.repo, participant_id=participant_id, event_id=event_id, event_type=event_type
            ),
        )

    def get_event_schedule(self, participant_id: str) -> OperationResult:
        return self._perform(
            "getEventSchedule",
            ("participantID",),
            lambda: reservation_usecase.event_schedule(self.repo, self.peers, participant_id=participant_id),
            summary=f"Listed all event schedule of user {participant_id}",
        )

    def cancel_ticket(self, participant_id: str, event_id: str) -> OperationResult:
        return self._perform(
            "cancelTicket",
            ("participantID", "eventID"),
            lambda: reservation_usecase.cancel_ticket(self.repo, participant_id=participant_id, event_id=event_id),
        )

    def exchange_tickets(
        self, participant_id: str, event_id: str, new_event_id: str, new_event_type: str
    ) -> OperationResult:
        return self._perform(
            "exchangeTickets",
            ("participantID", "eventID", "newEventID", "newEventType"),
            lambda: exchange_usecase.exchange_tickets(
                self.repo,
                self.peers,
                participant_id=participant_id,
                event_id=event_id,
                new_event_id=new_event_id,
                new_event_type=new_event_type,
            ),
        )

    def show_options(self, is_user_admin: bool) -> str:
        return ADMIN_OPTIONS if is_user_admin else PARTICIPANT_OPTIONS

    def is_admin(self, user_id: str) -> bool:
        return auth.is_admin(user_id)

    def check_city(self, event_id: str) -> bool:
        return is_known_city(event_id)

    def answer_peer(self, request: PeerRequest) -> str:
        """Serve one decoded datagram from another city node and return the reply text."""
        if request.opcode == Opcode.AVAILABILITY:
            return slot_usecase.list_local_availability(self.repo, self._peer_event_type(request.args[0]))
        if request.opcode == Opcode.SCHEDULE:
            return reservation_usecase.local_schedule(self.repo, request.args[0])
        if request.opcode == Opcode.PROBE:
            participant_id, event_id, event_type = request.args
            result = reservation_usecase.probe_slot(
                self.repo,
                participant_id=participant_id,
                event_id=event_id,
                event_type=self._peer_event_type(event_type),
            )
            return encode_probe_reply(result)
        if request.opcode == Opcode.COMMIT:
            return self.reserve_ticket(*request.args).message
        if request.opcode == Opcode.REVOKE:
            return self.cancel_ticket(*request.args).message
        raise PeerProtocolError(f"unhandled opcode {request.opcode}")

    def _peer_event_type(self, value: str) -> EventType:
        try:
            return EventType(value)
        except ValueError:
            raise PeerProtocolError(f"unknown event type {value!r}") from None

    def _perform(
        self,
        operation: AuditOperation,
        parameters: Sequence[str],
        action: Callable[[], str],
        *,
        summary: str | None = None,
    ) -> OperationResult:
        timestamp = audit_timestamp()
        try:
            message = action()
            success = True
        except ReservationError as exc:
            message = str(exc)
            success = False
        emit_audit_log(
            self.audit,
            timestamp=timestamp,
            operation=operation,
            parameters=parameters,
            success=success,
            response=summary if success and summary is not None else message,
        )
        return OperationResult(success=success, message=message)


def build_node(settings: Settings) -> ReservationNode:
    city = City(settings.city)
    repo = InMemoryPartitionRepository(city)
    if settings.seed_sample_data:
        seed_sample_slots(repo)
    peers = UdpPeerGateway(
        city,
        settings.peer_ports,
        host=settings.peer_host,
        timeout=settings.peer_timeout,
        retries=settings.peer_retries,
        backoff=settings.peer_backoff,
    )
    audit = get_audit_logger(city.value, settings.audit_log_dir)
    logger.info("node %s ready with peers %s", city, settings.peer_ports)
    return ReservationNode(repo, peers, audit)
