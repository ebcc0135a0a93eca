from __future__ import annotations

from typing import ContextManager, NamedTuple, Protocol

from ..models import City, EventType, Slot
from .services import Booking


class PartitionRepository(Protocol):
    city: City

    def transaction(self) -> ContextManager[None]: ...

    def get(self, event_id: str, event_type: EventType) -> Slot | None: ...

    def find(self, event_id: str) -> tuple[EventType, Slot] | None: ...

    def create(self, event_id: str, event_type: EventType, capacity: int) -> Slot: ...

    def delete(self, event_id: str, event_type: EventType) -> Slot | None: ...

    def list_by_type(self, event_type: EventType) -> list[tuple[str, Slot]]: ...

    def bookings_of(self, participant_id: str) -> list[Booking]: ...


class ProbeResult(NamedTuple):
    exists: bool
    booked: bool


class PeerGateway(Protocol):
    def query_availability(self, city: City, event_type: EventType) -> str: ...

    def query_schedule(self, city: City, participant_id: str) -> str: ...

    def probe(self, city: City, participant_id: str, event_id: str, event_type: EventType) -> ProbeResult: ...

    def commit(self, city: City, participant_id: str, event_id: str, event_type: EventType) -> str: ...

    def revoke(self, city: City, participant_id: str, event_id: str) -> str: ...
