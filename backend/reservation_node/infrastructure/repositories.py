from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from ..domain.errors import SlotExistsError
from ..domain.repositories import PartitionRepository
from ..domain.services import Booking
from ..models import City, EventType, Slot


class InMemoryPartitionRepository(PartitionRepository):
    """
    The slots owned by one city node.

    Slots are grouped per event type, and a secondary index maps every event id
    to its type so ids stay unique across types. The index is only changed
    together with the slot maps, inside ``transaction()``.

    One re-entrant lock guards the whole partition. Callers hold it for every
    check-then-mutate sequence and never across a peer round trip. Reads take it
    too, so that listings see a consistent partition.
    """

    def __init__(self, city: City) -> None:
        self.city = city
        self._lock = threading.RLock()
        self._slots: dict[EventType, dict[str, Slot]] = {kind: {} for kind in EventType}
        self._index: dict[str, EventType] = {}

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            yield

    def get(self, event_id: str, event_type: EventType) -> Slot | None:
        with self._lock:
            return self._slots[event_type].get(event_id)

    def find(self, event_id: str) -> tuple[EventType, Slot] | None:
        with self._lock:
            kind = self._index.get(event_id)
            if kind is None:
                return None
            return kind, self._slots[kind][event_id]

    def create(self, event_id: str, event_type: EventType, capacity: int) -> Slot:
        with self._lock:
            if event_id in self._index:
                raise SlotExistsError(f"Adding reservation slot {event_id} to database rejected")
            slot = Slot(capacity=capacity)
            self._slots[event_type][event_id] = slot
            self._index[event_id] = event_type
            return slot

    def delete(self, event_id: str, event_type: EventType) -> Slot | None:
        with self._lock:
            slot = self._slots[event_type].pop(event_id, None)
            if slot is not None:
                del self._index[event_id]
            return slot

    def list_by_type(self, event_type: EventType) -> list[tuple[str, Slot]]:
        with self._lock:
            return sorted(self._slots[event_type].items())

    def bookings_of(self, participant_id: str) -> list[Booking]:
        with self._lock:
            return [
                Booking(event_id=event_id, event_type=kind)
                for event_id, kind in sorted(self._index.items())
                if self._slots[kind][event_id].has_booking(participant_id)
            ]
