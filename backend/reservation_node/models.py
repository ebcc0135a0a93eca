from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class City(StrEnum):
    MTL = "MTL"
    TOR = "TOR"
    VAN = "VAN"


class TimeOfDay(StrEnum):
    MORNING = "M"
    AFTERNOON = "A"
    EVENING = "E"


class EventType(StrEnum):
    CONCERTS = "Concerts"
    ART_GALLERY = "Art Gallery"
    THEATRE = "Theatre"


@dataclass
class Slot:
    """Capacity-bounded set of participant bookings for one event."""

    capacity: int
    bookings: set[str] = field(default_factory=set)

    @property
    def booked(self) -> int:
        return len(self.bookings)

    @property
    def remaining(self) -> int:
        return self.capacity - self.booked

    @property
    def is_full(self) -> bool:
        return self.booked >= self.capacity

    def has_booking(self, participant_id: str) -> bool:
        return participant_id in self.bookings

    def add_booking(self, participant_id: str) -> bool:
        if participant_id in self.bookings or self.is_full:
            return False
        self.bookings.add(participant_id)
        return True

    def remove_booking(self, participant_id: str) -> bool:
        if participant_id not in self.bookings:
            return False
        self.bookings.remove(participant_id)
        return True


def event_city(event_id: str) -> str:
    return event_id[:3]


def event_date_code(event_id: str) -> str:
    """The ``ddmmyy`` suffix shared by every event held on the same day."""
    return event_id[4:]


def peer_cities(city: City) -> list[City]:
    """Peers of ``city`` in the fixed order used for fan-out queries."""
    return sorted(other for other in City if other != city)
