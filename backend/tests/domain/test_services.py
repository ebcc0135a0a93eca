import pytest
from reservation_node.domain.errors import (
    AlreadyBookedError,
    SameDayConflictError,
    SlotFullError,
    WeeklyLimitError,
)
from reservation_node.domain.services import (
    Booking,
    ReservationRequest,
    SlotSnapshot,
    ensure_not_same_day,
    ensure_within_weekly_limit,
    validate_reservation,
)
from reservation_node.models import EventType


def _request(event_id: str = "TORA030122", event_type: EventType = EventType.ART_GALLERY) -> ReservationRequest:
    return ReservationRequest(participant_id="MTLU000001", event_id=event_id, event_type=event_type)


def _history(*event_ids: str, event_type: EventType = EventType.CONCERTS) -> list[Booking]:
    return [Booking(event_id=event_id, event_type=event_type) for event_id in event_ids]


def test_rejects_participant_already_in_slot() -> None:
    snap = SlotSnapshot(capacity=4, booked=4, participant_has_booking=True)
    with pytest.raises(AlreadyBookedError, match="already in the event"):
        validate_reservation(snap, _request())


def test_rejects_when_slot_is_full() -> None:
    snap = SlotSnapshot(capacity=2, booked=2, participant_has_booking=False)
    with pytest.raises(SlotFullError, match="is full"):
        validate_reservation(snap, _request())


def test_accepts_when_seat_left() -> None:
    snap = SlotSnapshot(capacity=4, booked=1, participant_has_booking=False)
    assert validate_reservation(snap, _request()) == 2


def test_same_day_conflict_ignores_event_type_and_time_of_day() -> None:
    with pytest.raises(SameDayConflictError, match="same day"):
        ensure_not_same_day(_request("TORE030122"), ["TORM030122"])


def test_same_day_allows_other_days() -> None:
    ensure_not_same_day(_request("TORE030122"), ["TORM040122", "TORA020122"])


def test_weekly_limit_rejects_third_booking_in_window() -> None:
    # 31-12-21 and 29-12-21 are 3 and 5 days before 03-01-22
    with pytest.raises(WeeklyLimitError, match="weekly limit exceeded"):
        ensure_within_weekly_limit(_request(), _history("TORM311221", "TORE291221"))


def test_weekly_limit_window_reaches_forward() -> None:
    with pytest.raises(WeeklyLimitError):
        ensure_within_weekly_limit(_request(), _history("TORM040122", "TORM100122"))


def test_weekly_limit_allows_bookings_spread_over_more_than_a_window() -> None:
    ensure_within_weekly_limit(_request(), _history("TORM301221", "TORM070122"))


def test_weekly_limit_allows_single_prior_booking() -> None:
    ensure_within_weekly_limit(_request(), _history("TORM020122"))


def test_weekly_limit_rejects_same_type_on_same_date() -> None:
    history = _history("TORM030122", event_type=EventType.ART_GALLERY)
    with pytest.raises(SameDayConflictError, match="Art Gallery event on that day"):
        ensure_within_weekly_limit(_request(), history)


def test_weekly_limit_same_date_other_type_only_counts_toward_window() -> None:
    ensure_within_weekly_limit(_request(), _history("TORM030122"))


def test_weekly_limit_skips_unparseable_history() -> None:
    ensure_within_weekly_limit(_request(), _history("TORMxx1221", "TORE291221"))
