import pytest
from reservation_node.domain.errors import (
    AlreadyBookedError,
    ExchangeError,
    InvalidRequestError,
    NotBookedError,
    PeerUnavailableError,
    SameDayConflictError,
    SlotFullError,
    SlotNotFoundError,
    WeeklyLimitError,
)
from reservation_node.domain.repositories import ProbeResult
from reservation_node.infrastructure.repositories import InMemoryPartitionRepository
from reservation_node.models import City, EventType
from reservation_node.usecases import exchange as uc


class FakePeers:
    def __init__(self, *, probe: ProbeResult | None = None, commit_reply: str | None = None) -> None:
        self.probe_result = probe
        self.commit_reply = commit_reply
        self.calls: list[tuple[str, City, str]] = []

    def probe(self, city: City, participant_id: str, event_id: str, event_type: EventType) -> ProbeResult:
        self.calls.append(("probe", city, event_id))
        if self.probe_result is None:
            raise PeerUnavailableError(city, "timed out")
        return self.probe_result

    def commit(self, city: City, participant_id: str, event_id: str, event_type: EventType) -> str:
        self.calls.append(("commit", city, event_id))
        if self.commit_reply is None:
            raise PeerUnavailableError(city, "timed out")
        return self.commit_reply

    def revoke(self, city: City, participant_id: str, event_id: str) -> str:
        self.calls.append(("revoke", city, event_id))
        return f"User {participant_id} was not removed because user is not in event {event_id}"


def _repo() -> InMemoryPartitionRepository:
    repo = InMemoryPartitionRepository(City.TOR)
    repo.create("TORM010122", EventType.CONCERTS, 2)
    repo.create("TORE020122", EventType.THEATRE, 1)
    repo.get("TORM010122", EventType.CONCERTS).add_booking("TORU000001")  # type: ignore[union-attr]
    return repo


def _exchange(repo: InMemoryPartitionRepository, peers: FakePeers, new_event_id: str, new_event_type: str) -> str:
    return uc.exchange_tickets(
        repo,
        peers,  # type: ignore[arg-type]
        participant_id="TORU000001",
        event_id="TORM010122",
        new_event_id=new_event_id,
        new_event_type=new_event_type,
    )


def _holds(repo: InMemoryPartitionRepository, event_id: str, kind: EventType) -> bool:
    slot = repo.get(event_id, kind)
    return slot is not None and slot.has_booking("TORU000001")


def test_local_exchange_is_atomic() -> None:
    repo = _repo()
    peers = FakePeers()

    message = _exchange(repo, peers, "TORE020122", "Theatre")

    assert message == "Exchange between event TORM010122 and event TORE020122 for user TORU000001 was successful"
    assert not _holds(repo, "TORM010122", EventType.CONCERTS)
    assert _holds(repo, "TORE020122", EventType.THEATRE)
    assert peers.calls == []


def test_local_exchange_into_full_slot_keeps_old_booking() -> None:
    repo = _repo()
    repo.get("TORE020122", EventType.THEATRE).add_booking("TORU000009")  # type: ignore[union-attr]

    with pytest.raises(SlotFullError, match="TORE020122 can't be exchanged because it is full"):
        _exchange(repo, FakePeers(), "TORE020122", "Theatre")

    assert _holds(repo, "TORM010122", EventType.CONCERTS)


def test_local_exchange_checks_target_type() -> None:
    with pytest.raises(SlotNotFoundError, match="TORE020122 can't be exchanged because it does not exist"):
        _exchange(_repo(), FakePeers(), "TORE020122", "Concerts")


def test_local_exchange_keeps_same_day_exclusivity() -> None:
    repo = _repo()
    repo.create("TORE050122", EventType.THEATRE, 2)
    repo.create("TORA050122", EventType.ART_GALLERY, 2)
    repo.get("TORE050122", EventType.THEATRE).add_booking("TORU000001")  # type: ignore[union-attr]

    with pytest.raises(SameDayConflictError, match="another event on the same day"):
        _exchange(repo, FakePeers(), "TORA050122", "Art Gallery")

    assert [b.event_id for b in repo.bookings_of("TORU000001")] == ["TORE050122", "TORM010122"]


def test_local_exchange_ignores_the_released_booking_day() -> None:
    repo = _repo()
    repo.create("TORE010122", EventType.THEATRE, 1)

    _exchange(repo, FakePeers(), "TORE010122", "Theatre")

    assert [b.event_id for b in repo.bookings_of("TORU000001")] == ["TORE010122"]


def test_local_exchange_keeps_weekly_limit_for_visitors() -> None:
    repo = InMemoryPartitionRepository(City.TOR)
    for event_id in ("TORA030122", "TORA050122", "TORA200122", "TORA070122"):
        repo.create(event_id, EventType.ART_GALLERY, 2)
    for event_id in ("TORA030122", "TORA050122", "TORA200122"):
        repo.get(event_id, EventType.ART_GALLERY).add_booking("MTLU000001")  # type: ignore[union-attr]

    with pytest.raises(WeeklyLimitError):
        uc.exchange_tickets(
            repo,
            FakePeers(),  # type: ignore[arg-type]
            participant_id="MTLU000001",
            event_id="TORA200122",
            new_event_id="TORA070122",
            new_event_type="Art Gallery",
        )

    assert [b.event_id for b in repo.bookings_of("MTLU000001")] == ["TORA030122", "TORA050122", "TORA200122"]


def test_exchange_requires_held_booking() -> None:
    repo = _repo()
    with pytest.raises(NotBookedError, match="to-be-cancelled event TORE020122"):
        uc.exchange_tickets(
            repo,
            FakePeers(),  # type: ignore[arg-type]
            participant_id="TORU000001",
            event_id="TORE020122",
            new_event_id="TORM010122",
            new_event_type="Concerts",
        )
    with pytest.raises(SlotNotFoundError, match="TORA090122 can't be cancelled"):
        uc.exchange_tickets(
            repo,
            FakePeers(),  # type: ignore[arg-type]
            participant_id="TORU000001",
            event_id="TORA090122",
            new_event_id="TORM010122",
            new_event_type="Concerts",
        )


@pytest.mark.parametrize(
    ("new_event_id", "new_event_type", "reason"),
    [
        ("VANM010122", "Opera", "Invalid event type"),
        ("VANM01012", "Concerts", "Invalid event ID"),
        ("OTTM010122", "Concerts", "Invalid city"),
    ],
)
def test_exchange_validates_target(new_event_id: str, new_event_type: str, reason: str) -> None:
    with pytest.raises(InvalidRequestError) as excinfo:
        _exchange(_repo(), FakePeers(), new_event_id, new_event_type)
    assert str(excinfo.value) == reason


def test_remote_exchange_commits_after_local_release() -> None:
    repo = _repo()
    peers = FakePeers(
        probe=ProbeResult(exists=True, booked=False),
        commit_reply="User TORU000001 was successfully added to event VANA050122",
    )

    _exchange(repo, peers, "VANA050122", "Art Gallery")

    assert peers.calls == [("probe", City.VAN, "VANA050122"), ("commit", City.VAN, "VANA050122")]
    assert not _holds(repo, "TORM010122", EventType.CONCERTS)


@pytest.mark.parametrize(
    ("probe", "error"),
    [
        (ProbeResult(exists=False, booked=False), SlotNotFoundError),
        (ProbeResult(exists=True, booked=True), AlreadyBookedError),
    ],
)
def test_remote_probe_refusal_leaves_booking(probe: ProbeResult, error: type[Exception]) -> None:
    repo = _repo()
    peers = FakePeers(probe=probe)

    with pytest.raises(error):
        _exchange(repo, peers, "VANA050122", "Art Gallery")

    assert [call[0] for call in peers.calls] == ["probe"]
    assert _holds(repo, "TORM010122", EventType.CONCERTS)


def test_silent_target_fails_before_release() -> None:
    repo = _repo()
    with pytest.raises(ExchangeError, match="because VAN did not answer"):
        _exchange(repo, FakePeers(), "VANA050122", "Art Gallery")
    assert _holds(repo, "TORM010122", EventType.CONCERTS)


def test_refused_commit_restores_booking() -> None:
    repo = _repo()
    peers = FakePeers(probe=ProbeResult(exists=True, booked=False), commit_reply="Event with ID VANA050122 is full")

    with pytest.raises(ExchangeError) as excinfo:
        _exchange(repo, peers, "VANA050122", "Art Gallery")

    assert "VAN refused the reservation: Event with ID VANA050122 is full" in str(excinfo.value)
    assert str(excinfo.value).endswith("booking in event TORM010122 was restored")
    assert [call[0] for call in peers.calls] == ["probe", "commit"]
    assert _holds(repo, "TORM010122", EventType.CONCERTS)


def test_unconfirmed_commit_is_revoked_and_restored() -> None:
    repo = _repo()
    peers = FakePeers(probe=ProbeResult(exists=True, booked=False))

    with pytest.raises(ExchangeError, match="VAN did not confirm the reservation"):
        _exchange(repo, peers, "VANA050122", "Art Gallery")

    assert peers.calls[-1] == ("revoke", City.VAN, "VANA050122")
    assert _holds(repo, "TORM010122", EventType.CONCERTS)


def test_restore_reports_a_lost_booking() -> None:
    repo = _repo()
    slot = repo.get("TORM010122", EventType.CONCERTS)
    assert slot is not None

    class GrabbingPeers(FakePeers):
        def commit(self, city: City, participant_id: str, event_id: str, event_type: EventType) -> str:
            slot.add_booking("TORU000007")
            slot.add_booking("TORU000008")
            return "Event with ID VANA050122 is full"

    peers = GrabbingPeers(probe=ProbeResult(exists=True, booked=False))

    with pytest.raises(ExchangeError, match="booking in event TORM010122 could not be restored"):
        _exchange(repo, peers, "VANA050122", "Art Gallery")
